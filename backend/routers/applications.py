from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import EmailStr, TypeAdapter, ValidationError as PydanticValidationError
from typing import Optional

from database import get_db
from errors import ValidationError
from models import Application, ApplicationStatus
from schemas import (
    ApplicantSummary,
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatusUpdate,
    LeadershipApplicants,
    SubpostEnum,
)
from application_review import (
    LEADERSHIP_POSTS,
    find_applications_by_email,
    get_application_or_404,
    review_application,
)

router = APIRouter()

_email_adapter = TypeAdapter(EmailStr)


@router.post("/smecpost", status_code=status.HTTP_201_CREATED)
def submit_application(payload: ApplicationCreate, db: Session = Depends(get_db)):
    application = Application(
        name=payload.name.strip(),
        roll_number=payload.roll_number.strip(),
        contact_number=payload.phone,
        email=str(payload.email).lower() if payload.email else None,
        post=payload.position.strip(),
        subpost=(payload.subpost or SubpostEnum.LEAD).value,
        additional_details=payload.additional_details,
        status=ApplicationStatus.PENDING,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    return {"message": "Application submitted", "data": ApplicationResponse.model_validate(application)}


@router.get("/smecpost")
def list_applications(
    db: Session = Depends(get_db),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=200, ge=1, le=500)
):
    query = db.query(Application)
    if status_filter:
        try:
            query = query.filter(Application.status == ApplicationStatus(status_filter))
        except ValueError:
            raise ValidationError("Invalid status value")
    applications = (
        query.order_by(Application.created_at.desc(), Application.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return {"success": True, "data": [ApplicationResponse.model_validate(a) for a in applications]}


@router.get("/smecpost/application")
def get_applications_by_email(email: Optional[str] = Query(default=None), db: Session = Depends(get_db)):
    if not email or not email.strip():
        raise ValidationError("Email is required")
    try:
        normalized = str(_email_adapter.validate_python(email.strip())).lower()
    except PydanticValidationError:
        raise ValidationError("Invalid email address")
    applications = find_applications_by_email(db, normalized)
    return {"success": True, "data": [ApplicationResponse.model_validate(a) for a in applications]}


@router.get("/smecpost/{application_id}")
def get_application(application_id: int, db: Session = Depends(get_db)):
    application = get_application_or_404(db, application_id)
    return {"success": True, "data": ApplicationResponse.model_validate(application)}


@router.put("/smecpost/{application_id}")
def update_application_status(
    application_id: int,
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db)
):
    application = review_application(db, application_id, payload.status)
    return {"message": "Status updated", "data": ApplicationResponse.model_validate(application)}


@router.delete("/smecpost/{application_id}")
def delete_application(application_id: int, db: Session = Depends(get_db)):
    application = get_application_or_404(db, application_id)
    data = ApplicationResponse.model_validate(application)
    db.delete(application)
    db.commit()
    return {"message": "Application deleted", "data": data}


@router.get("/users/accepted")
def list_leadership_applicants(db: Session = Depends(get_db)):
    rows = (
        db.query(Application)
        .filter(Application.post.in_(LEADERSHIP_POSTS))
        .filter(Application.subpost.in_([SubpostEnum.LEAD.value, SubpostEnum.CO_LEAD.value]))
        .order_by(Application.created_at.desc(), Application.id.desc())
        .all()
    )
    data = LeadershipApplicants(
        lead=[ApplicantSummary.model_validate(r) for r in rows if r.subpost == SubpostEnum.LEAD.value],
        co_lead=[ApplicantSummary.model_validate(r) for r in rows if r.subpost == SubpostEnum.CO_LEAD.value],
    )
    return {"success": True, "data": data}
