from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from models import Account, ContactMessage
from schemas import ContactCreate, ContactResponse
from security import require_admin

router = APIRouter()


@router.post("/contact", status_code=status.HTTP_201_CREATED)
def submit_contact(payload: ContactCreate, db: Session = Depends(get_db)):
    account_id = None
    if payload.user_id is not None:
        account = db.query(Account.id).filter(Account.id == payload.user_id).first()
        account_id = account.id if account else None

    db.add(ContactMessage(
        name=payload.name.strip(),
        email=str(payload.email),
        department=payload.department,
        subject=payload.subject.strip(),
        message=payload.message,
        account_id=account_id,
    ))
    db.commit()
    return {"success": True, "message": "Message received successfully."}


@router.get("/contact")
def list_contact_messages(
    _: Account = Depends(require_admin),
    db: Session = Depends(get_db),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=200, ge=1, le=500)
):
    messages = (
        db.query(ContactMessage)
        .order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return {"success": True, "data": [ContactResponse.model_validate(m) for m in messages]}
