from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session, joinedload

from database import get_db
from errors import ConflictError, NotFoundError, ValidationError
from models import Application, Category, Game
from schemas import CategoryResponse
from storage import delete_blob, upload_image

router = APIRouter()

CARD_IMAGE_FOLDER = "card-images"
BANNER_IMAGE_FOLDER = "banner-images"


def _get_category_or_404(db: Session, category_id: int) -> Category:
    category = (
        db.query(Category)
        .options(joinedload(Category.lead), joinedload(Category.co_lead))
        .filter(Category.id == category_id)
        .first()
    )
    if not category:
        raise NotFoundError("Category not found")
    return category


def _ensure_applicant(db: Session, application_id: Optional[int], label: str) -> None:
    if application_id is None:
        return
    if not db.query(Application.id).filter(Application.id == application_id).first():
        raise ValidationError(f"{label} application not found")


def _replace_image(category: Category, file: UploadFile, url_attr: str, key_attr: str, folder: str) -> None:
    uploaded = upload_image(file, folder)
    delete_blob(getattr(category, key_attr))
    setattr(category, url_attr, uploaded["url"])
    setattr(category, key_attr, uploaded["key"])


@router.post("/categories", status_code=status.HTTP_201_CREATED)
def create_category(
    title: str = Form(...),
    description: Optional[str] = Form(None),
    lead_id: Optional[int] = Form(None),
    co_lead_id: Optional[int] = Form(None),
    card_image: Optional[UploadFile] = File(None, alias="cardImage"),
    banner_image: Optional[UploadFile] = File(None, alias="bannerImage"),
    db: Session = Depends(get_db)
):
    if not title.strip():
        raise ValidationError("Title is required")
    _ensure_applicant(db, lead_id, "Lead")
    _ensure_applicant(db, co_lead_id, "Co-lead")

    category = Category(
        title=title.strip(),
        description=description,
        lead_id=lead_id,
        co_lead_id=co_lead_id,
    )
    if card_image is not None and card_image.filename:
        _replace_image(category, card_image, "card_image", "card_image_key", CARD_IMAGE_FOLDER)
    if banner_image is not None and banner_image.filename:
        _replace_image(category, banner_image, "banner_image", "banner_image_key", BANNER_IMAGE_FOLDER)

    db.add(category)
    db.commit()
    category = _get_category_or_404(db, category.id)
    return {"success": True, "message": "Category created", "data": CategoryResponse.model_validate(category)}


@router.get("/categories")
def list_categories(
    db: Session = Depends(get_db),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=200, ge=1, le=500)
):
    categories = (
        db.query(Category)
        .options(joinedload(Category.lead), joinedload(Category.co_lead))
        .order_by(Category.created_at.desc(), Category.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return {"success": True, "data": [CategoryResponse.model_validate(c) for c in categories]}


@router.get("/categories/{category_id}")
def get_category(category_id: int, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)
    return {"success": True, "data": CategoryResponse.model_validate(category)}


@router.put("/categories/{category_id}")
def update_category(
    category_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    lead_id: Optional[int] = Form(None),
    co_lead_id: Optional[int] = Form(None),
    card_image: Optional[UploadFile] = File(None, alias="cardImage"),
    banner_image: Optional[UploadFile] = File(None, alias="bannerImage"),
    db: Session = Depends(get_db)
):
    category = _get_category_or_404(db, category_id)

    if title is not None:
        if not title.strip():
            raise ValidationError("Title must not be blank")
        category.title = title.strip()
    if description is not None:
        category.description = description
    if lead_id is not None:
        _ensure_applicant(db, lead_id, "Lead")
        category.lead_id = lead_id
    if co_lead_id is not None:
        _ensure_applicant(db, co_lead_id, "Co-lead")
        category.co_lead_id = co_lead_id
    if card_image is not None and card_image.filename:
        _replace_image(category, card_image, "card_image", "card_image_key", CARD_IMAGE_FOLDER)
    if banner_image is not None and banner_image.filename:
        _replace_image(category, banner_image, "banner_image", "banner_image_key", BANNER_IMAGE_FOLDER)

    db.commit()
    category = _get_category_or_404(db, category_id)
    return {"success": True, "message": "Category updated", "data": CategoryResponse.model_validate(category)}


@router.delete("/categories/{category_id}")
def delete_category(category_id: int, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)

    if db.query(Game.id).filter(Game.category_id == category_id).first():
        raise ConflictError("Category still has games")

    delete_blob(category.card_image_key)
    delete_blob(category.banner_image_key)

    db.delete(category)
    db.commit()
    return {"success": True, "message": "Category and its images deleted"}
