from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from errors import NotFoundError, ValidationError
from models import News
from schemas import NewsResponse
from storage import delete_blob, upload_image

router = APIRouter()

NEWS_IMAGE_FOLDER = "news"


def _get_news_or_404(db: Session, news_id: int) -> News:
    item = db.query(News).filter(News.id == news_id).first()
    if not item:
        raise NotFoundError("News not found")
    return item


@router.post("/news", status_code=status.HTTP_201_CREATED)
def create_news(
    title: str = Form(...),
    content: str = Form(...),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    if not title.strip() or not content.strip():
        raise ValidationError("Title and content are required")

    item = News(title=title.strip(), content=content)
    if image is not None and image.filename:
        uploaded = upload_image(image, NEWS_IMAGE_FOLDER)
        item.image = uploaded["url"]
        item.image_key = uploaded["key"]

    db.add(item)
    db.commit()
    db.refresh(item)
    return {"success": True, "message": "News created", "data": NewsResponse.model_validate(item)}


@router.get("/news")
def list_news(
    db: Session = Depends(get_db),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=200, ge=1, le=500)
):
    items = db.query(News).order_by(News.date.desc(), News.id.desc()).offset(skip).limit(limit).all()
    return {"success": True, "data": [NewsResponse.model_validate(n) for n in items]}


@router.get("/news/{news_id}")
def get_news(news_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": NewsResponse.model_validate(_get_news_or_404(db, news_id))}


@router.put("/news/{news_id}")
def update_news(
    news_id: int,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    item = _get_news_or_404(db, news_id)

    if title is not None:
        if not title.strip():
            raise ValidationError("Title must not be blank")
        item.title = title.strip()
    if content is not None:
        item.content = content
    if image is not None and image.filename:
        uploaded = upload_image(image, NEWS_IMAGE_FOLDER)
        delete_blob(item.image_key)
        item.image = uploaded["url"]
        item.image_key = uploaded["key"]
    item.date = datetime.now(timezone.utc)

    db.commit()
    db.refresh(item)
    return {"success": True, "message": "News updated", "data": NewsResponse.model_validate(item)}


@router.delete("/news/{news_id}")
def delete_news(news_id: int, db: Session = Depends(get_db)):
    item = _get_news_or_404(db, news_id)
    delete_blob(item.image_key)
    db.delete(item)
    db.commit()
    return {"success": True, "message": "News deleted successfully"}
