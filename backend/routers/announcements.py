from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from errors import NotFoundError
from models import Announcement, Audience
from schemas import AnnouncementCreate, AnnouncementResponse, AnnouncementUpdate, AudienceEnum

router = APIRouter()


def _get_announcement_or_404(db: Session, announcement_id: int) -> Announcement:
    announcement = db.query(Announcement).filter(Announcement.id == announcement_id).first()
    if not announcement:
        raise NotFoundError("Announcement not found")
    return announcement


@router.post("/announcements", status_code=status.HTTP_201_CREATED)
def create_announcement(payload: AnnouncementCreate, db: Session = Depends(get_db)):
    announcement = Announcement(
        title=payload.title,
        description=payload.description,
        audience=Audience(payload.audience.value),
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    return {
        "success": True,
        "message": "Announcement created successfully",
        "data": AnnouncementResponse.model_validate(announcement),
    }


@router.get("/announcements")
def list_announcements(
    audience: Optional[AudienceEnum] = Query(default=None),
    db: Session = Depends(get_db),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=200, ge=1, le=500)
):
    query = db.query(Announcement)
    if audience is not None:
        # "All" announcements are visible to every audience
        query = query.filter(Announcement.audience.in_([Audience.ALL, Audience(audience.value)]))
    announcements = (
        query.order_by(Announcement.created_at.desc(), Announcement.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return {"success": True, "data": [AnnouncementResponse.model_validate(a) for a in announcements]}


@router.get("/announcements/{announcement_id}")
def get_announcement(announcement_id: int, db: Session = Depends(get_db)):
    announcement = _get_announcement_or_404(db, announcement_id)
    return {"success": True, "data": AnnouncementResponse.model_validate(announcement)}


@router.put("/announcements/{announcement_id}")
def update_announcement(announcement_id: int, payload: AnnouncementUpdate, db: Session = Depends(get_db)):
    announcement = _get_announcement_or_404(db, announcement_id)
    if payload.title is not None:
        announcement.title = payload.title.strip()
    if payload.description is not None:
        announcement.description = payload.description
    if payload.audience is not None:
        announcement.audience = Audience(payload.audience.value)
    db.commit()
    db.refresh(announcement)
    return {
        "success": True,
        "message": "Announcement updated successfully",
        "data": AnnouncementResponse.model_validate(announcement),
    }


@router.delete("/announcements/{announcement_id}")
def delete_announcement(announcement_id: int, db: Session = Depends(get_db)):
    announcement = _get_announcement_or_404(db, announcement_id)
    db.delete(announcement)
    db.commit()
    return {"success": True, "message": "Announcement deleted successfully"}
