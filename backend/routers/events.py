from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from errors import ConflictError, NotFoundError
from models import Event, EventCategory, EventStatus
from schemas import EventCreate, EventResponse, EventStatusEnum, EventUpdate

router = APIRouter()


def _get_event_or_404(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError("Event not found")
    return event


def _commit_event(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("An event with this title already exists")


@router.post("/events", status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, db: Session = Depends(get_db)):
    if db.query(Event.id).filter(Event.title == payload.title).first():
        raise ConflictError("An event with this title already exists")

    event = Event(
        title=payload.title,
        start_date=payload.start_date,
        category=EventCategory(payload.category.value),
        subcategory=payload.subcategory,
        description=payload.description,
        status=EventStatus(payload.status.value),
        ticket_price=payload.ticket_price,
        image_url=payload.image_url,
        registration_deadline=payload.registration_deadline,
        location_details=payload.location_details,
    )
    db.add(event)
    _commit_event(db)
    db.refresh(event)
    return {"success": True, "message": "Event created successfully", "data": EventResponse.model_validate(event)}


@router.get("/events")
def list_events(
    status_filter: Optional[EventStatusEnum] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=200, ge=1, le=500)
):
    query = db.query(Event)
    if status_filter is not None:
        query = query.filter(Event.status == EventStatus(status_filter.value))
    events = query.order_by(Event.created_at.desc(), Event.id.desc()).offset(skip).limit(limit).all()
    return {"success": True, "data": [EventResponse.model_validate(e) for e in events]}


@router.get("/events/{event_id}")
def get_event(event_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": EventResponse.model_validate(_get_event_or_404(db, event_id))}


@router.put("/events/{event_id}")
def update_event(event_id: int, payload: EventUpdate, db: Session = Depends(get_db)):
    event = _get_event_or_404(db, event_id)

    if payload.title is not None:
        event.title = payload.title.strip()
    if payload.start_date is not None:
        event.start_date = payload.start_date
    if payload.category is not None:
        event.category = EventCategory(payload.category.value)
    if payload.subcategory is not None:
        event.subcategory = payload.subcategory
    if payload.description is not None:
        event.description = payload.description
    if payload.status is not None:
        event.status = EventStatus(payload.status.value)
    if payload.ticket_price is not None:
        event.ticket_price = payload.ticket_price
    if payload.image_url is not None:
        event.image_url = payload.image_url
    if payload.registration_deadline is not None:
        event.registration_deadline = payload.registration_deadline
    if payload.location_details is not None:
        event.location_details = payload.location_details

    _commit_event(db)
    db.refresh(event)
    return {"success": True, "message": "Event updated successfully", "data": EventResponse.model_validate(event)}


@router.delete("/events/{event_id}")
def delete_event(event_id: int, db: Session = Depends(get_db)):
    event = _get_event_or_404(db, event_id)
    db.delete(event)
    db.commit()
    return {"success": True, "message": "Event deleted successfully"}
