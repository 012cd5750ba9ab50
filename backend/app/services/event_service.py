"""
Event service: event store access and the upcoming-event read paths.
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload
from app.core.exceptions import EventNotFound
from app.core.utils import page_offset, utc_now
from app.models.event import Event, EventBooking
from app.schemas.event import EventCreate

logger = logging.getLogger(__name__)


def find_by_id(db: Session, event_id: int) -> Optional[Event]:
    return db.query(Event).options(
        selectinload(Event.bookings)
    ).filter(Event.id == event_id).first()


def get_event(db: Session, event_id: int) -> Event:
    """Load an event or raise EventNotFound."""
    event = find_by_id(db, event_id)
    if not event:
        raise EventNotFound()
    return event


def create_event(db: Session, event_data: EventCreate, image_url: str) -> Event:
    """Persist a new event with no bookings."""
    event = Event(
        title=event_data.title,
        description=event_data.description,
        location=event_data.location,
        date=event_data.date,
        capacity=event_data.capacity,
        booked_seats=0,
        image=image_url,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info(f"Created event {event.id} '{event.title}' with capacity {event.capacity}")
    return event


def save_event(db: Session, event: Event) -> Event:
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def _event_query(db: Session, filters: Sequence, booked_by: Optional[int] = None):
    query = db.query(Event)
    if booked_by is not None:
        query = query.join(EventBooking, EventBooking.event_id == Event.id).filter(
            EventBooking.user_id == booked_by
        )
    return query.filter(*filters)


def find_range(
    db: Session,
    filters: Sequence,
    order_by: Sequence,
    skip: int,
    limit: int,
    booked_by: Optional[int] = None
) -> List[Event]:
    """Return one slice of events matching filters in the given order."""
    return _event_query(db, filters, booked_by).options(
        selectinload(Event.bookings)
    ).order_by(*order_by).offset(skip).limit(limit).all()


def count(db: Session, filters: Sequence, booked_by: Optional[int] = None) -> int:
    return _event_query(db, filters, booked_by).count()


def upcoming_filters(now: Optional[datetime] = None) -> list:
    """Events dated at or after now."""
    return [Event.date >= (now or utc_now())]


def list_upcoming(
    db: Session,
    page: int = 1,
    limit: int = 5,
    now: Optional[datetime] = None
) -> Tuple[List[Event], int]:
    """Upcoming events ascending by date, one page at a time, plus the total."""
    filters = upcoming_filters(now)
    events = find_range(
        db,
        filters,
        order_by=[Event.date.asc(), Event.id.asc()],
        skip=page_offset(page, limit),
        limit=limit,
    )
    return events, count(db, filters)


def list_user_upcoming_bookings(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: int = 5,
    now: Optional[datetime] = None
) -> Tuple[List[Event], int]:
    """
    Upcoming events the user has booked, ascending by date.

    Events on the same date keep the order in which they were booked.
    """
    filters = upcoming_filters(now)
    events = find_range(
        db,
        filters,
        order_by=[Event.date.asc(), EventBooking.id.asc()],
        skip=page_offset(page, limit),
        limit=limit,
        booked_by=user_id,
    )
    return events, count(db, filters, booked_by=user_id)


def has_booking(db: Session, event_id: int, user_id: int) -> bool:
    return db.query(EventBooking.id).filter(
        EventBooking.event_id == event_id,
        EventBooking.user_id == user_id
    ).first() is not None


def claim_seat(db: Session, event_id: int, user_id: int) -> bool:
    """
    Take one seat for the user in a single conditional update.

    The row changes only while a seat is free and the user holds no booking
    for the event. Returns False when either no longer holds. Does not commit.
    """
    already_booked = db.query(EventBooking.id).filter(
        EventBooking.event_id == event_id,
        EventBooking.user_id == user_id
    ).exists()

    stmt = (
        update(Event)
        .where(
            Event.id == event_id,
            Event.booked_seats < Event.capacity,
            ~already_booked,
        )
        .values(booked_seats=Event.booked_seats + 1)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    return result.rowcount == 1
