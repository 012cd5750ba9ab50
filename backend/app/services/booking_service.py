"""
Booking service: reserves one seat on an event for an authenticated user.
"""
import logging
from dataclasses import dataclass
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.exceptions import AlreadyBooked, EventFull
from app.models.event import Event, EventBooking
from app.models.notification import NotificationOutbox
from app.services import event_service, user_service
from app.services.notification_service import (
    EmailSender, deliver_or_raise, enqueue_booking_confirmation
)

logger = logging.getLogger(__name__)


@dataclass
class BookingResult:
    """Outcome of a committed booking."""
    event: Event
    notification: NotificationOutbox
    email_sent: bool


def _rejection_reason(db: Session, event_id: int, user_id: int):
    """Work out why a seat claim matched no row. Call after rollback."""
    if event_service.has_booking(db, event_id, user_id):
        return AlreadyBooked()
    return EventFull()


def book_seat(
    db: Session,
    event_id: int,
    user_id: int,
    sender: EmailSender,
    deliver_now: bool = True
) -> BookingResult:
    """
    Book one seat on an event for a user.

    Checks, in order and before any write: the event exists, the user exists,
    a seat is free, the user has not booked this event yet. The seat is then
    taken with a single conditional update, and the booking row and the
    confirmation email are written in the same transaction.

    With deliver_now the confirmation is sent before returning; a transport
    failure raises NotificationFailed but the booking stays committed and the
    email stays in the outbox for a later retry.

    Raises:
        EventNotFound, UserNotFound, EventFull, AlreadyBooked, NotificationFailed
    """
    event = event_service.get_event(db, event_id)
    user = user_service.get_user(db, user_id)

    if event.is_full:
        raise EventFull()

    if event_service.has_booking(db, event_id, user_id):
        raise AlreadyBooked()

    if not event_service.claim_seat(db, event_id, user_id):
        db.rollback()
        raise _rejection_reason(db, event_id, user_id)

    db.add(EventBooking(event_id=event_id, user_id=user_id))
    notification = enqueue_booking_confirmation(db, user, event)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Duplicate booking of event {event_id} by user {user_id} rejected on commit")
        raise AlreadyBooked()

    db.refresh(event)
    logger.info(
        f"User {user_id} booked event {event_id} "
        f"({event.booked_seats}/{event.capacity} seats taken)"
    )

    email_sent = False
    if deliver_now:
        deliver_or_raise(db, notification, sender)
        email_sent = True

    return BookingResult(event=event, notification=notification, email_sent=email_sent)
