"""
Event routes: creation with image upload, upcoming listing, detail, and seat booking.
"""
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session, sessionmaker
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.db.session import get_db
from app.schemas.event import (
    EventCreate, EventDetailResponse, EventEnvelope, EventPage, EventResponse
)
from app.api.dependencies import get_current_user_id
from app.services import booking_service, event_service
from app.services.image_service import LocalImageStore, get_image_store
from app.services.notification_service import (
    EmailSender, deliver_pending_notification, get_email_sender
)

router = APIRouter(prefix="/events", tags=["events"])


def _parse_event_form(title, description, location, date, capacity) -> EventCreate:
    """Validate multipart form fields into an EventCreate."""
    if not all([title, description, location, date, capacity]):
        raise ValidationError("All fields are required.")
    try:
        return EventCreate(
            title=title,
            description=description,
            location=location,
            date=date,
            capacity=capacity,
        )
    except PydanticValidationError as e:
        fields = ", ".join(sorted({str(err["loc"][-1]) for err in e.errors() if err.get("loc")}))
        raise ValidationError(f"Invalid event fields: {fields}")


@router.post("/create", response_model=EventEnvelope, status_code=status.HTTP_201_CREATED)
async def create_event(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    capacity: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    image_store: LocalImageStore = Depends(get_image_store),
    db: Session = Depends(get_db)
):
    """Create an event; the image is uploaded first and its URL stored."""
    event_data = _parse_event_form(title, description, location, date, capacity)

    if image is None:
        raise ValidationError("Image is required.")

    image_url = await image_store.upload(image)
    event = event_service.create_event(db, event_data, image_url)

    return EventEnvelope(
        message="Event created successfully",
        event=EventResponse.model_validate(event),
    )


@router.get("/upcoming", response_model=EventPage)
async def get_upcoming_events(
    page: int = Query(1, ge=1),
    limit: int = Query(5, ge=1),
    db: Session = Depends(get_db)
):
    """Events dated now or later, soonest first. Limit has no upper bound."""
    events, total = event_service.list_upcoming(db, page=page, limit=limit)
    return EventPage(
        message="Upcoming events fetched successfully",
        total=total,
        page=page,
        limit=limit,
        events=[EventResponse.model_validate(e) for e in events],
    )


@router.get("/event-detail/{event_id}", response_model=EventDetailResponse)
async def get_event_details(event_id: int, db: Session = Depends(get_db)):
    """Get one event by ID."""
    event = event_service.get_event(db, event_id)
    return EventDetailResponse(event=EventResponse.model_validate(event))


@router.post("/{event_id}/book", response_model=EventEnvelope)
async def book_seat(
    event_id: int,
    background_tasks: BackgroundTasks,
    user_id: int = Depends(get_current_user_id),
    sender: EmailSender = Depends(get_email_sender),
    db: Session = Depends(get_db)
):
    """Book one seat on the event for the authenticated user."""
    deliver_now = settings.NOTIFICATION_DELIVERY != "background"
    result = booking_service.book_seat(db, event_id, user_id, sender, deliver_now=deliver_now)

    if deliver_now:
        message = "Seat booked successfully, and email sent"
    else:
        background_tasks.add_task(
            deliver_pending_notification,
            sessionmaker(bind=db.get_bind(), autoflush=False),
            result.notification.id,
            sender,
        )
        message = "Seat booked successfully, confirmation email queued"

    return EventEnvelope(message=message, event=EventResponse.model_validate(result.event))
