"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User
from app.models.event import Event, EventBooking
from app.models.notification import NotificationOutbox, NotificationStatus

__all__ = [
    "User",
    "Event",
    "EventBooking",
    "NotificationOutbox",
    "NotificationStatus",
]
