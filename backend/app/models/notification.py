"""
Outbox of booking confirmation emails awaiting delivery.
"""
from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey, Enum as SQLEnum
from app.db.base import BaseModel
import enum


class NotificationStatus(str, enum.Enum):
    """Delivery status enumeration."""
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class NotificationOutbox(BaseModel):
    """Email written in the booking transaction and delivered afterwards."""
    __tablename__ = "notification_outbox"

    event_id = Column(Integer, ForeignKey("events.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    recipient = Column(String(100), nullable=False)
    subject = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    status = Column(SQLEnum(NotificationStatus), default=NotificationStatus.PENDING, nullable=False, index=True)
    attempts = Column(Integer, default=0, nullable=False)
    last_error = Column(Text, nullable=True)
    sent_at = Column(DateTime, nullable=True)
