"""
Event model and the booking association between events and users.
"""
from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class Event(BaseModel):
    """Bookable event with a fixed seat capacity."""
    __tablename__ = "events"

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(255), nullable=False)
    date = Column(DateTime, nullable=False, index=True)  # Naive UTC
    capacity = Column(Integer, nullable=False)
    booked_seats = Column(Integer, nullable=False, default=0)
    image = Column(String(500), nullable=False)  # Public URL from the image store

    # Relationships
    bookings = relationship(
        "EventBooking",
        back_populates="event",
        order_by="EventBooking.id",
    )

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_events_capacity_positive"),
        CheckConstraint("booked_seats >= 0 AND booked_seats <= capacity", name="ck_events_booked_seats_range"),
    )

    @property
    def booked_users(self) -> list:
        """Booked user ids in booking order."""
        return [booking.user_id for booking in self.bookings]

    @property
    def is_full(self) -> bool:
        return self.booked_seats >= self.capacity


class EventBooking(BaseModel):
    """Junction table for Event and User many-to-many relationship (one seat per user)."""
    __tablename__ = "event_bookings"

    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    event = relationship("Event", back_populates="bookings")
    user = relationship("User", back_populates="bookings")

    # Unique constraint: one booking per user per event
    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uq_event_user_booking'),
    )
