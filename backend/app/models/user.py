"""
User model for authentication and booked events.
"""
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class User(BaseModel):
    """User model. The password hash is never serialized out."""
    __tablename__ = "users"

    username = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    # Relationships
    bookings = relationship(
        "EventBooking",
        back_populates="user",
        order_by="EventBooking.id",
    )

    @property
    def booked_events(self) -> list:
        """Booked event ids in booking order."""
        return [booking.event_id for booking in self.bookings]
