"""
Pydantic schemas for Event entity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List
from datetime import datetime
from app.core.utils import to_naive_utc


class EventCreate(BaseModel):
    """Schema for event creation (fields arrive as multipart form values)."""
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1)
    date: datetime
    capacity: int = Field(gt=0)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        """Store all event dates as naive UTC."""
        return to_naive_utc(v)


class EventResponse(BaseModel):
    """Schema for event response."""
    id: int
    title: str
    description: str
    location: str
    date: datetime
    capacity: int
    booked_seats: int
    booked_users: List[int]
    image: str

    class Config:
        from_attributes = True


class EventEnvelope(BaseModel):
    """Single event wrapped with a status message."""
    success: bool = True
    message: str
    event: EventResponse


class EventDetailResponse(BaseModel):
    event: EventResponse


class EventPage(BaseModel):
    """One page of events plus the total number of matches."""
    message: str
    total: int
    page: int
    limit: int
    events: List[EventResponse]
