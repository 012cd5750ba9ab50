"""
Utility functions for the application.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching how event dates are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_event_date(value: datetime) -> str:
    """Human readable date/time for confirmation emails."""
    return value.strftime("%A, %d %B %Y at %H:%M UTC")


def page_offset(page: int, limit: int) -> int:
    """Number of rows to skip for a 1-based page."""
    return (max(page, 1) - 1) * limit
