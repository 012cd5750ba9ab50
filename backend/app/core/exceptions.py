"""
Application error taxonomy.

Every error carries a user-safe message and the HTTP status it maps to.
Handlers in app.api.error_handlers turn them into JSON bodies.
"""
from typing import Optional


class AppError(Exception):
    """Base application error."""
    status_code: int = 500
    default_message: str = "Something went wrong. Please try again later."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


# Error families

class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request."


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found."


class ConflictError(AppError):
    status_code = 400
    default_message = "Request conflicts with current state."


class AuthError(AppError):
    status_code = 403
    default_message = "Access denied"


class DependencyError(AppError):
    """Failure of a store, email transport or image service."""
    status_code = 500
    default_message = "Something went wrong. Please try again later."

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


# Credentials

class InvalidEmailFormat(ValidationError):
    default_message = "Invalid email format."


class WeakPassword(ValidationError):
    default_message = (
        "Password must be at least 8 characters long, with an uppercase letter, "
        "a number, and a special character."
    )


class InvalidPassword(ValidationError):
    default_message = "Invalid password. Please try again."


class EmailInUse(ConflictError):
    default_message = "Email already in use."


class UserNotFound(NotFoundError):
    default_message = "User not found"


# Auth gate

class Unauthenticated(AuthError):
    default_message = "Access denied"


class InvalidToken(AuthError):
    default_message = "Invalid token"


# Events and bookings

class EventNotFound(NotFoundError):
    default_message = "Event not found"


class EventFull(ConflictError):
    default_message = "Seats are fully booked"


class AlreadyBooked(ConflictError):
    default_message = "User has already booked this event"


# Dependencies

class NotificationFailed(DependencyError):
    default_message = "Seat booked, but the confirmation email could not be sent"


class ImageUploadFailed(DependencyError):
    default_message = "Error uploading event image"


class StoreError(DependencyError):
    default_message = "Database error"
