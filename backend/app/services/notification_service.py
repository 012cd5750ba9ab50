"""
Notification service for booking confirmation emails.

Confirmations are written to the notification outbox inside the booking
transaction and delivered afterwards, either before the response (sync) or
from a background task. Rows that could not be delivered stay pending and are
retried by dispatch_pending_notifications.
"""
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, Optional, Tuple
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import NotificationFailed
from app.core.utils import format_event_date, utc_now
from app.models.event import Event
from app.models.notification import NotificationOutbox, NotificationStatus
from app.models.user import User

logger = logging.getLogger(__name__)


class EmailSender:
    """Outbound email transport. send() raises on failure."""

    def send(self, to: str, subject: str, body: str) -> None:
        raise NotImplementedError


class SMTPEmailSender(EmailSender):
    """SMTP transport; implicit TLS on port 465, STARTTLS otherwise."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_addr: str,
        timeout: float = 10.0
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_addr = from_addr or username
        self.timeout = timeout

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.from_addr
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def send(self, to: str, subject: str, body: str) -> None:
        msg = self._build_message(to, subject, body)
        context = ssl.create_default_context()
        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=context)
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(msg)
        logger.info(f"Email sent to {to}: {subject}")


class ConsoleEmailSender(EmailSender):
    """Logs emails instead of sending them."""

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info(f"[console email] To: {to} | Subject: {subject}\n{body}")


_sender: Optional[EmailSender] = None


def build_email_sender() -> EmailSender:
    provider = settings.EMAIL_PROVIDER
    if provider == "smtp":
        return SMTPEmailSender(
            host=settings.EMAIL_HOST,
            port=settings.EMAIL_PORT,
            username=settings.EMAIL_USER,
            password=settings.EMAIL_PASSWORD,
            from_addr=settings.EMAIL_FROM,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
        )
    if provider == "console":
        return ConsoleEmailSender()
    raise ValueError(f"Unknown EMAIL_PROVIDER: {provider}")


def get_email_sender() -> EmailSender:
    """Dependency returning the process-wide email sender."""
    global _sender
    if _sender is None:
        _sender = build_email_sender()
    return _sender


def build_booking_confirmation(user: User, event: Event) -> Tuple[str, str]:
    """Subject and body of the seat booking confirmation."""
    subject = f"Seat Booked Successfully for {event.title}"
    body = (
        f"Hello {user.username},\n\n"
        f"Your seat for the event \"{event.title}\" has been successfully booked.\n\n"
        f"Event Details:\n"
        f"Date: {format_event_date(event.date)}\n"
        f"Location: {event.location}\n\n"
        f"Thank you for booking with us!\n\n"
        f"Best regards,\n"
        f"Event Booking Team"
    )
    return subject, body


def enqueue_booking_confirmation(db: Session, user: User, event: Event) -> NotificationOutbox:
    """Stage a confirmation in the outbox. Committed with the caller's transaction."""
    subject, body = build_booking_confirmation(user, event)
    notification = NotificationOutbox(
        event_id=event.id,
        user_id=user.id,
        recipient=user.email,
        subject=subject,
        body=body,
        status=NotificationStatus.PENDING,
        attempts=0,
    )
    db.add(notification)
    return notification


def deliver(db: Session, notification: NotificationOutbox, sender: EmailSender) -> bool:
    """
    Attempt one delivery and record the outcome on the outbox row.

    Returns True when the email was handed to the transport.
    """
    notification.attempts += 1
    try:
        sender.send(notification.recipient, notification.subject, notification.body)
    except Exception as e:
        notification.last_error = str(e)
        if notification.attempts >= settings.NOTIFICATION_MAX_ATTEMPTS:
            notification.status = NotificationStatus.FAILED
        db.commit()
        logger.error(
            f"Failed to send notification {notification.id} to {notification.recipient} "
            f"(attempt {notification.attempts}): {e}"
        )
        return False

    notification.status = NotificationStatus.SENT
    notification.sent_at = utc_now()
    notification.last_error = None
    db.commit()
    return True


def deliver_or_raise(db: Session, notification: NotificationOutbox, sender: EmailSender) -> None:
    """Deliver now; NotificationFailed carries the transport error message."""
    if not deliver(db, notification, sender):
        raise NotificationFailed(cause=RuntimeError(notification.last_error or "unknown error"))


def deliver_pending_notification(
    session_factory: Callable[[], Session],
    notification_id: int,
    sender: EmailSender
) -> None:
    """Background task body: deliver one outbox row in its own session."""
    db = session_factory()
    try:
        notification = db.query(NotificationOutbox).filter(
            NotificationOutbox.id == notification_id
        ).first()
        if notification and notification.status == NotificationStatus.PENDING:
            deliver(db, notification, sender)
    finally:
        db.close()


def dispatch_pending_notifications(db: Session, sender: EmailSender, limit: int = 100) -> Tuple[int, int]:
    """
    Retry pending outbox rows, oldest first.

    Returns (sent, failed) counts for this pass.
    """
    pending = db.query(NotificationOutbox).filter(
        NotificationOutbox.status == NotificationStatus.PENDING
    ).order_by(NotificationOutbox.id.asc()).limit(limit).all()

    sent = failed = 0
    for notification in pending:
        if deliver(db, notification, sender):
            sent += 1
        else:
            failed += 1

    if pending:
        logger.info(f"Dispatched {len(pending)} pending notifications: {sent} sent, {failed} failed")
    return sent, failed
