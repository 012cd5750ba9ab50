"""
Tests for the seat booking endpoint and the user's booked events listing.
"""
from conftest import auth_headers
from app.core.config import settings
from app.models.event import Event, EventBooking
from app.models.notification import NotificationOutbox, NotificationStatus
from app.services.notification_service import dispatch_pending_notifications


def book(client, event_id, user_id):
    return client.post(f"/api/events/{event_id}/book", headers=auth_headers(user_id))


def reload_event(db, event_id) -> Event:
    db.expire_all()
    return db.query(Event).filter(Event.id == event_id).one()


def test_book_seat(client, db, email_sender, make_user, make_event):
    user = make_user()
    event = make_event(title="Jazz Night", capacity=3, location="Riverside Stage")

    response = book(client, event.id, user.id)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Seat booked successfully, and email sent"
    assert body["event"]["booked_seats"] == 1
    assert body["event"]["booked_users"] == [user.id]

    event = reload_event(db, event.id)
    assert event.booked_seats == 1
    assert event.booked_users == [user.id]
    db.refresh(user)
    assert user.booked_events == [event.id]

    assert len(email_sender.sent) == 1
    email = email_sender.sent[0]
    assert email["to"] == "alice@example.com"
    assert email["subject"] == "Seat Booked Successfully for Jazz Night"
    assert "Hello alice" in email["body"]
    assert "Location: Riverside Stage" in email["body"]
    assert str(event.date.year) in email["body"]

    outbox = db.query(NotificationOutbox).one()
    assert outbox.status == NotificationStatus.SENT
    assert outbox.attempts == 1


def test_book_seat_twice_is_rejected(client, db, email_sender, make_user, make_event):
    user = make_user()
    event = make_event(capacity=5)
    assert book(client, event.id, user.id).status_code == 200

    response = book(client, event.id, user.id)
    assert response.status_code == 400
    assert response.json()["message"] == "User has already booked this event"

    event = reload_event(db, event.id)
    assert event.booked_seats == 1
    assert db.query(EventBooking).count() == 1
    assert len(email_sender.sent) == 1


def test_book_full_event_is_rejected(client, db, make_user, make_event):
    first = make_user(username="first", email="first@example.com")
    late = make_user(username="late", email="late@example.com")
    event = make_event(capacity=1)
    assert book(client, event.id, first.id).status_code == 200

    response = book(client, event.id, late.id)
    assert response.status_code == 400
    assert response.json()["message"] == "Seats are fully booked"

    event = reload_event(db, event.id)
    assert event.booked_seats == event.capacity == 1
    assert event.booked_users == [first.id]


def test_full_event_reported_before_duplicate(client, make_user, make_event):
    """Capacity is checked before the already-booked condition."""
    user = make_user()
    event = make_event(capacity=1)
    book(client, event.id, user.id)
    response = book(client, event.id, user.id)
    assert response.json()["message"] == "Seats are fully booked"


def test_book_unknown_event(client, make_user):
    user = make_user()
    response = book(client, 4242, user.id)
    assert response.status_code == 404
    assert response.json()["message"] == "Event not found"


def test_book_unknown_user(client, db, make_event):
    event = make_event()
    response = book(client, event.id, 777)
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"
    assert reload_event(db, event.id).booked_seats == 0


def test_notification_failure_keeps_booking(client, db, email_sender, make_user, make_event):
    """A failed email is reported as a server error, but the seat stays booked and the email is retried later."""
    user = make_user()
    event = make_event()
    email_sender.fail = True

    response = book(client, event.id, user.id)
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Seat booked, but the confirmation email could not be sent"
    assert "SMTP server unavailable" in body["error"]

    assert reload_event(db, event.id).booked_users == [user.id]
    outbox = db.query(NotificationOutbox).one()
    assert outbox.status == NotificationStatus.PENDING
    assert outbox.attempts == 1

    email_sender.fail = False
    assert dispatch_pending_notifications(db, email_sender) == (1, 0)
    db.refresh(outbox)
    assert outbox.status == NotificationStatus.SENT
    assert len(email_sender.sent) == 1


def test_background_delivery(client, db, email_sender, make_user, make_event, monkeypatch):
    monkeypatch.setattr(settings, "NOTIFICATION_DELIVERY", "background")
    user = make_user()
    event = make_event()

    response = book(client, event.id, user.id)
    assert response.status_code == 200
    assert response.json()["message"] == "Seat booked successfully, confirmation email queued"

    # TestClient runs background tasks before returning
    assert len(email_sender.sent) == 1
    db.expire_all()
    assert db.query(NotificationOutbox).one().status == NotificationStatus.SENT


def test_background_delivery_failure_does_not_fail_booking(client, db, email_sender, make_user, make_event, monkeypatch):
    monkeypatch.setattr(settings, "NOTIFICATION_DELIVERY", "background")
    email_sender.fail = True
    user = make_user()
    event = make_event()

    response = book(client, event.id, user.id)
    assert response.status_code == 200
    db.expire_all()
    assert db.query(NotificationOutbox).one().status == NotificationStatus.PENDING


def test_user_events_lists_upcoming_bookings(client, make_user, make_event):
    user = make_user()
    other = make_user(username="bob", email="bob@example.com")
    past = make_event(title="Past", days_from_now=-2)
    later = make_event(title="Later", days_from_now=20)
    soon = make_event(title="Soon", days_from_now=2)
    not_mine = make_event(title="Not Mine", days_from_now=1)

    for event in (past, later, soon):
        assert book(client, event.id, user.id).status_code == 200
    assert book(client, not_mine.id, other.id).status_code == 200

    response = client.get("/api/auth/userevents", headers=auth_headers(user.id))
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [e["title"] for e in body["events"]] == ["Soon", "Later"]
    assert past.id not in [e["id"] for e in body["events"]]


def test_user_events_pagination(client, make_user, make_event):
    user = make_user()
    for day in range(1, 7):
        event = make_event(title=f"Day {day}", days_from_now=day)
        book(client, event.id, user.id)

    first = client.get("/api/auth/userevents", headers=auth_headers(user.id)).json()
    assert first["total"] == 6
    assert [e["title"] for e in first["events"]] == [f"Day {d}" for d in range(1, 6)]

    second = client.get(
        "/api/auth/userevents", params={"page": 2, "limit": 5}, headers=auth_headers(user.id)
    ).json()
    assert [e["title"] for e in second["events"]] == ["Day 6"]


def test_unexpected_error_returns_json(client, make_user, make_event):
    """Errors outside the application taxonomy still answer with the JSON error shape."""
    from fastapi.testclient import TestClient
    from app.main import app
    from app.services.notification_service import get_email_sender

    def broken_sender():
        raise ValueError("Unknown EMAIL_PROVIDER: pigeon")

    app.dependency_overrides[get_email_sender] = broken_sender
    user = make_user()
    event = make_event()

    response = TestClient(app, raise_server_exceptions=False).post(
        f"/api/events/{event.id}/book", headers=auth_headers(user.id)
    )
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "pigeon" in body["error"]
