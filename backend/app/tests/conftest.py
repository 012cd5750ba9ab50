"""
Shared fixtures: in-memory database, recording email sender and a temp image store.
"""
import os
import tempfile

# Settings are read at import time, so point them at throwaway resources first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="eventbook-static-"))
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.security import get_password_hash, issue_token
from app.core.utils import utc_now
from app.db.session import build_engine, get_db, init_db
from app.models.event import Event
from app.models.user import User
from app.schemas.event import EventCreate
from app.services import event_service
from app.services.image_service import LocalImageStore, get_image_store
from app.services.notification_service import EmailSender, get_email_sender

STRONG_PASSWORD = "Abc123!@"


class RecordingEmailSender(EmailSender):
    """Keeps sent emails in memory; set fail=True to simulate a transport outage."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append({"to": to, "subject": subject, "body": body})


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file-backed SQLite database, one connection per session."""
    engine = build_engine(f"sqlite:///{tmp_path / 'bookings.db'}")
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def image_dir(tmp_path):
    return tmp_path / "static"


@pytest.fixture
def client(session_factory, email_sender, image_dir):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_image_store] = lambda: LocalImageStore(
        str(image_dir), base_url="http://testserver"
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_user(db, username="alice", email="alice@example.com", password=STRONG_PASSWORD) -> User:
    user = User(username=username, email=email, hashed_password=get_password_hash(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_event(db, title="Launch Party", days_from_now=7, capacity=10, location="Hall A") -> Event:
    event_data = EventCreate(
        title=title,
        description=f"{title} description",
        location=location,
        date=utc_now().replace(microsecond=0) + timedelta(days=days_from_now),
        capacity=capacity,
    )
    return event_service.create_event(db, event_data, image_url="http://testserver/static/poster.png")


def auth_headers(user_id) -> dict:
    return {"Authorization": f"Bearer {issue_token(user_id)}"}


@pytest.fixture
def make_user(db):
    def _make(**kwargs):
        return create_user(db, **kwargs)
    return _make


@pytest.fixture
def make_event(db):
    def _make(**kwargs):
        return create_event(db, **kwargs)
    return _make
