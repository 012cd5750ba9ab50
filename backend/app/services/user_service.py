"""
User service: credential store access plus the signup/login workflow.
"""
import logging
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.exceptions import (
    EmailInUse, InvalidEmailFormat, InvalidPassword, UserNotFound, WeakPassword
)
from app.core.security import (
    get_password_hash, is_strong_password, is_valid_email, issue_token, verify_password
)
from app.models.user import User
from app.schemas.user import UserCreate, UserLogin

logger = logging.getLogger(__name__)


def find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def find_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user(db: Session, user_id: int) -> User:
    """Load a user or raise UserNotFound."""
    user = find_by_id(db, user_id)
    if not user:
        raise UserNotFound()
    return user


def create_user(db: Session, username: str, email: str, hashed_password: str) -> User:
    """
    Insert a new user.

    The unique index on email is the final word on duplicates; a concurrent
    signup that slips past the pre-check surfaces here as EmailInUse.
    """
    user = User(username=username, email=email, hashed_password=hashed_password)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise EmailInUse()
    db.refresh(user)
    return user


def save_user(db: Session, user: User) -> User:
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def register_user(db: Session, user_data: UserCreate) -> Tuple[User, str]:
    """
    Sign up a user and issue a token.

    Checks run in order: email syntax, email availability, password strength.
    """
    if not is_valid_email(user_data.email):
        raise InvalidEmailFormat()

    if find_by_email(db, user_data.email):
        raise EmailInUse()

    if not is_strong_password(user_data.password):
        raise WeakPassword()

    user = create_user(
        db,
        username=user_data.username,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
    )
    logger.info(f"Registered user {user.id}")
    return user, issue_token(user.id)


def authenticate_user(db: Session, credentials: UserLogin) -> Tuple[User, str]:
    """
    Log a user in by email and password.

    Unknown email and wrong password are reported separately, which lets a
    caller probe for registered addresses.
    """
    user = find_by_email(db, credentials.email)
    if not user:
        raise UserNotFound("User not found. Check your email address.", status_code=400)

    if not verify_password(credentials.password, user.hashed_password):
        raise InvalidPassword()

    return user, issue_token(user.id)
