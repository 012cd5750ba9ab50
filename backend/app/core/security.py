"""
Security utilities for JWT authentication and password hashing.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Union
import hashlib
import re
import bcrypt
from jose import JWTError, jwt
from app.core.config import settings
from app.core.exceptions import InvalidToken

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# Lowercase, uppercase, digit and one of @$!%*?& ; nothing else allowed, 8+ chars
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$"
)


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def is_strong_password(password: str) -> bool:
    return bool(password) and PASSWORD_PATTERN.match(password) is not None


def _pre_hash_password(password: str) -> bytes:
    """
    Pre-hash password with SHA256 so bcrypt never sees more than 72 bytes.
    """
    return hashlib.sha256(password.encode('utf-8')).digest()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    pre_hashed = _pre_hash_password(plain_password)
    return bcrypt.checkpw(pre_hashed, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt and return it as a string for storage."""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(_pre_hash_password(password), salt)
    return hashed.decode('utf-8')


def issue_token(subject_id: Union[int, str], ttl: Optional[timedelta] = None) -> str:
    """Issue a signed bearer token for a user id."""
    if ttl is None:
        ttl = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    expire = datetime.now(timezone.utc) + ttl
    to_encode = {"sub": str(subject_id), "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT token."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def verify_token(token: str) -> int:
    """
    Verify a bearer token and return its subject user id.

    Raises:
        InvalidToken: signature, expiry or payload is not acceptable.
    """
    payload = decode_access_token(token)
    if not payload:
        raise InvalidToken()
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise InvalidToken()
