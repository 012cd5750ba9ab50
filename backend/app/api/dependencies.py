"""
Shared route dependencies: the bearer-token auth gate.
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import APIKeyHeader
from app.core.exceptions import InvalidToken, Unauthenticated
from app.core.security import verify_token

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def get_current_user_id(
    authorization: Optional[str] = Depends(authorization_header)
) -> int:
    """
    Return the user id carried by the bearer token.

    The token is the second space-separated part of the Authorization
    header. No token at all is Unauthenticated; a token under any scheme
    other than Bearer is InvalidToken.

    Identity comes from the token claims alone; the user record is not
    loaded here, so a deleted account's unexpired token still passes.
    """
    parts = (authorization or "").split(" ")
    if len(parts) < 2 or not parts[1]:
        raise Unauthenticated()

    scheme, token = parts[0], parts[1]
    if scheme.lower() != "bearer" or len(parts) > 2:
        raise InvalidToken()
    return verify_token(token)
