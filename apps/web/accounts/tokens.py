"""
JWT access tokens (HS256, python-jose).

Tokens carry the user id, restaurant id and role names. "Remember me" tokens
live for JWT_REMEMBER_ME_LIFETIME, others for JWT_LIFETIME.
"""

from datetime import UTC, datetime
from typing import Any

from django.conf import settings

from jose import jwt

from .permissions import role_names

ALGORITHM = "HS256"


def create_access_token(user: Any, remember_me: bool = False) -> tuple[str, int]:
    """
    Issue a signed access token.

    Returns:
        Tuple of (token, lifetime in seconds)
    """
    lifetime = (
        settings.JWT_REMEMBER_ME_LIFETIME if remember_me else settings.JWT_LIFETIME
    )
    now = datetime.now(UTC)
    payload = {
        "sub": str(user.pk),
        "username": user.username,
        "restaurant_id": str(user.restaurant_id) if user.restaurant_id else None,
        "roles": sorted(role_names(user)),
        "remember_me": remember_me,
        "iat": now,
        "exp": now + lifetime,
    }
    token = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)
    return token, int(lifetime.total_seconds())


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry.

    Raises:
        jose.ExpiredSignatureError: token expired
        jose.JWTError: token invalid
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
