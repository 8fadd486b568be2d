"""Password hashing and access token helpers."""

import base64
import hashlib
import hmac
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from jwt import PyJWTError

from .config import settings
from .exceptions import AuthenticationError

_SALT_BYTES = 16
_ITERATIONS = 120_000
_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    """Return a salted PBKDF2 hash for the supplied password."""
    salt = os.urandom(_SALT_BYTES)
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _ITERATIONS)
    return base64.b64encode(salt + derived).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check whether the provided password matches the stored hash."""
    try:
        decoded = base64.b64decode(hashed.encode("utf-8"), validate=True)
    except (ValueError, TypeError):
        return False

    if len(decoded) <= _SALT_BYTES:
        return False

    salt = decoded[:_SALT_BYTES]
    stored = decoded[_SALT_BYTES:]
    candidate = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _ITERATIONS)
    return hmac.compare_digest(candidate, stored)


def create_access_token(
    user_id: int,
    username: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Issue a signed JWT carrying the user's name and role.

    Args:
        user_id: Subject of the token
        username: Username claim
        role: Role claim (Manager or User)
        expires_delta: Lifetime override; defaults to the configured minutes

    Returns:
        Encoded token string
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Validate a token and return its claims.

    Raises:
        AuthenticationError: If the signature, issuer, audience or expiry is invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[_ALGORITHM],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "sub"]},
        )
    except PyJWTError as e:
        raise AuthenticationError(detail=f"Token validation failed: {e}") from e

    if not payload.get("username") or not payload.get("role"):
        raise AuthenticationError(detail="Invalid token payload")

    return payload
