"""JWT service for RentPilot authentication."""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

import jwt

from ...config import settings

ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    user_id: str,
    email: str,
    role: str,
    first_name: str | None = None,
    last_name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token carrying the caller's identity and role."""
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )

    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "first_name": first_name,
        "last_name": last_name,
        "exp": expire,
        "iat": now,
        "type": ACCESS_TOKEN_TYPE,
    }

    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(remember_me: bool = False) -> tuple[str, datetime]:
    """Create an opaque refresh token.

    Returns:
        Tuple of (token_string, expiry_datetime)
    """
    token = secrets.token_urlsafe(32)
    days = (
        settings.refresh_token_remember_days
        if remember_me
        else settings.refresh_token_expire_days
    )
    return token, datetime.now(timezone.utc) + timedelta(days=days)


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def decode_access_token(token: str) -> dict | None:
    """Decode and validate an access token.

    Returns:
        Token payload if valid, None if invalid or expired.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        return None
    return payload


def get_token_expiry_seconds() -> int:
    return settings.access_token_expire_minutes * 60
