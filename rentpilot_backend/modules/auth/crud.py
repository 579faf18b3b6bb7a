"""CRUD operations for authentication module."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .jwt_service import hash_refresh_token
from .models import Profile, RefreshToken, UserRole
from .password_service import hash_password

# ----- Profile CRUD -----


async def get_profile_by_id(db: AsyncSession, user_id: uuid.UUID) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    """Get a profile by email (case-insensitive, emails are stored lowercased)."""
    result = await db.execute(select(Profile).where(Profile.email == email.lower()))
    return result.scalar_one_or_none()


async def create_profile(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str | None,
    last_name: str | None,
    role: UserRole,
) -> Profile:
    profile = Profile(
        email=email.lower(),
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
        failed_login_attempts=0,
    )
    db.add(profile)
    await db.flush()
    return profile


async def update_last_login(db: AsyncSession, profile: Profile) -> None:
    """Record a successful login and clear the lockout counters."""
    profile.last_login = datetime.now(timezone.utc)
    profile.failed_login_attempts = 0
    profile.locked_until = None
    await db.flush()


async def increment_failed_login(db: AsyncSession, profile: Profile) -> None:
    profile.failed_login_attempts = (profile.failed_login_attempts or 0) + 1
    await db.flush()


async def lock_profile(db: AsyncSession, profile: Profile, until: datetime) -> None:
    profile.locked_until = until
    await db.flush()


async def update_profile(
    db: AsyncSession,
    profile: Profile,
    first_name: str | None = None,
    last_name: str | None = None,
    phone: str | None = None,
) -> Profile:
    """Update contact fields. ``None`` leaves a field unchanged."""
    if first_name is not None:
        profile.first_name = first_name
    if last_name is not None:
        profile.last_name = last_name
    if phone is not None:
        profile.phone = phone
    await db.flush()
    return profile


async def update_credentials(
    db: AsyncSession,
    profile: Profile,
    email: str | None = None,
    password: str | None = None,
) -> Profile:
    if email is not None:
        profile.email = email.lower()
    if password is not None:
        profile.password_hash = hash_password(password)
    await db.flush()
    return profile


async def delete_profile(db: AsyncSession, user_id: uuid.UUID) -> None:
    await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
    await db.execute(delete(Profile).where(Profile.id == user_id))


# ----- Refresh Token CRUD -----


async def create_refresh_token(
    db: AsyncSession,
    profile: Profile,
    token: str,
    expires_at: datetime,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> RefreshToken:
    refresh_token = RefreshToken(
        user_id=profile.id,
        token_hash=hash_refresh_token(token),
        expires_at=expires_at,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    db.add(refresh_token)
    await db.flush()
    return refresh_token


async def get_refresh_token_by_hash(
    db: AsyncSession, token_hash: str
) -> RefreshToken | None:
    result = await db.execute(
        select(RefreshToken).where(RefreshToken.token_hash == token_hash)
    )
    return result.scalar_one_or_none()


async def revoke_refresh_token(db: AsyncSession, token: RefreshToken) -> None:
    token.revoked_at = datetime.now(timezone.utc)
    await db.flush()


async def revoke_all_user_tokens(db: AsyncSession, user_id: uuid.UUID) -> int:
    """Revoke all live refresh tokens for a profile. Returns count of revoked tokens."""
    result = await db.execute(
        update(RefreshToken)
        .where(
            RefreshToken.user_id == user_id,
            RefreshToken.revoked_at.is_(None),
        )
        .values(revoked_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0
