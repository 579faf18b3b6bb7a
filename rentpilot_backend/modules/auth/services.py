"""Authentication business logic services."""

import logging
import uuid
from datetime import timedelta

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.exceptions import (
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from ...core.realtime import EventType, RealtimeEvent, RealtimeHub, user_auth_topic
from ...core.storage import StorageBackend
from ...core.utils import as_utc, utc_now
from . import crud
from .jwt_service import (
    create_access_token,
    create_refresh_token,
    get_token_expiry_seconds,
    hash_refresh_token,
)
from .models import Profile
from .password_service import verify_password
from .schemas import SignUpRequest, TokenResponse

logger = logging.getLogger(__name__)


async def publish_auth_event(
    hub: RealtimeHub | None, event_type: EventType, profile: Profile
) -> None:
    """Announce a session state change on the profile's auth topic."""
    if hub is None:
        return
    await hub.publish(
        user_auth_topic(profile.id),
        RealtimeEvent(
            type=event_type,
            table="profiles",
            record={
                "id": str(profile.id),
                "email": profile.email,
                "role": profile.role.value,
            },
            actor_id=str(profile.id),
        ),
    )


async def _issue_tokens(
    db: AsyncSession,
    profile: Profile,
    remember_me: bool = False,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> TokenResponse:
    access_token = create_access_token(
        user_id=str(profile.id),
        email=profile.email,
        role=profile.role.value,
        first_name=profile.first_name,
        last_name=profile.last_name,
    )
    refresh_token, refresh_expires = create_refresh_token(remember_me)
    await crud.create_refresh_token(
        db=db,
        profile=profile,
        token=refresh_token,
        expires_at=refresh_expires,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=get_token_expiry_seconds(),
    )


async def sign_up(
    db: AsyncSession,
    data: SignUpRequest,
    hub: RealtimeHub | None = None,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[Profile, TokenResponse]:
    """Create a profile with its role and open a session for it.

    Raises:
        ConflictError: If the email is already registered
    """
    if await crud.get_profile_by_email(db, data.email):
        raise ConflictError(f"An account with email '{data.email}' already exists")

    try:
        profile = await crud.create_profile(
            db,
            email=data.email,
            password=data.password,
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            role=data.role,
        )
        tokens = await _issue_tokens(db, profile, False, user_agent, ip_address)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(
            f"An account with email '{data.email}' already exists",
            details={"database_error": str(e.orig)},
        ) from e

    logger.info(
        "Profile created",
        extra={"user_id": str(profile.id), "role": profile.role.value},
    )
    await publish_auth_event(hub, EventType.SIGNED_IN, profile)
    return profile, tokens


async def authenticate_user(
    db: AsyncSession,
    email: str,
    password: str,
    remember_me: bool = False,
    hub: RealtimeHub | None = None,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[Profile, TokenResponse]:
    """Verify credentials and return tokens.

    Repeated failures lock the profile for a configured period.

    Raises:
        AuthenticationError: If authentication fails
    """
    profile = await crud.get_profile_by_email(db, email)
    if not profile:
        raise AuthenticationError("Invalid email or password")

    if profile.is_locked:
        remaining = (as_utc(profile.locked_until) - utc_now()).seconds // 60
        raise AuthenticationError(
            f"Account is locked. Try again in {remaining + 1} minutes."
        )

    if not verify_password(password, profile.password_hash):
        await crud.increment_failed_login(db, profile)

        if profile.failed_login_attempts >= settings.max_login_attempts:
            lock_until = utc_now() + timedelta(minutes=settings.lockout_duration_minutes)
            await crud.lock_profile(db, profile, lock_until)
            await db.commit()
            logger.warning(
                "Profile locked after failed logins",
                extra={"user_id": str(profile.id)},
            )
            raise AuthenticationError(
                "Account locked due to too many failed attempts. "
                f"Try again in {settings.lockout_duration_minutes} minutes."
            )

        await db.commit()
        remaining_attempts = settings.max_login_attempts - profile.failed_login_attempts
        raise AuthenticationError(
            f"Invalid email or password. {remaining_attempts} attempts remaining."
        )

    await crud.update_last_login(db, profile)
    tokens = await _issue_tokens(db, profile, remember_me, user_agent, ip_address)
    await db.commit()

    logger.info("Profile signed in", extra={"user_id": str(profile.id)})
    await publish_auth_event(hub, EventType.SIGNED_IN, profile)
    return profile, tokens


async def refresh_access_token(
    db: AsyncSession,
    refresh_token: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> TokenResponse:
    """Rotate a refresh token into a fresh token pair.

    Raises:
        AuthenticationError: If refresh token is invalid, revoked or expired
    """
    stored_token = await crud.get_refresh_token_by_hash(
        db, hash_refresh_token(refresh_token)
    )

    if not stored_token:
        raise AuthenticationError("Invalid refresh token")
    if stored_token.is_revoked:
        raise AuthenticationError("Refresh token has been revoked")
    if stored_token.is_expired:
        raise AuthenticationError("Refresh token has expired")

    profile = await crud.get_profile_by_id(db, stored_token.user_id)
    if not profile:
        raise AuthenticationError("User not found")

    await crud.revoke_refresh_token(db, stored_token)
    tokens = await _issue_tokens(db, profile, False, user_agent, ip_address)
    await db.commit()
    return tokens


async def logout_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    hub: RealtimeHub | None = None,
) -> int:
    """Sign out everywhere by revoking every refresh token.

    Returns:
        Number of tokens revoked
    """
    count = await crud.revoke_all_user_tokens(db, user_id)
    await db.commit()

    profile = await crud.get_profile_by_id(db, user_id)
    if profile:
        await publish_auth_event(hub, EventType.SIGNED_OUT, profile)
    logger.info("Profile signed out", extra={"user_id": str(user_id), "revoked": count})
    return count


async def update_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    email: str | None = None,
    password: str | None = None,
    hub: RealtimeHub | None = None,
) -> Profile:
    """Change the sign-in email and/or password.

    A password change revokes every existing refresh token.
    """
    if email is None and password is None:
        raise ValidationError("Nothing to update: provide an email or a password")

    profile = await crud.get_profile_by_id(db, user_id)
    if not profile:
        raise NotFoundError("User not found")

    if email is not None and email.lower() != profile.email:
        if await crud.get_profile_by_email(db, email):
            raise ConflictError(f"An account with email '{email}' already exists")

    try:
        await crud.update_credentials(db, profile, email=email, password=password)
        if password is not None:
            await crud.revoke_all_user_tokens(db, user_id)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(
            f"An account with email '{email}' already exists",
            details={"database_error": str(e.orig)},
        ) from e

    await publish_auth_event(hub, EventType.USER_UPDATED, profile)
    return profile


async def update_profile(
    db: AsyncSession,
    user_id: uuid.UUID,
    first_name: str | None = None,
    last_name: str | None = None,
    phone: str | None = None,
    hub: RealtimeHub | None = None,
) -> Profile:
    profile = await crud.get_profile_by_id(db, user_id)
    if not profile:
        raise NotFoundError("User not found")

    await crud.update_profile(
        db, profile, first_name=first_name, last_name=last_name, phone=phone
    )
    await db.commit()

    await publish_auth_event(hub, EventType.USER_UPDATED, profile)
    return profile


async def delete_account(
    db: AsyncSession,
    user_id: uuid.UUID,
    storage: StorageBackend | None = None,
    hub: RealtimeHub | None = None,
) -> list[str]:
    """Delete a profile and everything it owns in one transaction.

    Stored document objects are removed after the commit; a storage failure
    there is logged and the orphaned paths are returned.

    Returns:
        Storage paths that could not be removed
    """
    from ..applications.models import Application
    from ..documents.models import Document
    from ..lease_management.models import Lease, LeaseTenant
    from ..messaging.models import Message, MessageReadStatus
    from ..notifications.models import Notification, NotificationPreference
    from ..property_management.models import Property

    profile = await crud.get_profile_by_id(db, user_id)
    if not profile:
        raise NotFoundError("User not found")

    owned_leases = select(Lease.id).where(Lease.landlord_id == user_id)
    owned_properties = select(Property.id).where(Property.landlord_id == user_id)
    owned_messages = select(Message.id).where(Message.lease_id.in_(owned_leases))

    result = await db.execute(
        select(Document.file_path).where(Document.user_id == user_id)
    )
    document_paths = list(result.scalars().all())

    try:
        await db.execute(
            delete(MessageReadStatus).where(
                or_(
                    MessageReadStatus.user_id == user_id,
                    MessageReadStatus.message_id.in_(owned_messages),
                )
            )
        )
        await db.execute(delete(Message).where(Message.lease_id.in_(owned_leases)))
        await db.execute(
            update(Message).where(Message.sender_id == user_id).values(sender_id=None)
        )
        await db.execute(
            delete(LeaseTenant).where(LeaseTenant.lease_id.in_(owned_leases))
        )
        await db.execute(delete(Lease).where(Lease.landlord_id == user_id))
        await db.execute(
            update(Lease).where(Lease.tenant_id == user_id).values(tenant_id=None)
        )
        await db.execute(
            delete(Application).where(
                or_(
                    Application.tenant_id == user_id,
                    Application.property_id.in_(owned_properties),
                )
            )
        )
        await db.execute(delete(Document).where(Document.user_id == user_id))
        await db.execute(
            update(Document)
            .where(Document.property_id.in_(owned_properties))
            .values(property_id=None)
        )
        await db.execute(delete(Property).where(Property.landlord_id == user_id))
        await db.execute(delete(Notification).where(Notification.user_id == user_id))
        await db.execute(
            delete(NotificationPreference).where(
                NotificationPreference.user_id == user_id
            )
        )
        await crud.delete_profile(db, user_id)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.error(
            "Account deletion rolled back",
            extra={"user_id": str(user_id), "error": str(e.orig)},
        )
        raise ConflictError(
            "Account could not be deleted",
            details={"database_error": str(e.orig)},
        ) from e

    logger.info(
        "Account deleted",
        extra={"user_id": str(user_id), "documents": len(document_paths)},
    )

    orphaned: list[str] = []
    if storage is not None and document_paths:
        try:
            await storage.remove(document_paths)
        except ExternalServiceError:
            logger.error(
                "Stored documents left behind after account deletion",
                extra={"user_id": str(user_id), "paths": document_paths},
            )
            orphaned = document_paths

    await publish_auth_event(hub, EventType.SIGNED_OUT, profile)
    return orphaned
