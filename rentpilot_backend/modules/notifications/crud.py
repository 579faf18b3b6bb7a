"""CRUD operations for notifications module."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.utils import utc_now
from .models import Notification, NotificationPreference, NotificationPriority

# ----- Notification CRUD -----


async def create_notification(
    db: AsyncSession,
    user_id: uuid.UUID,
    notification_type: str,
    title: str,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    action_url: str | None = None,
    expires_at: datetime | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=notification_type,
        title=title,
        description=description,
        metadata_=metadata,
        priority=priority,
        is_read=False,
        action_url=action_url,
        expires_at=expires_at,
    )
    db.add(notification)
    await db.flush()
    return notification


async def get_notification(
    db: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID
) -> Notification | None:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id, Notification.user_id == user_id
        )
    )
    return result.scalar_one_or_none()


async def get_notifications(
    db: AsyncSession,
    user_id: uuid.UUID,
    limit: int = 50,
    unread_only: bool = False,
) -> list[Notification]:
    """Latest notifications first, skipping expired ones."""
    query = select(Notification).where(
        Notification.user_id == user_id,
        or_(Notification.expires_at.is_(None), Notification.expires_at > utc_now()),
    )
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    result = await db.execute(
        query.order_by(Notification.created_at.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def mark_all_read(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


async def delete_notification(db: AsyncSession, notification: Notification) -> None:
    await db.delete(notification)
    await db.flush()


# ----- Preference CRUD -----


async def get_preferences(
    db: AsyncSession, user_id: uuid.UUID
) -> NotificationPreference | None:
    result = await db.execute(
        select(NotificationPreference).where(NotificationPreference.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def upsert_preferences(
    db: AsyncSession, user_id: uuid.UUID, **toggles: bool
) -> NotificationPreference:
    """Create the preference row on first write, then apply the given toggles."""
    preferences = await get_preferences(db, user_id)
    if preferences is None:
        preferences = NotificationPreference(
            user_id=user_id,
            app_alerts=True,
            billing_alerts=True,
            lease_reminders=True,
            maintenance_alerts=True,
        )
        db.add(preferences)
    for key, value in toggles.items():
        if value is not None:
            setattr(preferences, key, value)
    await db.flush()
    return preferences
