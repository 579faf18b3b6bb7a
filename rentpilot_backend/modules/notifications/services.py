"""Notification business logic services.

Other flows call ``add_notification`` inside their own transaction and
``publish_notification`` once that transaction has committed.
"""

import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import NotFoundError
from ...core.realtime import EventType, RealtimeEvent, RealtimeHub, user_notifications_topic
from . import crud
from .models import Notification, NotificationPriority
from .schemas import (
    NotificationPreferences,
    NotificationPreferencesUpdate,
    NotificationResponse,
)

logger = logging.getLogger(__name__)

RECENT_LIMIT = 50


async def add_notification(
    db: AsyncSession,
    user_id: uuid.UUID,
    notification_type: str,
    title: str,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    action_url: str | None = None,
) -> Notification:
    """Stage a notification in the caller's transaction (flush, no commit)."""
    return await crud.create_notification(
        db,
        user_id=user_id,
        notification_type=notification_type,
        title=title,
        description=description,
        metadata=metadata,
        priority=priority,
        action_url=action_url,
    )


async def publish_notification(
    hub: RealtimeHub | None,
    notification: Notification,
    event_type: EventType = EventType.INSERT,
) -> None:
    if hub is None:
        return
    record = NotificationResponse.model_validate(notification).model_dump(mode="json")
    await hub.publish(
        user_notifications_topic(notification.user_id),
        RealtimeEvent(type=event_type, table="notifications", record=record),
    )


async def list_notifications(
    db: AsyncSession, user_id: uuid.UUID, unread_only: bool = False
) -> list[Notification]:
    return await crud.get_notifications(
        db, user_id, limit=RECENT_LIMIT, unread_only=unread_only
    )


async def mark_as_read(
    db: AsyncSession,
    notification_id: uuid.UUID,
    user_id: uuid.UUID,
    hub: RealtimeHub | None = None,
) -> Notification:
    notification = await crud.get_notification(db, notification_id, user_id)
    if not notification:
        raise NotFoundError(f"Notification with ID {notification_id} not found")

    if not notification.is_read:
        notification.is_read = True
        await db.commit()
        await publish_notification(hub, notification, EventType.UPDATE)
    return notification


async def mark_all_as_read(db: AsyncSession, user_id: uuid.UUID) -> int:
    count = await crud.mark_all_read(db, user_id)
    await db.commit()
    return count


async def dismiss(
    db: AsyncSession,
    notification_id: uuid.UUID,
    user_id: uuid.UUID,
    hub: RealtimeHub | None = None,
) -> None:
    """Delete a notification the caller owns."""
    notification = await crud.get_notification(db, notification_id, user_id)
    if not notification:
        raise NotFoundError(f"Notification with ID {notification_id} not found")

    await crud.delete_notification(db, notification)
    await db.commit()
    await publish_notification(hub, notification, EventType.DELETE)


async def get_preferences(
    db: AsyncSession, user_id: uuid.UUID
) -> NotificationPreferences:
    preferences = await crud.get_preferences(db, user_id)
    if preferences is None:
        return NotificationPreferences()
    return NotificationPreferences.model_validate(preferences)


async def update_preferences(
    db: AsyncSession, user_id: uuid.UUID, data: NotificationPreferencesUpdate
) -> NotificationPreferences:
    preferences = await crud.upsert_preferences(
        db, user_id, **data.model_dump(exclude_unset=True)
    )
    await db.commit()
    logger.info("Notification preferences updated", extra={"user_id": str(user_id)})
    return NotificationPreferences.model_validate(preferences)
