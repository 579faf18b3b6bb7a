"""Notification tests."""

from datetime import timedelta

import pytest

from rentpilot_backend.core.exceptions import NotFoundError
from rentpilot_backend.core.realtime import EventType, user_notifications_topic
from rentpilot_backend.core.utils import utc_now
from rentpilot_backend.modules.notifications import crud, services
from rentpilot_backend.modules.notifications.schemas import (
    NotificationPreferencesUpdate,
)


async def add(db, user_id, title="Hello", **kwargs):
    notification = await services.add_notification(
        db, user_id=user_id, notification_type="system", title=title, **kwargs
    )
    await db.commit()
    return notification


async def test_list_is_latest_first_and_capped(db, tenant):
    for index in range(services.RECENT_LIMIT + 5):
        await crud.create_notification(db, tenant.id, "system", f"n{index}")
    await db.commit()

    notifications = await services.list_notifications(db, tenant.id)

    assert len(notifications) == services.RECENT_LIMIT
    assert notifications[0].title == f"n{services.RECENT_LIMIT + 4}"


async def test_expired_notifications_are_hidden(db, tenant):
    await add(db, tenant.id, "old", metadata=None)
    await crud.create_notification(
        db, tenant.id, "system", "gone", expires_at=utc_now() - timedelta(days=1)
    )
    await db.commit()

    titles = [n.title for n in await services.list_notifications(db, tenant.id)]
    assert titles == ["old"]


async def test_mark_read_publishes_update(db, hub, tenant):
    notification = await add(db, tenant.id)
    subscription = hub.subscribe(user_notifications_topic(tenant.id))

    updated = await services.mark_as_read(db, notification.id, tenant.id, hub=hub)

    assert updated.is_read is True
    event = await subscription.get(timeout=1)
    assert event.type == EventType.UPDATE
    assert event.record["is_read"] is True


async def test_mark_all_and_unread_filter(db, tenant):
    for title in ("a", "b"):
        await add(db, tenant.id, title)

    assert await services.mark_all_as_read(db, tenant.id) == 2
    assert await services.list_notifications(db, tenant.id, unread_only=True) == []


async def test_dismiss_is_scoped_to_owner(db, tenant, landlord):
    notification = await add(db, tenant.id)

    with pytest.raises(NotFoundError):
        await services.dismiss(db, notification.id, landlord.id)

    await services.dismiss(db, notification.id, tenant.id)
    assert await services.list_notifications(db, tenant.id) == []


async def test_preferences_default_on_and_update(db, tenant):
    preferences = await services.get_preferences(db, tenant.id)
    assert preferences.billing_alerts is True

    updated = await services.update_preferences(
        db, tenant.id, NotificationPreferencesUpdate(billing_alerts=False)
    )
    assert updated.billing_alerts is False
    assert updated.app_alerts is True


class TestNotificationApi:
    async def test_list_and_read(self, client, db, tenant):
        notification = await add(db, tenant.id)

        response = await client.get("/api/notifications", headers=tenant.headers)
        assert [n["id"] for n in response.json()["data"]] == [str(notification.id)]

        response = await client.post(
            f"/api/notifications/{notification.id}/read", headers=tenant.headers
        )
        assert response.json()["data"]["is_read"] is True

    async def test_preferences_round_trip(self, client, tenant):
        response = await client.put(
            "/api/notifications/preferences",
            json={"lease_reminders": False},
            headers=tenant.headers,
        )
        assert response.json()["data"]["lease_reminders"] is False

        response = await client.get(
            "/api/notifications/preferences", headers=tenant.headers
        )
        assert response.json()["data"]["lease_reminders"] is False
