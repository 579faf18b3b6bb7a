"""Notification API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, WebSocket

from ...core.realtime import Hub, stream_topic, user_notifications_topic
from ...database import DB
from ..auth.dependencies import CurrentUser, authenticate_websocket
from ..commons import BaseResponse
from . import services
from .schemas import (
    NotificationPreferences,
    NotificationPreferencesUpdate,
    NotificationResponse,
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])
ws_router = APIRouter(prefix="/ws", tags=["Realtime"])


@router.get("", response_model=BaseResponse[list[NotificationResponse]])
async def list_notifications(
    current_user: CurrentUser,
    db: DB,
    unread_only: bool = Query(False),
):
    """The caller's 50 most recent notifications."""
    notifications = await services.list_notifications(
        db, current_user.id, unread_only=unread_only
    )
    return BaseResponse(
        success=True,
        data=[NotificationResponse.model_validate(n) for n in notifications],
    )


@router.get("/preferences", response_model=BaseResponse[NotificationPreferences])
async def get_preferences(current_user: CurrentUser, db: DB):
    preferences = await services.get_preferences(db, current_user.id)
    return BaseResponse(success=True, data=preferences)


@router.put("/preferences", response_model=BaseResponse[NotificationPreferences])
async def update_preferences(
    data: NotificationPreferencesUpdate, current_user: CurrentUser, db: DB
):
    preferences = await services.update_preferences(db, current_user.id, data)
    return BaseResponse(
        success=True, message="Notification preferences saved", data=preferences
    )


@router.post("/read-all", response_model=BaseResponse[None])
async def mark_all_as_read(current_user: CurrentUser, db: DB):
    count = await services.mark_all_as_read(db, current_user.id)
    return BaseResponse(success=True, message=f"{count} notification(s) marked as read")


@router.post(
    "/{notification_id}/read", response_model=BaseResponse[NotificationResponse]
)
async def mark_as_read(
    notification_id: UUID, current_user: CurrentUser, db: DB, hub: Hub
):
    notification = await services.mark_as_read(
        db, notification_id, current_user.id, hub=hub
    )
    return BaseResponse(
        success=True, data=NotificationResponse.model_validate(notification)
    )


@router.delete("/{notification_id}", response_model=BaseResponse[None])
async def dismiss_notification(
    notification_id: UUID, current_user: CurrentUser, db: DB, hub: Hub
):
    await services.dismiss(db, notification_id, current_user.id, hub=hub)
    return BaseResponse(success=True, message="Notification dismissed")


@ws_router.websocket("/notifications")
async def notification_events(
    websocket: WebSocket, hub: Hub, token: str | None = None
):
    """Live notification inserts, updates and dismissals for the caller."""
    user = await authenticate_websocket(websocket, token)
    if user is None:
        return
    await websocket.accept()
    await stream_topic(websocket, hub, user_notifications_topic(user.id))
