"""Lease messaging API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, WebSocket, status

from ...core.exceptions import NotFoundError, PermissionError
from ...core.realtime import Hub, lease_messages_topic, stream_topic
from ...database import DB
from ..auth.dependencies import WS_FORBIDDEN, CurrentUser, authenticate_websocket
from ..commons import BaseResponse
from . import services
from .schemas import MessageCreate, MessageResponse, UnreadCountResponse

router = APIRouter(tags=["Messages"])
ws_router = APIRouter(prefix="/ws", tags=["Realtime"])


@router.get(
    "/leases/{lease_id}/messages",
    response_model=BaseResponse[list[MessageResponse]],
)
async def list_messages(
    lease_id: UUID,
    current_user: CurrentUser,
    db: DB,
    after_sequence: int | None = Query(None, ge=0),
):
    """Thread of a lease, oldest first."""
    messages = await services.fetch_messages(
        db, lease_id, current_user.id, after_sequence=after_sequence
    )
    return BaseResponse(success=True, data=messages)


@router.post(
    "/leases/{lease_id}/messages",
    response_model=BaseResponse[MessageResponse],
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    lease_id: UUID, data: MessageCreate, current_user: CurrentUser, db: DB, hub: Hub
):
    message = await services.send_message(
        db, lease_id, current_user, data.message, hub=hub
    )
    return BaseResponse(success=True, data=message)


@router.post("/leases/{lease_id}/messages/read-all", response_model=BaseResponse[None])
async def mark_all_as_read(lease_id: UUID, current_user: CurrentUser, db: DB):
    count = await services.mark_all_as_read(db, lease_id, current_user.id)
    return BaseResponse(success=True, message=f"{count} message(s) marked as read")


@router.get("/messages/unread-count", response_model=BaseResponse[UnreadCountResponse])
async def unread_count(
    current_user: CurrentUser, db: DB, lease_id: UUID | None = Query(None)
):
    count = await services.unread_count(db, current_user.id, lease_id=lease_id)
    return BaseResponse(
        success=True, data=UnreadCountResponse(lease_id=lease_id, unread=count)
    )


@router.post("/messages/{message_id}/read", response_model=BaseResponse[None])
async def mark_as_read(message_id: UUID, current_user: CurrentUser, db: DB):
    await services.mark_as_read(db, message_id, current_user.id)
    return BaseResponse(success=True, message="Message marked as read")


@ws_router.websocket("/leases/{lease_id}/messages")
async def message_events(
    websocket: WebSocket, lease_id: UUID, db: DB, hub: Hub, token: str | None = None
):
    """New messages of one lease thread, for its participants."""
    user = await authenticate_websocket(websocket, token)
    if user is None:
        return
    try:
        await services.get_participant_lease(db, lease_id, user.id)
    except (NotFoundError, PermissionError):
        await websocket.close(code=WS_FORBIDDEN)
        return
    finally:
        # Release the connection; the stream below does not touch the database
        await db.close()

    await websocket.accept()
    await stream_topic(websocket, hub, lease_messages_topic(lease_id))
