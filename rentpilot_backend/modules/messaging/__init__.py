"""Lease messaging for RentPilot."""

from .models import Message, MessageReadStatus
from .routers import router, ws_router
from .thread import MessageThreadView

__all__ = ["Message", "MessageReadStatus", "MessageThreadView", "router", "ws_router"]
