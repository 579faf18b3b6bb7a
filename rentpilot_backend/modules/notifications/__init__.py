"""Notifications module for RentPilot."""

from .models import Notification, NotificationPreference, NotificationPriority, NotificationType
from .routers import router, ws_router

__all__ = [
    "Notification",
    "NotificationPreference",
    "NotificationPriority",
    "NotificationType",
    "router",
    "ws_router",
]
