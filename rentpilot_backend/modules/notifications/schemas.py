"""Notification schemas for RentPilot."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from .models import NotificationPriority


class NotificationResponse(BaseModel):
    id: UUID
    user_id: UUID
    type: str
    title: str
    description: str | None = None
    metadata: dict[str, Any] | None = Field(None, validation_alias="metadata_")
    priority: NotificationPriority
    is_read: bool
    action_url: str | None = None
    expires_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True
        populate_by_name = True


class NotificationPreferences(BaseModel):
    app_alerts: bool = True
    billing_alerts: bool = True
    lease_reminders: bool = True
    maintenance_alerts: bool = True

    class Config:
        from_attributes = True


class NotificationPreferencesUpdate(BaseModel):
    app_alerts: bool | None = None
    billing_alerts: bool | None = None
    lease_reminders: bool | None = None
    maintenance_alerts: bool | None = None
