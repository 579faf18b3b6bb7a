"""Lease messaging schemas for RentPilot."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    message: str = Field(..., max_length=5000)


class MessageResponse(BaseModel):
    id: UUID
    lease_id: UUID
    sender_id: UUID | None = None
    sender_name: str
    sequence: int
    message: str
    created_at: datetime


class UnreadCountResponse(BaseModel):
    lease_id: UUID | None = None
    unread: int
