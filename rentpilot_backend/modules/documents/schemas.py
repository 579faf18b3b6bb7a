"""Document schemas for RentPilot."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .models import DocumentCategory


class DocumentUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    category: DocumentCategory | None = None


class DocumentResponse(BaseModel):
    id: UUID
    user_id: UUID
    property_id: UUID | None = None
    name: str
    original_name: str
    file_path: str
    mime_type: str
    file_size: int
    category: DocumentCategory
    uploaded_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StorageUsage(BaseModel):
    used_mb: float
    quota_mb: int
    file_count: int


class DocumentUrl(BaseModel):
    url: str
    expires_in: int
