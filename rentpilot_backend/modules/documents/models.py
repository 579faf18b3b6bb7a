"""Document metadata model for RentPilot.

The bytes live in object storage under ``file_path``; this row is the only
index of them.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ...core.database_types import UUID as UUID_DB
from ...core.utils import utc_now
from ...database import Base, UUIDPrimaryKey, enum_column


class DocumentCategory(str, enum.Enum):
    LEASE = "lease"
    RECEIPT = "receipt"
    INSPECTION = "inspection"
    OTHER = "other"


class Document(UUIDPrimaryKey, Base):
    __tablename__ = "documents"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    property_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID_DB(), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    category: Mapped[DocumentCategory] = mapped_column(
        enum_column(DocumentCategory), nullable=False, default=DocumentCategory.OTHER
    )
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (Index("ix_documents_user_uploaded", "user_id", "uploaded_at"),)

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, name={self.name}, user_id={self.user_id})>"
