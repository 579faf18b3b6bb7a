"""Document store facade.

Uploads go to object storage first and are then indexed by a metadata row.
If indexing fails, the stored object is removed again. Deletes run the other
way round: the row goes first, and a storage failure afterwards leaves an
orphaned object that is logged and reported to the caller.
"""

import logging
import os
import secrets
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.exceptions import (
    BusinessLogicError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from ...core.storage import StorageBackend
from ...core.utils import utc_now
from ..property_management import crud as property_crud
from . import crud
from .models import Document, DocumentCategory
from .schemas import DocumentUpdate, StorageUsage

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024
DEFAULT_MIME_TYPE = "application/octet-stream"


def build_object_path(user_id: uuid.UUID, filename: str) -> str:
    """``{user_id}/{timestamp}-{random}.{ext}``"""
    extension = os.path.splitext(filename)[1].lstrip(".").lower() or "bin"
    timestamp = int(utc_now().timestamp() * 1000)
    return f"{user_id}/{timestamp}-{secrets.token_hex(4)}.{extension}"


async def upload_document(
    db: AsyncSession,
    storage: StorageBackend,
    user_id: uuid.UUID,
    filename: str,
    data: bytes,
    content_type: str | None = None,
    category: DocumentCategory = DocumentCategory.OTHER,
    property_id: uuid.UUID | None = None,
    name: str | None = None,
) -> Document:
    """Store a file and record its metadata.

    Raises:
        ValidationError: Empty or oversized file (nothing is stored)
        NotFoundError: ``property_id`` is not one of the caller's properties
        BusinessLogicError: The upload would exceed the storage quota
        ExternalServiceError: Storage rejected the object
        DatabaseError: Metadata could not be written (object is removed)
    """
    size = len(data)
    max_bytes = settings.document_max_upload_bytes
    if size == 0:
        raise ValidationError("File is empty", field="file")
    if size > max_bytes:
        raise ValidationError(
            f"File size exceeds {max_bytes // BYTES_PER_MB}MB limit",
            field="file",
            value=size,
        )

    if property_id is not None:
        if not await property_crud.get_property_by_id(db, property_id, user_id):
            raise NotFoundError(f"Property with ID {property_id} not found")

    used_bytes, _ = await crud.get_usage(db, user_id)
    if used_bytes + size > settings.storage_quota_mb * BYTES_PER_MB:
        raise BusinessLogicError(
            f"Storage quota of {settings.storage_quota_mb}MB exceeded"
        )

    path = build_object_path(user_id, filename)
    await storage.upload(path, data)

    try:
        document = await crud.create_document(
            db,
            user_id,
            property_id=property_id,
            name=(name or filename).strip() or filename,
            original_name=filename,
            file_path=path,
            mime_type=content_type or DEFAULT_MIME_TYPE,
            file_size=size,
            category=category,
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "Document metadata write failed, removing stored object",
            extra={"path": path, "error": str(e)},
        )
        try:
            await storage.remove([path])
        except ExternalServiceError:
            logger.error("Compensating remove failed", extra={"path": path})
        raise DatabaseError(
            "Document could not be saved", details={"database_error": str(e)}
        ) from e

    logger.info(
        "Document uploaded",
        extra={"document_id": str(document.id), "file_size": size, "path": path},
    )
    return document


async def list_documents(
    db: AsyncSession,
    user_id: uuid.UUID,
    category: DocumentCategory | None = None,
    property_id: uuid.UUID | None = None,
) -> list[Document]:
    return await crud.get_documents(
        db, user_id, category=category, property_id=property_id
    )


async def storage_usage(db: AsyncSession, user_id: uuid.UUID) -> StorageUsage:
    used_bytes, count = await crud.get_usage(db, user_id)
    return StorageUsage(
        used_mb=round(used_bytes / BYTES_PER_MB, 2),
        quota_mb=settings.storage_quota_mb,
        file_count=count,
    )


async def _owned_document(
    db: AsyncSession, document_id: uuid.UUID, user_id: uuid.UUID
) -> Document:
    document = await crud.get_document(db, document_id, user_id)
    if not document:
        raise NotFoundError(f"Document with ID {document_id} not found")
    return document


async def update_document(
    db: AsyncSession, document_id: uuid.UUID, user_id: uuid.UUID, data: DocumentUpdate
) -> Document:
    document = await _owned_document(db, document_id, user_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(document, field, value)
    await db.commit()
    return document


async def delete_document(
    db: AsyncSession,
    storage: StorageBackend,
    document_id: uuid.UUID,
    user_id: uuid.UUID,
) -> bool:
    """Delete a document's metadata, then its stored object.

    Returns:
        False if the object could not be removed from storage. The metadata
        is gone either way.
    """
    document = await _owned_document(db, document_id, user_id)
    path = document.file_path

    await crud.delete_document(db, document)
    await db.commit()

    try:
        await storage.remove([path])
    except ExternalServiceError:
        logger.error(
            "Document deleted but stored object remains",
            extra={"document_id": str(document_id), "path": path},
        )
        return False

    logger.info("Document deleted", extra={"document_id": str(document_id)})
    return True


async def get_url(
    storage: StorageBackend, path: str, expires_in: int | None = None
) -> str | None:
    """Signed, time-limited URL for a stored object, or None if it cannot be served."""
    return await storage.create_signed_url(
        path, expires_in or settings.signed_url_expire_seconds
    )


async def get_document_url(
    db: AsyncSession,
    storage: StorageBackend,
    document_id: uuid.UUID,
    user_id: uuid.UUID,
) -> str | None:
    document = await _owned_document(db, document_id, user_id)
    return await get_url(storage, document.file_path)
