"""CRUD operations for documents module."""

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Document, DocumentCategory


async def create_document(db: AsyncSession, user_id: uuid.UUID, **kwargs) -> Document:
    document = Document(user_id=user_id, **kwargs)
    db.add(document)
    await db.flush()
    return document


async def get_document(
    db: AsyncSession, document_id: uuid.UUID, user_id: uuid.UUID
) -> Document | None:
    result = await db.execute(
        select(Document).where(Document.id == document_id, Document.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_document_by_path(db: AsyncSession, file_path: str) -> Document | None:
    result = await db.execute(select(Document).where(Document.file_path == file_path))
    return result.scalar_one_or_none()


async def get_documents(
    db: AsyncSession,
    user_id: uuid.UUID,
    category: DocumentCategory | None = None,
    property_id: uuid.UUID | None = None,
) -> list[Document]:
    """A user's documents, newest upload first."""
    query = select(Document).where(Document.user_id == user_id)
    if category is not None:
        query = query.where(Document.category == category)
    if property_id is not None:
        query = query.where(Document.property_id == property_id)
    result = await db.execute(query.order_by(Document.uploaded_at.desc()))
    return list(result.scalars().all())


async def get_usage(db: AsyncSession, user_id: uuid.UUID) -> tuple[int, int]:
    """Returns (total bytes, file count) for a user."""
    result = await db.execute(
        select(func.coalesce(func.sum(Document.file_size), 0), func.count(Document.id))
        .where(Document.user_id == user_id)
    )
    total_bytes, count = result.one()
    return int(total_bytes), count


async def delete_document(db: AsyncSession, document: Document) -> None:
    await db.delete(document)
    await db.flush()
