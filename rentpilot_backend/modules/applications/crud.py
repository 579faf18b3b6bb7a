"""CRUD operations for applications module."""

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..property_management.models import Property
from .models import Application, ApplicationStatus


async def create_application(
    db: AsyncSession, tenant_id: uuid.UUID, **kwargs: Any
) -> Application:
    application = Application(
        tenant_id=tenant_id, status=ApplicationStatus.PENDING, **kwargs
    )
    db.add(application)
    await db.flush()
    return application


async def get_applications_for_tenant(
    db: AsyncSession, tenant_id: uuid.UUID
) -> list[Application]:
    result = await db.execute(
        select(Application)
        .where(Application.tenant_id == tenant_id)
        .order_by(Application.created_at.desc())
    )
    return list(result.scalars().all())


async def get_applications_for_landlord(
    db: AsyncSession,
    landlord_id: uuid.UUID,
    property_id: uuid.UUID | None = None,
) -> list[Application]:
    """Applications submitted against any of the landlord's properties."""
    query = (
        select(Application)
        .join(Property, Application.property_id == Property.id)
        .where(Property.landlord_id == landlord_id)
    )
    if property_id is not None:
        query = query.where(Application.property_id == property_id)
    result = await db.execute(query.order_by(Application.created_at.desc()))
    return list(result.scalars().all())


async def count_pending_for_landlord(db: AsyncSession, landlord_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(Application.id))
        .join(Property, Application.property_id == Property.id)
        .where(
            Property.landlord_id == landlord_id,
            Application.status == ApplicationStatus.PENDING,
        )
    )
    return result.scalar_one()
