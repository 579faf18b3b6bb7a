"""CRUD operations for lease management module."""

import uuid
from datetime import date
from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..property_management.models import Property
from .models import Lease, LeaseStatus, LeaseTenant
from .schemas import TenantEntry


async def get_lease_by_id(db: AsyncSession, lease_id: uuid.UUID) -> Lease | None:
    """Load a lease with its tenant rows, refreshing any copy already in the session."""
    result = await db.execute(
        select(Lease)
        .options(selectinload(Lease.tenants))
        .where(Lease.id == lease_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_active_lease_for_property(
    db: AsyncSession, property_id: uuid.UUID
) -> Lease | None:
    result = await db.execute(
        select(Lease)
        .where(Lease.property_id == property_id, Lease.status == LeaseStatus.ACTIVE)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_leases(
    db: AsyncSession,
    landlord_id: uuid.UUID | None = None,
    tenant_id: uuid.UUID | None = None,
    property_id: uuid.UUID | None = None,
    status: LeaseStatus | None = None,
) -> list[Lease]:
    """Leases visible to a landlord and/or tenant, newest first."""
    query = select(Lease).options(selectinload(Lease.tenants))
    scope = []
    if landlord_id is not None:
        scope.append(Lease.landlord_id == landlord_id)
    if tenant_id is not None:
        scope.append(Lease.tenant_id == tenant_id)
    if scope:
        query = query.where(or_(*scope))
    if property_id is not None:
        query = query.where(Lease.property_id == property_id)
    if status is not None:
        query = query.where(Lease.status == status)
    result = await db.execute(query.order_by(Lease.created_at.desc()))
    return list(result.scalars().all())


async def get_active_leases_ending_between(
    db: AsyncSession, landlord_id: uuid.UUID, after: date, before: date
) -> list[tuple[Lease, str]]:
    """Active leases ending strictly between two dates, with their property title."""
    result = await db.execute(
        select(Lease, Property.title)
        .join(Property, Lease.property_id == Property.id)
        .where(
            Lease.landlord_id == landlord_id,
            Lease.status == LeaseStatus.ACTIVE,
            Lease.lease_end_date > after,
            Lease.lease_end_date < before,
        )
        .order_by(Lease.lease_end_date)
    )
    return [(lease, title) for lease, title in result.all()]


async def count_lease_tenants(db: AsyncSession, lease_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(LeaseTenant.id)).where(LeaseTenant.lease_id == lease_id)
    )
    return result.scalar_one()


async def create_lease(
    db: AsyncSession,
    property_id: uuid.UUID,
    landlord_id: uuid.UUID,
    tenant_name: str,
    reminder_settings: dict[str, Any] | None,
    **kwargs,
) -> Lease:
    lease = Lease(
        property_id=property_id,
        landlord_id=landlord_id,
        tenant_name=tenant_name,
        reminder_settings=reminder_settings,
        **kwargs,
    )
    db.add(lease)
    await db.flush()
    return lease


async def add_lease_tenants(
    db: AsyncSession, lease_id: uuid.UUID, tenants: list[TenantEntry]
) -> list[LeaseTenant]:
    """Insert one row per tenant; the first is the primary tenant."""
    rows = [
        LeaseTenant(
            lease_id=lease_id,
            tenant_name=entry.tenant_name.strip(),
            tenant_email=(entry.tenant_email or "").strip() or None,
            tenant_phone=(entry.tenant_phone or "").strip() or None,
            is_primary=index == 0,
            position=index,
        )
        for index, entry in enumerate(tenants)
    ]
    db.add_all(rows)
    await db.flush()
    return rows


async def set_status(db: AsyncSession, lease: Lease, status: LeaseStatus) -> Lease:
    lease.status = status
    await db.flush()
    return lease


async def delete_lease(db: AsyncSession, lease: Lease) -> None:
    """Delete a lease with its tenant rows and message history."""
    from ..messaging.models import Message, MessageReadStatus

    lease_messages = select(Message.id).where(Message.lease_id == lease.id)
    await db.execute(
        delete(MessageReadStatus).where(MessageReadStatus.message_id.in_(lease_messages))
    )
    await db.execute(delete(Message).where(Message.lease_id == lease.id))
    await db.delete(lease)
    await db.flush()
