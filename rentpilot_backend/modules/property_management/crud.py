"""CRUD operations for property management module."""

import uuid

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Property


async def get_property_by_id(
    db: AsyncSession,
    property_id: uuid.UUID,
    landlord_id: uuid.UUID | None = None,
) -> Property | None:
    """Get a property by ID, optionally scoped to its landlord."""
    filters = [Property.id == property_id]
    if landlord_id is not None:
        filters.append(Property.landlord_id == landlord_id)
    result = await db.execute(select(Property).where(and_(*filters)))
    return result.scalar_one_or_none()


async def count_properties(db: AsyncSession, landlord_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(Property.id)).where(Property.landlord_id == landlord_id)
    )
    return result.scalar_one()


async def get_properties(
    db: AsyncSession,
    landlord_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 100,
    is_available: bool | None = None,
    search: str | None = None,
) -> tuple[list[Property], int]:
    """Get properties with filtering and pagination.

    Returns:
        Tuple of (list of properties, total count)
    """
    filters = []
    if landlord_id is not None:
        filters.append(Property.landlord_id == landlord_id)
    if is_available is not None:
        filters.append(Property.is_available == is_available)
    if search:
        search_filter = f"%{search}%"
        filters.append(
            (Property.title.ilike(search_filter))
            | (Property.address.ilike(search_filter))
            | (Property.city.ilike(search_filter))
        )

    count_query = select(func.count(Property.id)).where(and_(True, *filters))
    total = (await db.execute(count_query)).scalar_one()

    data_query = (
        select(Property)
        .where(and_(True, *filters))
        .order_by(Property.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(data_query)
    return list(result.scalars().all()), total


async def count_units(db: AsyncSession, landlord_id: uuid.UUID) -> int:
    """Total rentable units; a property without a unit count is one unit."""
    result = await db.execute(
        select(func.coalesce(func.sum(func.coalesce(Property.unit_count, 1)), 0))
        .where(Property.landlord_id == landlord_id)
    )
    return int(result.scalar_one())


async def create_property(
    db: AsyncSession, landlord_id: uuid.UUID, **kwargs
) -> Property:
    property_obj = Property(landlord_id=landlord_id, **kwargs)
    db.add(property_obj)
    await db.flush()
    return property_obj


async def update_property(db: AsyncSession, property_obj: Property, **kwargs) -> Property:
    for key, value in kwargs.items():
        if value is not None and hasattr(property_obj, key):
            setattr(property_obj, key, value)
    await db.flush()
    return property_obj


async def set_availability(
    db: AsyncSession, property_id: uuid.UUID, is_available: bool
) -> Property | None:
    """Flip the availability flag of a property within the current transaction."""
    property_obj = await get_property_by_id(db, property_id)
    if property_obj is not None:
        property_obj.is_available = is_available
        await db.flush()
    return property_obj


async def delete_property(db: AsyncSession, property_obj: Property) -> None:
    await db.delete(property_obj)
    await db.flush()
