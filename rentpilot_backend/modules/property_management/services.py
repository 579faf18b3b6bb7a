"""Property management business logic services."""

import logging
import os
import uuid
from typing import NamedTuple

from sqlalchemy import select
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
from ...core.realtime import RealtimeHub
from ...core.storage import StorageBackend
from ...core.utils import utc_now
from ..auth.schemas import AuthenticatedUser
from ..notifications import services as notification_services
from ..notifications.models import NotificationType
from . import crud
from .models import Property
from .schemas import PropertyCreate, PropertyPhoto, PropertyUpdate

logger = logging.getLogger(__name__)


async def get_owned_property(
    db: AsyncSession, property_id: uuid.UUID, landlord_id: uuid.UUID
) -> Property:
    """Load a property the landlord owns.

    Raises:
        NotFoundError: If the property does not exist or belongs to someone else
    """
    property_obj = await crud.get_property_by_id(db, property_id, landlord_id)
    if not property_obj:
        raise NotFoundError(f"Property with ID {property_id} not found")
    return property_obj


async def get_visible_property(
    db: AsyncSession, property_id: uuid.UUID, user: AuthenticatedUser
) -> Property:
    """Owners see their properties; everyone else only sees available listings."""
    property_obj = await crud.get_property_by_id(db, property_id)
    if not property_obj or (
        property_obj.landlord_id != user.id and not property_obj.is_available
    ):
        raise NotFoundError(f"Property with ID {property_id} not found")
    return property_obj


async def create_property(
    db: AsyncSession,
    landlord_id: uuid.UUID,
    data: PropertyCreate,
    hub: RealtimeHub | None = None,
) -> Property:
    """Add a property to the landlord's portfolio and notify them of the vacancy."""
    property_obj = await crud.create_property(
        db, landlord_id=landlord_id, **data.model_dump()
    )
    notification = await notification_services.add_notification(
        db,
        user_id=landlord_id,
        notification_type=NotificationType.VACANCY.value,
        title="New Property Added",
        description=f"{property_obj.title} has been added to your portfolio",
        metadata={"property_id": str(property_obj.id)},
    )
    await db.commit()

    logger.info(
        "Property created",
        extra={"property_id": str(property_obj.id), "landlord_id": str(landlord_id)},
    )
    await notification_services.publish_notification(hub, notification)
    return property_obj


async def update_property(
    db: AsyncSession,
    property_id: uuid.UUID,
    landlord_id: uuid.UUID,
    data: PropertyUpdate,
) -> Property:
    """Update a property the landlord owns.

    Raises:
        NotFoundError: If property not found
        BusinessLogicError: If marking a property with an active lease as available
    """
    property_obj = await get_owned_property(db, property_id, landlord_id)

    changes = data.model_dump(exclude_unset=True)
    if changes.get("is_available") and await _has_active_lease(db, property_id):
        raise BusinessLogicError(
            "Property has an active lease and cannot be marked available"
        )

    updated = await crud.update_property(db, property_obj, **changes)
    await db.commit()
    return updated


async def delete_property(
    db: AsyncSession, property_id: uuid.UUID, landlord_id: uuid.UUID
) -> None:
    """Delete a property the landlord owns.

    Raises:
        NotFoundError: If property not found
        BusinessLogicError: If the property has an active lease
    """
    property_obj = await get_owned_property(db, property_id, landlord_id)

    if await _has_active_lease(db, property_id):
        raise BusinessLogicError(
            "Cannot delete a property with an active lease. Expire the lease first."
        )

    await crud.delete_property(db, property_obj)
    await db.commit()
    logger.info("Property deleted", extra={"property_id": str(property_id)})


class PhotoFile(NamedTuple):
    filename: str
    data: bytes
    content_type: str | None = None


def build_photo_path(
    landlord_id: uuid.UUID, property_id: uuid.UUID, filename: str, index: int = 0
) -> str:
    """``{landlord_id}/{property_id}/{timestamp}-{index}.{ext}``"""
    extension = os.path.splitext(filename)[1].lstrip(".").lower() or "jpg"
    timestamp = int(utc_now().timestamp() * 1000)
    return f"{landlord_id}/{property_id}/{timestamp}-{index}.{extension}"


def validate_photo(photo: PhotoFile) -> None:
    max_bytes = settings.photo_max_upload_bytes
    if not photo.data:
        raise ValidationError("Photo is empty", field="photos", value=photo.filename)
    if len(photo.data) > max_bytes:
        raise ValidationError(
            f"Photo exceeds the {max_bytes} byte limit",
            field="photos",
            value=photo.filename,
        )
    if photo.content_type and not photo.content_type.startswith("image/"):
        raise ValidationError(
            "Only image files can be added as photos",
            field="photos",
            value=photo.filename,
        )


async def upload_property_photos(
    db: AsyncSession,
    storage: StorageBackend,
    property_id: uuid.UUID,
    landlord_id: uuid.UUID,
    photos: list[PhotoFile],
) -> Property:
    """Store photos for a property and append their paths to it.

    Every photo is validated before anything is stored. A photo that storage
    rejects is skipped; the others are still attached.

    Raises:
        NotFoundError: If the property is not one of the landlord's
        ValidationError: No photos, or an empty, oversized or non-image file
        DatabaseError: The paths could not be saved (stored photos are removed)
    """
    property_obj = await get_owned_property(db, property_id, landlord_id)
    if not photos:
        raise ValidationError("Select at least one photo", field="photos")
    for photo in photos:
        validate_photo(photo)

    stored: list[str] = []
    for index, photo in enumerate(photos):
        path = build_photo_path(landlord_id, property_id, photo.filename, index)
        try:
            await storage.upload(path, photo.data)
        except ExternalServiceError:
            logger.warning(
                "Skipping photo rejected by storage",
                extra={"property_id": str(property_id), "filename": photo.filename},
            )
            continue
        stored.append(path)

    if not stored:
        return property_obj

    try:
        property_obj.photos = [*(property_obj.photos or []), *stored]
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "Photo paths not saved, removing stored photos",
            extra={"property_id": str(property_id), "error": str(e)},
        )
        try:
            await storage.remove(stored)
        except ExternalServiceError:
            logger.error("Compensating remove failed", extra={"paths": stored})
        raise DatabaseError(
            "Photos could not be saved", details={"database_error": str(e)}
        ) from e

    logger.info(
        "Property photos added",
        extra={"property_id": str(property_id), "count": len(stored)},
    )
    return property_obj


async def list_property_photos(
    db: AsyncSession,
    storage: StorageBackend,
    property_id: uuid.UUID,
    user: AuthenticatedUser,
) -> list[PropertyPhoto]:
    """Signed URLs for a visible property's photos, in upload order.

    Photos whose objects are gone from storage are left out.
    """
    property_obj = await get_visible_property(db, property_id, user)
    expires_in = settings.signed_url_expire_seconds

    photos = []
    for path in property_obj.photos or []:
        url = await storage.create_signed_url(path, expires_in)
        if url is None:
            logger.warning(
                "Property photo missing from storage",
                extra={"property_id": str(property_id), "path": path},
            )
            continue
        photos.append(PropertyPhoto(path=path, url=url, expires_in=expires_in))
    return photos


async def _has_active_lease(db: AsyncSession, property_id: uuid.UUID) -> bool:
    from ..lease_management.models import Lease, LeaseStatus

    result = await db.execute(
        select(Lease.id)
        .where(Lease.property_id == property_id, Lease.status == LeaseStatus.ACTIVE)
        .limit(1)
    )
    return result.scalar_one_or_none() is not None
