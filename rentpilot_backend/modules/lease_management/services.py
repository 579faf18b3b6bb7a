"""Lease lifecycle business logic.

Creating or activating a lease writes the lease, its tenant rows, the
property's availability flag and a notification in one transaction. The
unique ``active_property_id`` column is what finally rejects a second active
lease for a property; the read-side check before it only produces an early,
friendlier error.
"""

import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    BusinessLogicError,
    ConflictError,
    NotFoundError,
    PermissionError,
    ValidationError,
)
from ...core.realtime import RealtimeHub
from ...core.utils import is_blank
from ..auth import crud as auth_crud
from ..auth.models import UserRole
from ..auth.schemas import AuthenticatedUser
from ..notifications import services as notification_services
from ..notifications.models import Notification, NotificationType
from ..property_management import crud as property_crud
from . import crud
from .models import ACTIVE_LEASE_CONSTRAINT, Lease, LeaseStatus
from .schemas import LeaseCreate, TenantEntry

logger = logging.getLogger(__name__)

ACTIVE_LEASE_CONFLICT = "Property already has an active lease"


def validate_lease_draft(data: LeaseCreate) -> list[TenantEntry]:
    """Check the required fields of a lease form without touching the database.

    Returns:
        The tenant entries with non-blank names, in submitted order

    Raises:
        ValidationError: On the first missing or inconsistent field
    """
    if data.property_id is None:
        raise ValidationError("Please select a property", field="property_id")

    tenants = [entry for entry in data.tenants if not is_blank(entry.tenant_name)]
    if not tenants:
        raise ValidationError("Please add at least one tenant name", field="tenants")

    if data.lease_start_date is None or data.lease_end_date is None:
        raise ValidationError("Lease start and end dates are required", field="dates")
    if data.lease_end_date <= data.lease_start_date:
        raise ValidationError(
            "Lease end date must be after the start date", field="lease_end_date"
        )

    if data.require_signature and is_blank(data.signature_name):
        raise ValidationError("A signature name is required", field="signature_name")

    if data.status == LeaseStatus.EXPIRED:
        raise ValidationError(
            "A new lease must be a draft or active", field="status", value=data.status
        )

    return tenants


def is_active_lease_violation(error: IntegrityError) -> bool:
    message = str(error.orig)
    return ACTIVE_LEASE_CONSTRAINT in message or "active_property_id" in message


def _conflict_from(error: IntegrityError) -> ConflictError:
    if is_active_lease_violation(error):
        return ConflictError(
            ACTIVE_LEASE_CONFLICT, details={"database_error": str(error.orig)}
        )
    return ConflictError(
        "Lease could not be saved", details={"database_error": str(error.orig)}
    )


async def _lease_notification(
    db: AsyncSession,
    lease: Lease,
    notification_type: NotificationType,
    title: str,
    description: str,
) -> Notification:
    return await notification_services.add_notification(
        db,
        user_id=lease.landlord_id,
        notification_type=notification_type.value,
        title=title,
        description=description,
        metadata={"lease_id": str(lease.id), "property_id": str(lease.property_id)},
        action_url=f"/dashboard/landlord?lease={lease.id}",
    )


async def create_lease(
    db: AsyncSession,
    landlord: AuthenticatedUser,
    data: LeaseCreate,
    hub: RealtimeHub | None = None,
) -> Lease:
    """Create a lease with its tenant records as a single unit.

    Raises:
        ValidationError: If the form is incomplete (no query is made)
        BusinessLogicError: If the landlord has no property to lease
        NotFoundError: If the property is not one of the landlord's
        ConflictError: If the property already has an active lease
    """
    tenants = validate_lease_draft(data)

    property_obj = await property_crud.get_property_by_id(
        db, data.property_id, landlord.id
    )
    if not property_obj:
        if await property_crud.count_properties(db, landlord.id) == 0:
            raise BusinessLogicError("Add a property before creating a lease")
        raise NotFoundError(f"Property with ID {data.property_id} not found")

    if data.tenant_id is not None:
        tenant_profile = await auth_crud.get_profile_by_id(db, data.tenant_id)
        if not tenant_profile or tenant_profile.role != UserRole.TENANT:
            raise ValidationError(
                "Linked tenant must be a tenant account", field="tenant_id"
            )

    if data.status == LeaseStatus.ACTIVE:
        if await crud.get_active_lease_for_property(db, property_obj.id):
            raise ConflictError(ACTIVE_LEASE_CONFLICT)

    tenant_names = [entry.tenant_name.strip() for entry in tenants]
    try:
        lease = await crud.create_lease(
            db,
            property_id=property_obj.id,
            landlord_id=landlord.id,
            tenant_name=", ".join(tenant_names),
            reminder_settings=(
                data.reminder_settings.model_dump() if data.reminder_settings else None
            ),
            tenant_id=data.tenant_id,
            monthly_rent=(
                data.monthly_rent
                if data.monthly_rent is not None
                else property_obj.monthly_rent
            ),
            security_deposit=data.security_deposit,
            pet_deposit=data.pet_deposit if data.has_pets else None,
            has_pets=data.has_pets,
            lease_start_date=data.lease_start_date,
            lease_end_date=data.lease_end_date,
            status=data.status,
            utilities_included=data.utilities_included,
            snow_grass_responsibility=data.snow_grass_responsibility,
            special_terms=data.special_terms,
            signature_name=(
                data.signature_name.strip() if data.signature_name else None
            ),
        )
        await crud.add_lease_tenants(db, lease.id, tenants)

        if lease.status == LeaseStatus.ACTIVE:
            property_obj.is_available = False

        notification = await _lease_notification(
            db,
            lease,
            NotificationType.LEASE_CREATED,
            "New Lease Created",
            f"Lease agreement created for {lease.tenant_name}",
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(
            "Lease creation rejected by database",
            extra={"property_id": str(data.property_id), "error": str(e.orig)},
        )
        raise _conflict_from(e) from e

    logger.info(
        "Lease created",
        extra={
            "lease_id": str(lease.id),
            "property_id": str(property_obj.id),
            "status": lease.status.value,
            "tenant_count": len(tenants),
        },
    )
    await notification_services.publish_notification(hub, notification)
    return await crud.get_lease_by_id(db, lease.id)


async def get_lease_for_participant(
    db: AsyncSession, lease_id: uuid.UUID, user: AuthenticatedUser
) -> Lease:
    """Load a lease the caller is party to (its landlord or linked tenant).

    Raises:
        NotFoundError: If the lease does not exist
        PermissionError: If the caller is not a participant
    """
    lease = await crud.get_lease_by_id(db, lease_id)
    if not lease:
        raise NotFoundError(f"Lease with ID {lease_id} not found")
    if user.id not in (lease.landlord_id, lease.tenant_id):
        raise PermissionError("access", "lease")
    return lease


async def list_leases(
    db: AsyncSession,
    user: AuthenticatedUser,
    status: LeaseStatus | None = None,
    property_id: uuid.UUID | None = None,
) -> list[Lease]:
    if user.role == UserRole.LANDLORD:
        return await crud.get_leases(
            db, landlord_id=user.id, property_id=property_id, status=status
        )
    return await crud.get_leases(
        db, tenant_id=user.id, property_id=property_id, status=status
    )


async def _owned_lease(
    db: AsyncSession, lease_id: uuid.UUID, landlord_id: uuid.UUID
) -> Lease:
    lease = await crud.get_lease_by_id(db, lease_id)
    if not lease or lease.landlord_id != landlord_id:
        raise NotFoundError(f"Lease with ID {lease_id} not found")
    return lease


async def activate_lease(
    db: AsyncSession,
    lease_id: uuid.UUID,
    landlord_id: uuid.UUID,
    hub: RealtimeHub | None = None,
) -> Lease:
    """Move a draft lease to active and take the property off the market."""
    lease = await _owned_lease(db, lease_id, landlord_id)

    if lease.status != LeaseStatus.DRAFT:
        raise ValidationError(
            f"Cannot activate lease in '{lease.status.value}' status. "
            "Only draft leases can be activated."
        )

    if await crud.get_active_lease_for_property(db, lease.property_id):
        raise ConflictError(ACTIVE_LEASE_CONFLICT)

    try:
        await crud.set_status(db, lease, LeaseStatus.ACTIVE)
        await property_crud.set_availability(db, lease.property_id, False)
        notification = await _lease_notification(
            db,
            lease,
            NotificationType.LEASE_ACTIVATED,
            "Lease Activated",
            f"Lease for {lease.tenant_name} is now active",
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise _conflict_from(e) from e

    logger.info("Lease activated", extra={"lease_id": str(lease_id)})
    await notification_services.publish_notification(hub, notification)
    return await crud.get_lease_by_id(db, lease_id)


async def expire_lease(
    db: AsyncSession,
    lease_id: uuid.UUID,
    landlord_id: uuid.UUID,
    hub: RealtimeHub | None = None,
) -> Lease:
    """End an active lease and make the property available again."""
    lease = await _owned_lease(db, lease_id, landlord_id)

    if lease.status != LeaseStatus.ACTIVE:
        raise ValidationError(
            f"Cannot expire lease in '{lease.status.value}' status. "
            "Only active leases can be expired."
        )

    await crud.set_status(db, lease, LeaseStatus.EXPIRED)
    await property_crud.set_availability(db, lease.property_id, True)
    notification = await _lease_notification(
        db,
        lease,
        NotificationType.LEASE_EXPIRED,
        "Lease Expired",
        f"Lease for {lease.tenant_name} has ended",
    )
    await db.commit()

    logger.info("Lease expired", extra={"lease_id": str(lease_id)})
    await notification_services.publish_notification(hub, notification)
    return await crud.get_lease_by_id(db, lease_id)


async def delete_lease(
    db: AsyncSession, lease_id: uuid.UUID, landlord_id: uuid.UUID
) -> None:
    lease = await _owned_lease(db, lease_id, landlord_id)

    if lease.status not in (LeaseStatus.DRAFT, LeaseStatus.EXPIRED):
        raise ValidationError(
            f"Cannot delete lease in '{lease.status.value}' status. "
            "Only draft or expired leases can be deleted."
        )

    await crud.delete_lease(db, lease)
    await db.commit()
    logger.info("Lease deleted", extra={"lease_id": str(lease_id)})
