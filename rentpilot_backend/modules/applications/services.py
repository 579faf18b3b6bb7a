"""Rental application business logic."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import NotFoundError, ValidationError
from ...core.realtime import RealtimeHub
from ..auth.schemas import AuthenticatedUser
from ..notifications import services as notification_services
from ..notifications.models import NotificationType
from ..property_management import crud as property_crud
from . import crud
from .models import Application
from .schemas import ApplicationCreate

logger = logging.getLogger(__name__)


async def submit_application(
    db: AsyncSession,
    tenant: AuthenticatedUser,
    data: ApplicationCreate,
    hub: RealtimeHub | None = None,
) -> Application:
    """Record one pending application.

    Every submission creates a new row; resubmitting the same form is not
    deduplicated. The landlord of the target property, if any, is notified.

    Raises:
        ValidationError: If consent was not given (nothing is written)
        NotFoundError: If ``property_id`` does not exist
    """
    if not data.consent:
        raise ValidationError(
            "You must agree to the background check to submit", field="consent"
        )

    property_obj = None
    if data.property_id is not None:
        property_obj = await property_crud.get_property_by_id(db, data.property_id)
        if not property_obj:
            raise NotFoundError(f"Property with ID {data.property_id} not found")

    fields = data.model_dump(exclude={"consent"})
    fields["email"] = fields["email"].lower()
    application = await crud.create_application(db, tenant.id, **fields)

    notification = None
    if property_obj is not None:
        notification = await notification_services.add_notification(
            db,
            user_id=property_obj.landlord_id,
            notification_type=NotificationType.APPLICATION_SUBMITTED.value,
            title="New Rental Application",
            description=(
                f"{application.first_name} {application.last_name} applied for "
                f"{property_obj.title}"
            ),
            metadata={
                "application_id": str(application.id),
                "property_id": str(property_obj.id),
            },
            action_url="/dashboard/landlord?tab=applications",
        )

    await db.commit()
    logger.info(
        "Application submitted",
        extra={
            "application_id": str(application.id),
            "property_id": str(data.property_id) if data.property_id else None,
        },
    )
    if notification is not None:
        await notification_services.publish_notification(hub, notification)
    return application


async def list_for_tenant(db: AsyncSession, tenant_id: uuid.UUID) -> list[Application]:
    return await crud.get_applications_for_tenant(db, tenant_id)


async def list_for_landlord(
    db: AsyncSession, landlord_id: uuid.UUID, property_id: uuid.UUID | None = None
) -> list[Application]:
    return await crud.get_applications_for_landlord(db, landlord_id, property_id)
