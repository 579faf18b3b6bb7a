"""Rental application intake tests."""

import pytest
from sqlalchemy import func, select

from rentpilot_backend.core.exceptions import ValidationError
from rentpilot_backend.modules.applications import services
from rentpilot_backend.modules.applications.models import (
    Application,
    ApplicationStatus,
)
from rentpilot_backend.modules.applications.schemas import ApplicationCreate
from rentpilot_backend.modules.notifications.models import (
    Notification,
    NotificationType,
)

from .conftest import application_form


async def count_applications(db) -> int:
    result = await db.execute(select(func.count(Application.id)))
    return result.scalar_one()


async def test_missing_consent_writes_nothing(db, tenant, property_obj):
    form = ApplicationCreate(**application_form(property_id=property_obj.id, consent=False))

    with pytest.raises(ValidationError) as exc_info:
        await services.submit_application(db, tenant.user, form)

    assert exc_info.value.field == "consent"
    assert await count_applications(db) == 0


async def test_submission_is_pending_and_notifies_landlord(
    db, tenant, landlord, property_obj
):
    form = ApplicationCreate(**application_form(property_id=property_obj.id))

    application = await services.submit_application(db, tenant.user, form)

    assert application.status == ApplicationStatus.PENDING
    assert application.email == "theo@example.com"
    result = await db.execute(
        select(Notification).where(
            Notification.user_id == landlord.id,
            Notification.type != NotificationType.VACANCY.value,
        )
    )
    assert [n.type for n in result.scalars()] == ["application_submitted"]


async def test_resubmission_creates_another_row(db, tenant):
    form = ApplicationCreate(**application_form())
    await services.submit_application(db, tenant.user, form)
    await services.submit_application(db, tenant.user, form)

    assert await count_applications(db) == 2
    assert len(await services.list_for_tenant(db, tenant.id)) == 2


async def test_landlord_sees_applications_for_own_properties(
    db, tenant, landlord, property_obj
):
    await services.submit_application(
        db, tenant.user, ApplicationCreate(**application_form(property_id=property_obj.id))
    )
    await services.submit_application(db, tenant.user, ApplicationCreate(**application_form()))

    received = await services.list_for_landlord(db, landlord.id)
    assert [a.property_id for a in received] == [property_obj.id]


class TestApplicationApi:
    async def test_submit(self, client, tenant, property_obj):
        response = await client.post(
            "/api/applications",
            json=application_form(property_id=str(property_obj.id)),
            headers=tenant.headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["status"] == "pending"

    async def test_submit_without_consent_is_400(self, client, tenant):
        response = await client.post(
            "/api/applications",
            json=application_form(consent=False),
            headers=tenant.headers,
        )
        assert response.status_code == 400

    async def test_landlords_cannot_apply(self, client, landlord):
        response = await client.post(
            "/api/applications", json=application_form(), headers=landlord.headers
        )
        assert response.status_code == 403
