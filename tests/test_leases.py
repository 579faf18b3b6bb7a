"""Lease lifecycle tests."""

import asyncio
import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from rentpilot_backend.core.exceptions import (
    BusinessLogicError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from rentpilot_backend.core.realtime import user_notifications_topic
from rentpilot_backend.modules.lease_management import crud, services
from rentpilot_backend.modules.lease_management.models import Lease, LeaseStatus
from rentpilot_backend.modules.lease_management.schemas import TenantEntry
from rentpilot_backend.modules.notifications.models import Notification
from rentpilot_backend.modules.property_management import crud as property_crud

from .conftest import lease_draft, property_payload


async def count_leases(db, property_id) -> int:
    result = await db.execute(
        select(func.count(Lease.id)).where(Lease.property_id == property_id)
    )
    return result.scalar_one()


class TestValidateLeaseDraft:
    def test_valid_draft_returns_named_tenants(self):
        draft = lease_draft(uuid.uuid4(), tenant_names=("Theo", " ", "Ana"))
        tenants = services.validate_lease_draft(draft)
        assert [t.tenant_name for t in tenants] == ["Theo", "Ana"]

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"property_id": None}, "property_id"),
            ({"tenants": [TenantEntry(tenant_name="  ")]}, "tenants"),
            ({"tenants": []}, "tenants"),
            ({"lease_start_date": None}, "dates"),
            ({"lease_end_date": date(2026, 10, 1)}, "lease_end_date"),
            ({"lease_end_date": date(2026, 11, 1)}, "lease_end_date"),
            ({"require_signature": True, "signature_name": " "}, "signature_name"),
            ({"status": LeaseStatus.EXPIRED}, "status"),
        ],
    )
    def test_incomplete_draft_is_rejected(self, overrides, field):
        fields = {"property_id": uuid.uuid4(), **overrides}
        draft = lease_draft(**fields)
        with pytest.raises(ValidationError) as exc_info:
            services.validate_lease_draft(draft)
        assert exc_info.value.field == field

    def test_signature_variant_accepts_signed_draft(self):
        draft = lease_draft(
            uuid.uuid4(), require_signature=True, signature_name="Lana Example"
        )
        assert len(services.validate_lease_draft(draft)) == 1


async def test_landlord_without_property_is_blocked(db, landlord):
    with pytest.raises(BusinessLogicError):
        await services.create_lease(db, landlord.user, lease_draft(uuid.uuid4()))

    result = await db.execute(select(func.count(Lease.id)))
    assert result.scalar_one() == 0


async def test_unknown_property_is_not_found(db, landlord, property_obj):
    with pytest.raises(NotFoundError):
        await services.create_lease(db, landlord.user, lease_draft(uuid.uuid4()))


async def test_invalid_draft_makes_no_query(db, landlord, monkeypatch):
    async def fail(*args, **kwargs):
        raise AssertionError("database should not be queried")

    monkeypatch.setattr(property_crud, "get_property_by_id", fail)
    with pytest.raises(ValidationError):
        await services.create_lease(
            db, landlord.user, lease_draft(uuid.uuid4(), tenant_names=("",))
        )


async def test_create_lease_inserts_one_tenant_per_named_person(
    db, landlord, property_obj
):
    draft = lease_draft(
        property_obj.id, tenant_names=("Theo Example", "  ", "Ana Example", "")
    )
    lease = await services.create_lease(db, landlord.user, draft)

    assert lease.tenant_name == "Theo Example, Ana Example"
    assert await crud.count_lease_tenants(db, lease.id) == 2
    assert [t.tenant_name for t in lease.tenants] == ["Theo Example", "Ana Example"]
    assert [t.is_primary for t in lease.tenants] == [True, False]


async def test_active_lease_takes_property_off_market(db, landlord, property_obj):
    lease = await services.create_lease(db, landlord.user, lease_draft(property_obj.id))

    assert lease.status == LeaseStatus.ACTIVE
    refreshed = await property_crud.get_property_by_id(db, property_obj.id)
    await db.refresh(refreshed)
    assert refreshed.is_available is False


async def test_lease_rent_defaults_to_property_rent(db, landlord, property_obj):
    lease = await services.create_lease(
        db, landlord.user, lease_draft(property_obj.id, monthly_rent=None)
    )
    assert lease.monthly_rent == Decimal("1850.00")


async def test_draft_lease_leaves_property_available(db, landlord, property_obj):
    await services.create_lease(
        db, landlord.user, lease_draft(property_obj.id, status=LeaseStatus.DRAFT)
    )
    refreshed = await property_crud.get_property_by_id(db, property_obj.id)
    await db.refresh(refreshed)
    assert refreshed.is_available is True


async def test_lease_creation_notifies_landlord(db, hub, landlord, property_obj):
    subscription = hub.subscribe(user_notifications_topic(landlord.id))

    lease = await services.create_lease(
        db, landlord.user, lease_draft(property_obj.id), hub=hub
    )

    result = await db.execute(
        select(Notification).where(
            Notification.user_id == landlord.id, Notification.type == "lease_created"
        )
    )
    notifications = list(result.scalars().all())
    assert len(notifications) == 1
    assert notifications[0].type == "lease_created"
    assert notifications[0].metadata_["lease_id"] == str(lease.id)

    event = await subscription.get(timeout=1)
    assert event.table == "notifications"
    assert event.record["title"] == "New Lease Created"


async def test_second_active_lease_is_a_conflict(db, landlord, property_obj):
    await services.create_lease(db, landlord.user, lease_draft(property_obj.id))

    with pytest.raises(ConflictError) as exc_info:
        await services.create_lease(db, landlord.user, lease_draft(property_obj.id))

    assert exc_info.value.message == services.ACTIVE_LEASE_CONFLICT
    assert await count_leases(db, property_obj.id) == 1


async def test_concurrent_creations_leave_one_active_lease(
    session_factory, landlord, property_obj
):
    async def create(tenant_name):
        async with session_factory() as session:
            await services.create_lease(
                session,
                landlord.user,
                lease_draft(property_obj.id, tenant_names=(tenant_name,)),
            )

    results = await asyncio.gather(
        create("Theo"), create("Ana"), return_exceptions=True
    )

    assert results.count(None) == 1
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(conflicts) == 1
    assert conflicts[0].message == services.ACTIVE_LEASE_CONFLICT
    async with session_factory() as session:
        active = await crud.get_leases(
            session, landlord_id=landlord.id, status=LeaseStatus.ACTIVE
        )
    assert len(active) == 1


async def test_constraint_rejects_two_active_leases(db, landlord, property_obj):
    def active_lease():
        return Lease(
            property_id=property_obj.id,
            landlord_id=landlord.id,
            tenant_name="Theo Example",
            monthly_rent=Decimal("1850.00"),
            lease_start_date=date(2026, 11, 1),
            lease_end_date=date(2027, 11, 1),
            status=LeaseStatus.ACTIVE,
        )

    db.add(active_lease())
    await db.commit()

    db.add(active_lease())
    with pytest.raises(IntegrityError):
        await db.commit()
    await db.rollback()

    assert await count_leases(db, property_obj.id) == 1


async def test_race_past_the_precheck_is_still_a_conflict(
    db, landlord, property_obj, monkeypatch
):
    await services.create_lease(db, landlord.user, lease_draft(property_obj.id))

    async def no_active_lease(*args, **kwargs):
        return None

    # Both requests passed the read-side check before either committed
    monkeypatch.setattr(crud, "get_active_lease_for_property", no_active_lease)

    with pytest.raises(ConflictError) as exc_info:
        await services.create_lease(
            db, landlord.user, lease_draft(property_obj.id, tenant_names=("Ana",))
        )

    assert exc_info.value.message == services.ACTIVE_LEASE_CONFLICT
    assert await count_leases(db, property_obj.id) == 1


async def test_draft_leases_do_not_collide(db, landlord, property_obj):
    for _ in range(2):
        await services.create_lease(
            db, landlord.user, lease_draft(property_obj.id, status=LeaseStatus.DRAFT)
        )
    await services.create_lease(db, landlord.user, lease_draft(property_obj.id))

    assert await count_leases(db, property_obj.id) == 3


async def test_activate_and_expire_round_trip(db, landlord, property_obj):
    lease = await services.create_lease(
        db, landlord.user, lease_draft(property_obj.id, status=LeaseStatus.DRAFT)
    )

    activated = await services.activate_lease(db, lease.id, landlord.id)
    assert activated.status == LeaseStatus.ACTIVE
    assert activated.active_property_id == property_obj.id

    expired = await services.expire_lease(db, lease.id, landlord.id)
    assert expired.status == LeaseStatus.EXPIRED
    assert expired.active_property_id is None

    refreshed = await property_crud.get_property_by_id(db, property_obj.id)
    await db.refresh(refreshed)
    assert refreshed.is_available is True


async def test_activate_blocked_by_existing_active_lease(db, landlord, property_obj):
    draft = await services.create_lease(
        db, landlord.user, lease_draft(property_obj.id, status=LeaseStatus.DRAFT)
    )
    await services.create_lease(db, landlord.user, lease_draft(property_obj.id))

    with pytest.raises(ConflictError):
        await services.activate_lease(db, draft.id, landlord.id)


async def test_active_lease_cannot_be_deleted(db, landlord, property_obj):
    lease = await services.create_lease(db, landlord.user, lease_draft(property_obj.id))
    with pytest.raises(ValidationError):
        await services.delete_lease(db, lease.id, landlord.id)


async def test_linked_tenant_must_be_a_tenant(db, landlord, property_obj):
    with pytest.raises(ValidationError):
        await services.create_lease(
            db, landlord.user, lease_draft(property_obj.id, tenant_id=landlord.id)
        )


class TestLeaseApi:
    async def test_create_lease_returns_id(self, client, landlord, property_obj):
        body = lease_draft(property_obj.id).model_dump(mode="json")
        response = await client.post("/api/leases", json=body, headers=landlord.headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["lease_id"] == data["lease"]["id"]
        assert len(data["lease"]["tenants"]) == 1

    async def test_conflict_maps_to_409(self, client, landlord, property_obj):
        body = lease_draft(property_obj.id).model_dump(mode="json")
        await client.post("/api/leases", json=body, headers=landlord.headers)
        response = await client.post("/api/leases", json=body, headers=landlord.headers)

        assert response.status_code == 409
        assert response.json()["success"] is False

    async def test_tenant_cannot_create_leases(self, client, tenant, property_obj):
        body = lease_draft(property_obj.id).model_dump(mode="json")
        response = await client.post("/api/leases", json=body, headers=tenant.headers)
        assert response.status_code == 403

    async def test_linked_tenant_sees_lease(self, client, landlord, tenant):
        created = await client.post(
            "/api/properties", json=property_payload(), headers=landlord.headers
        )
        property_id = created.json()["data"]["id"]
        body = lease_draft(property_id, tenant_id=tenant.id).model_dump(mode="json")
        await client.post("/api/leases", json=body, headers=landlord.headers)

        response = await client.get("/api/leases", headers=tenant.headers)

        assert response.status_code == 200
        leases = response.json()["data"]
        assert len(leases) == 1
        assert leases[0]["tenant_id"] == str(tenant.id)
