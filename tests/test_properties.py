"""Property repository tests."""

import pytest
from sqlalchemy import select

from rentpilot_backend.config import settings
from rentpilot_backend.core.exceptions import (
    BusinessLogicError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from rentpilot_backend.core.realtime import user_notifications_topic
from rentpilot_backend.core.storage import PHOTO_DOWNLOAD_PATH
from rentpilot_backend.modules.auth.models import UserRole
from rentpilot_backend.modules.lease_management import services as lease_services
from rentpilot_backend.modules.notifications.models import (
    Notification,
    NotificationType,
)
from rentpilot_backend.modules.property_management import services
from rentpilot_backend.modules.property_management.schemas import (
    PropertyCreate,
    PropertyUpdate,
)
from rentpilot_backend.modules.property_management.services import PhotoFile

from .conftest import create_account, lease_draft, property_payload


async def test_amenities_are_trimmed(property_obj):
    assert property_obj.amenities == ["parking", "laundry"]
    assert property_obj.is_available is True


@pytest.fixture
def photo_storage(storage):
    return storage.for_bucket(settings.property_photo_bucket, PHOTO_DOWNLOAD_PATH)


def stored_photos(photo_storage) -> list:
    bucket = photo_storage.root / photo_storage.bucket
    if not bucket.exists():
        return []
    return [p for p in bucket.rglob("*") if p.is_file()]


def jpeg(name="front.jpg", data=b"\xff\xd8\xff jpeg") -> PhotoFile:
    return PhotoFile(filename=name, data=data, content_type="image/jpeg")


async def test_new_property_notifies_landlord_of_vacancy(db, hub, landlord):
    subscription = hub.subscribe(user_notifications_topic(landlord.id))

    property_obj = await services.create_property(
        db, landlord.id, PropertyCreate(**property_payload()), hub=hub
    )

    result = await db.execute(
        select(Notification).where(Notification.user_id == landlord.id)
    )
    notification = result.scalar_one()
    assert notification.type == NotificationType.VACANCY.value
    assert notification.title == "New Property Added"
    assert notification.description == (
        "Maple Street Duplex has been added to your portfolio"
    )
    assert notification.metadata_ == {"property_id": str(property_obj.id)}

    event = await subscription.get(timeout=1)
    assert event.record["type"] == "vacancy"


class TestPropertyPhotos:
    async def test_photos_are_stored_under_landlord_and_property(
        self, db, photo_storage, landlord, property_obj
    ):
        updated = await services.upload_property_photos(
            db,
            photo_storage,
            property_obj.id,
            landlord.id,
            [jpeg(), jpeg("kitchen.PNG")],
        )

        assert len(updated.photos) == 2
        prefix = f"{landlord.id}/{property_obj.id}/"
        assert all(path.startswith(prefix) for path in updated.photos)
        assert updated.photos[1].endswith(".png")
        assert len(stored_photos(photo_storage)) == 2

    async def test_later_uploads_are_appended(
        self, db, photo_storage, landlord, property_obj
    ):
        await services.upload_property_photos(
            db, photo_storage, property_obj.id, landlord.id, [jpeg()]
        )
        updated = await services.upload_property_photos(
            db, photo_storage, property_obj.id, landlord.id, [jpeg("yard.jpg")]
        )
        assert len(updated.photos) == 2

    @pytest.mark.parametrize(
        "photo",
        [
            PhotoFile("notes.pdf", b"%PDF", "application/pdf"),
            PhotoFile("empty.jpg", b"", "image/jpeg"),
            PhotoFile("huge.jpg", b"x" * 2048, "image/jpeg"),
        ],
        ids=["not-an-image", "empty", "oversize"],
    )
    async def test_invalid_photo_stores_nothing(
        self, db, photo_storage, landlord, property_obj, photo
    ):
        with pytest.raises(ValidationError):
            await services.upload_property_photos(
                db, photo_storage, property_obj.id, landlord.id, [jpeg(), photo]
            )
        assert stored_photos(photo_storage) == []

    async def test_other_landlord_cannot_add_photos(
        self, db, session_factory, photo_storage, property_obj
    ):
        other = await create_account(
            session_factory, "other@example.com", UserRole.LANDLORD
        )
        with pytest.raises(NotFoundError):
            await services.upload_property_photos(
                db, photo_storage, property_obj.id, other.id, [jpeg()]
            )

    async def test_photo_rejected_by_storage_is_skipped(
        self, db, photo_storage, landlord, property_obj, monkeypatch
    ):
        upload = photo_storage.upload
        calls = []

        async def flaky_upload(path, data):
            calls.append(path)
            if len(calls) == 1:
                raise ExternalServiceError("storage", "upload")
            await upload(path, data)

        monkeypatch.setattr(photo_storage, "upload", flaky_upload)

        updated = await services.upload_property_photos(
            db, photo_storage, property_obj.id, landlord.id, [jpeg(), jpeg("b.jpg")]
        )

        assert updated.photos == [calls[1]]

    async def test_listing_skips_missing_objects(
        self, db, photo_storage, landlord, tenant, property_obj
    ):
        updated = await services.upload_property_photos(
            db, photo_storage, property_obj.id, landlord.id, [jpeg(), jpeg("b.jpg")]
        )
        await photo_storage.remove([updated.photos[0]])

        photos = await services.list_property_photos(
            db, photo_storage, property_obj.id, tenant.user
        )

        assert [p.path for p in photos] == [updated.photos[1]]
        assert photos[0].url.startswith(f"{PHOTO_DOWNLOAD_PATH}?token=")


async def test_other_landlords_cannot_mutate(db, session_factory, property_obj):
    other = await create_account(session_factory, "other@example.com", UserRole.LANDLORD)
    with pytest.raises(NotFoundError):
        await services.update_property(
            db, property_obj.id, other.id, PropertyUpdate(title="Mine now")
        )
    with pytest.raises(NotFoundError):
        await services.delete_property(db, property_obj.id, other.id)


async def test_leased_property_cannot_be_relisted_or_deleted(
    db, landlord, property_obj
):
    await lease_services.create_lease(db, landlord.user, lease_draft(property_obj.id))

    with pytest.raises(BusinessLogicError):
        await services.update_property(
            db, property_obj.id, landlord.id, PropertyUpdate(is_available=True)
        )
    with pytest.raises(BusinessLogicError):
        await services.delete_property(db, property_obj.id, landlord.id)


class TestPropertyApi:
    async def test_create_and_list_own(self, client, landlord):
        response = await client.post(
            "/api/properties", json=property_payload(), headers=landlord.headers
        )
        assert response.status_code == 201

        response = await client.get("/api/properties", headers=landlord.headers)
        page = response.json()["data"]
        assert page["total"] == 1
        assert page["items"][0]["title"] == "Maple Street Duplex"

    async def test_leased_property_leaves_public_listing(
        self, client, landlord, tenant, property_obj
    ):
        response = await client.get("/api/properties/available", headers=tenant.headers)
        assert response.json()["data"]["total"] == 1

        body = lease_draft(property_obj.id).model_dump(mode="json")
        await client.post("/api/leases", json=body, headers=landlord.headers)

        response = await client.get("/api/properties/available", headers=tenant.headers)
        assert response.json()["data"]["total"] == 0
        response = await client.get(
            f"/api/properties/{property_obj.id}", headers=landlord.headers
        )
        assert response.json()["data"]["is_available"] is False

    async def test_photo_upload_listing_and_download(
        self, client, landlord, tenant, property_obj
    ):
        response = await client.post(
            f"/api/properties/{property_obj.id}/photos",
            files=[
                ("photos", ("front.jpg", b"front-bytes", "image/jpeg")),
                ("photos", ("yard.jpg", b"yard-bytes", "image/jpeg")),
            ],
            headers=landlord.headers,
        )
        assert response.status_code == 201
        assert len(response.json()["data"]["photos"]) == 2

        response = await client.get(
            f"/api/properties/{property_obj.id}/photos", headers=tenant.headers
        )
        photos = response.json()["data"]
        assert len(photos) == 2

        response = await client.get(photos[0]["url"])
        assert response.status_code == 200
        assert response.content == b"front-bytes"

    async def test_tenant_cannot_upload_photos(self, client, tenant, property_obj):
        response = await client.post(
            f"/api/properties/{property_obj.id}/photos",
            files=[("photos", ("front.jpg", b"front-bytes", "image/jpeg"))],
            headers=tenant.headers,
        )
        assert response.status_code == 403

    async def test_document_token_does_not_open_photos(self, client, landlord):
        response = await client.post(
            "/api/documents",
            files={"file": ("notes.txt", b"move-in notes", "text/plain")},
            headers=landlord.headers,
        )
        document = response.json()["data"]
        response = await client.get(
            f"/api/documents/{document['id']}/url", headers=landlord.headers
        )
        token = response.json()["data"]["url"].split("token=", 1)[1]

        response = await client.get(f"/api/properties/photos/download?token={token}")
        assert response.status_code == 404
