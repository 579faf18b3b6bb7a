"""Document store tests."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from rentpilot_backend.config import Settings, settings
from rentpilot_backend.core.exceptions import (
    BusinessLogicError,
    DatabaseError,
    ExternalServiceError,
    ValidationError,
)
from rentpilot_backend.modules.documents import crud, services
from rentpilot_backend.modules.documents.models import Document, DocumentCategory


def stored_files(storage) -> list:
    bucket = storage.root / storage.bucket
    if not bucket.exists():
        return []
    return [p for p in bucket.rglob("*") if p.is_file()]


async def count_documents(db) -> int:
    result = await db.execute(select(func.count(Document.id)))
    return result.scalar_one()


def test_default_upload_ceiling_is_ten_mebibytes():
    assert Settings.model_fields["document_max_upload_bytes"].default == 10 * 1024 * 1024


async def test_upload_stores_object_and_metadata(db, storage, landlord, property_obj):
    document = await services.upload_document(
        db,
        storage,
        landlord.id,
        filename="Lease Agreement.PDF",
        data=b"%PDF-1.7 lease",
        content_type="application/pdf",
        category=DocumentCategory.LEASE,
        property_id=property_obj.id,
    )

    assert document.file_path.startswith(f"{landlord.id}/")
    assert document.file_path.endswith(".pdf")
    assert document.file_size == len(b"%PDF-1.7 lease")
    assert await storage.exists(document.file_path)


async def test_oversize_upload_creates_nothing(db, storage, landlord):
    data = b"x" * (settings.document_max_upload_bytes + 1)

    with pytest.raises(ValidationError):
        await services.upload_document(db, storage, landlord.id, "big.bin", data)

    assert await count_documents(db) == 0
    assert stored_files(storage) == []


async def test_quota_is_enforced(db, storage, landlord, monkeypatch):
    monkeypatch.setattr(settings, "storage_quota_mb", 0)
    with pytest.raises(BusinessLogicError):
        await services.upload_document(db, storage, landlord.id, "a.txt", b"data")
    assert stored_files(storage) == []


async def test_failed_metadata_write_removes_object(db, storage, landlord, monkeypatch):
    async def broken_create(*args, **kwargs):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(crud, "create_document", broken_create)

    with pytest.raises(DatabaseError):
        await services.upload_document(db, storage, landlord.id, "a.txt", b"data")

    assert stored_files(storage) == []


async def test_list_is_newest_first_and_usage_sums(db, storage, landlord):
    for name in ("first.txt", "second.txt"):
        await services.upload_document(db, storage, landlord.id, name, b"x" * 100)

    documents = await services.list_documents(db, landlord.id)
    assert [d.original_name for d in documents] == ["second.txt", "first.txt"]

    usage = await services.storage_usage(db, landlord.id)
    assert usage.file_count == 2
    assert usage.used_mb == round(200 / (1024 * 1024), 2)


async def test_delete_reports_storage_failure(db, storage, landlord, monkeypatch):
    document = await services.upload_document(
        db, storage, landlord.id, "receipt.png", b"png"
    )

    async def broken_remove(paths):
        raise ExternalServiceError("storage", "remove")

    monkeypatch.setattr(storage, "remove", broken_remove)

    removed = await services.delete_document(db, storage, document.id, landlord.id)

    assert removed is False
    assert await count_documents(db) == 0


async def test_signed_url_for_missing_object_is_none(storage):
    assert await services.get_url(storage, "nobody/missing.pdf") is None


class TestDocumentApi:
    async def test_upload_url_and_download(self, client, landlord):
        response = await client.post(
            "/api/documents",
            files={"file": ("notes.txt", b"move-in notes", "text/plain")},
            data={"category": "inspection"},
            headers=landlord.headers,
        )
        assert response.status_code == 201
        document = response.json()["data"]
        assert document["category"] == "inspection"

        response = await client.get(
            f"/api/documents/{document['id']}/url", headers=landlord.headers
        )
        url = response.json()["data"]["url"]
        assert url.startswith("/api/documents/download?token=")

        response = await client.get(url)
        assert response.status_code == 200
        assert response.content == b"move-in notes"

    async def test_oversize_upload_is_rejected(self, client, landlord, storage):
        response = await client.post(
            "/api/documents",
            files={"file": ("big.bin", b"x" * (settings.document_max_upload_bytes + 1))},
            headers=landlord.headers,
        )
        assert response.status_code == 400
        assert stored_files(storage) == []

    async def test_tampered_download_token_is_rejected(self, client):
        response = await client.get("/api/documents/download?token=not-a-token")
        assert response.status_code == 401

    async def test_url_for_vanished_object_is_not_found(
        self, client, landlord, storage
    ):
        response = await client.post(
            "/api/documents",
            files={"file": ("lease.pdf", b"%PDF-1.7", "application/pdf")},
            headers=landlord.headers,
        )
        document = response.json()["data"]
        await storage.remove([document["file_path"]])

        response = await client.get(
            f"/api/documents/{document['id']}/url", headers=landlord.headers
        )
        assert response.status_code == 404
        assert response.json()["success"] is False
