"""Session and profile store tests."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from rentpilot_backend.core.exceptions import AuthenticationError, ConflictError
from rentpilot_backend.core.realtime import EventType, user_auth_topic
from rentpilot_backend.modules.auth import crud, services
from rentpilot_backend.modules.auth.dependencies import user_from_token
from rentpilot_backend.modules.auth.jwt_service import create_access_token
from rentpilot_backend.modules.auth.models import Profile, UserRole
from rentpilot_backend.modules.documents import services as document_services
from rentpilot_backend.modules.lease_management import services as lease_services
from rentpilot_backend.modules.lease_management.models import Lease
from rentpilot_backend.modules.property_management.models import Property

from .conftest import PASSWORD, create_account, lease_draft


async def test_duplicate_email_is_a_conflict(session_factory, landlord):
    with pytest.raises(ConflictError):
        await create_account(session_factory, "LANDLORD@example.com", UserRole.TENANT)


async def test_token_carries_identity_and_role(landlord):
    assert landlord.user.id == landlord.id
    assert landlord.user.role == UserRole.LANDLORD
    assert landlord.user.full_name == "Lana Example"


async def test_tampered_or_refresh_tokens_are_not_sessions(landlord):
    assert user_from_token(landlord.tokens.refresh_token) is None
    assert user_from_token(landlord.tokens.access_token + "x") is None


async def test_sign_in_publishes_session_event(db, hub, tenant):
    subscription = hub.subscribe(user_auth_topic(tenant.id))

    await services.authenticate_user(db, "tenant@example.com", PASSWORD, hub=hub)

    event = await subscription.get(timeout=1)
    assert event.type == EventType.SIGNED_IN
    assert event.record["role"] == "tenant"


async def test_repeated_failures_lock_the_profile(db, tenant):
    for _ in range(2):
        with pytest.raises(AuthenticationError, match="attempts remaining"):
            await services.authenticate_user(db, "tenant@example.com", "wrong-password")

    with pytest.raises(AuthenticationError, match="Account locked"):
        await services.authenticate_user(db, "tenant@example.com", "wrong-password")

    with pytest.raises(AuthenticationError, match="Account is locked"):
        await services.authenticate_user(db, "tenant@example.com", PASSWORD)


async def test_refresh_rotates_the_token(db, tenant):
    tokens = await services.refresh_access_token(db, tenant.tokens.refresh_token)
    assert tokens.refresh_token != tenant.tokens.refresh_token

    with pytest.raises(AuthenticationError, match="revoked"):
        await services.refresh_access_token(db, tenant.tokens.refresh_token)


async def test_sign_out_revokes_every_session(db, tenant):
    await services.authenticate_user(db, "tenant@example.com", PASSWORD)

    assert await services.logout_user(db, tenant.id) == 2
    with pytest.raises(AuthenticationError):
        await services.refresh_access_token(db, tenant.tokens.refresh_token)


async def test_password_change_revokes_tokens(db, tenant):
    await services.update_user(db, tenant.id, password="another-password")

    with pytest.raises(AuthenticationError):
        await services.refresh_access_token(db, tenant.tokens.refresh_token)
    _, tokens = await services.authenticate_user(
        db, "tenant@example.com", "another-password"
    )
    assert tokens.access_token


async def test_delete_account_removes_owned_records(
    db, storage, landlord, property_obj
):
    await lease_services.create_lease(db, landlord.user, lease_draft(property_obj.id))
    document = await document_services.upload_document(
        db, storage, landlord.id, "lease.pdf", b"%PDF"
    )

    orphaned = await services.delete_account(db, landlord.id, storage=storage)

    assert orphaned == []
    for model in (Profile, Property, Lease):
        result = await db.execute(select(func.count()).select_from(model))
        assert result.scalar_one() == 0
    assert not await storage.exists(document.file_path)
    assert await crud.get_profile_by_id(db, landlord.id) is None


class TestAuthApi:
    async def test_signup_returns_profile_and_tokens(self, client):
        response = await client.post(
            "/api/auth/signup",
            json={
                "email": "new@example.com",
                "password": PASSWORD,
                "first_name": "Nia",
                "last_name": "Example",
                "role": "landlord",
            },
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["profile"]["role"] == "landlord"
        assert data["tokens"]["token_type"] == "bearer"

    async def test_me_requires_a_token(self, client):
        response = await client.get("/api/auth/me")
        assert response.status_code in (401, 403)

    async def test_expired_token_is_401(self, client, tenant):
        token = create_access_token(
            str(tenant.id), "tenant@example.com", "tenant", expires_delta=timedelta(-1)
        )
        response = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    async def test_role_is_not_editable(self, client, tenant):
        response = await client.put(
            "/api/auth/profile",
            json={"first_name": "Theodore", "role": "landlord"},
            headers=tenant.headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["first_name"] == "Theodore"
        assert data["role"] == "tenant"
