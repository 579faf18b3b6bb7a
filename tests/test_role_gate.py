"""Role gate tests."""

import pytest

from rentpilot_backend.core.exceptions import NotFoundError
from rentpilot_backend.modules.auth.models import UserRole
from rentpilot_backend.modules.auth.role_gate import (
    DEFAULT_DASHBOARD_PATH,
    SIGN_IN_PATH,
    AccessOutcome,
    SessionState,
    evaluate_access,
    evaluate_page_access,
)


def test_anonymous_visitor_is_sent_to_sign_in():
    decision = evaluate_access(SessionState.anonymous(), UserRole.LANDLORD)
    assert decision.outcome == AccessOutcome.REDIRECT
    assert decision.redirect_to == SIGN_IN_PATH


def test_wrong_role_is_sent_to_dashboard():
    decision = evaluate_access(SessionState.signed_in(UserRole.TENANT), UserRole.LANDLORD)
    assert decision.outcome == AccessOutcome.REDIRECT
    assert decision.redirect_to == DEFAULT_DASHBOARD_PATH


def test_matching_role_renders():
    decision = evaluate_access(
        SessionState.signed_in(UserRole.LANDLORD), UserRole.LANDLORD
    )
    assert decision.renders


def test_missing_profile_cannot_pass_a_role_gate():
    decision = evaluate_access(SessionState.signed_in(None), UserRole.TENANT)
    assert decision.redirect_to == DEFAULT_DASHBOARD_PATH


def test_unresolved_session_is_loading_not_a_redirect():
    decision = evaluate_access(SessionState.loading(), UserRole.TENANT)
    assert decision.outcome == AccessOutcome.LOADING
    assert decision.redirect_to is None


def test_unrestricted_page_renders_for_any_role():
    for role in UserRole:
        assert evaluate_page_access(SessionState.signed_in(role), "/dashboard").renders


@pytest.mark.parametrize(
    "page, role, renders",
    [
        ("/dashboard/landlord", UserRole.LANDLORD, True),
        ("dashboard/landlord/", UserRole.TENANT, False),
        ("/lease-form", UserRole.LANDLORD, True),
        ("/application-form", UserRole.LANDLORD, False),
        ("/application-form", UserRole.TENANT, True),
        ("/landlord/settings", UserRole.TENANT, False),
    ],
)
def test_page_registry(page, role, renders):
    assert evaluate_page_access(SessionState.signed_in(role), page).renders is renders


def test_unknown_page_is_not_found():
    with pytest.raises(NotFoundError):
        evaluate_page_access(SessionState.anonymous(), "/admin")


class TestAccessApi:
    async def test_anonymous(self, client):
        response = await client.get("/api/access", params={"page": "/lease-form"})
        assert response.json()["data"] == {"outcome": "redirect", "redirect_to": "/auth"}

    async def test_tenant_on_landlord_page(self, client, tenant):
        response = await client.get(
            "/api/access", params={"page": "/lease-form"}, headers=tenant.headers
        )
        assert response.json()["data"]["redirect_to"] == "/dashboard"

    async def test_landlord_on_landlord_page(self, client, landlord):
        response = await client.get(
            "/api/access", params={"page": "/dashboard/landlord"}, headers=landlord.headers
        )
        assert response.json()["data"]["outcome"] == "render"

    async def test_landlord_routes_reject_tenants(self, client, tenant):
        response = await client.get("/api/properties", headers=tenant.headers)
        assert response.status_code == 403
