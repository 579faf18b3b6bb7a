"""Shared fixtures: a fresh SQLite database per test and an API client bound to it."""

import os
from pathlib import Path

os.environ["CONFIG"] = str(
    Path(__file__).resolve().parent.parent / "resources" / "config" / "test.yaml"
)

from datetime import date, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from rentpilot_backend.core.realtime import RealtimeHub  # noqa: E402
from rentpilot_backend.core.storage import LocalFileStorage  # noqa: E402
from rentpilot_backend.database import Base, get_db, import_all_models  # noqa: E402
from rentpilot_backend.main import app  # noqa: E402
from rentpilot_backend.modules.auth import services as auth_services  # noqa: E402
from rentpilot_backend.modules.auth.dependencies import user_from_token  # noqa: E402
from rentpilot_backend.modules.auth.models import UserRole  # noqa: E402
from rentpilot_backend.modules.auth.schemas import SignUpRequest  # noqa: E402
from rentpilot_backend.modules.lease_management.schemas import (  # noqa: E402
    LeaseCreate,
    TenantEntry,
)
from rentpilot_backend.modules.property_management import (  # noqa: E402
    services as property_services,
)
from rentpilot_backend.modules.property_management.schemas import (  # noqa: E402
    PropertyCreate,
)

PASSWORD = "correct-horse-battery"


@pytest.fixture
async def engine(tmp_path):
    import_all_models()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rentpilot.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def hub():
    return RealtimeHub()


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(tmp_path / "storage", "documents")


@pytest.fixture
async def client(session_factory, hub, storage):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.realtime_hub = hub
    app.state.storage = storage
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as api_client:
        yield api_client
    app.dependency_overrides.clear()


class Account:
    """A signed-up profile with its identity and bearer header."""

    def __init__(self, profile, tokens):
        self.profile = profile
        self.tokens = tokens
        self.user = user_from_token(tokens.access_token)
        self.headers = {"Authorization": f"Bearer {tokens.access_token}"}

    @property
    def id(self):
        return self.profile.id


async def create_account(
    session_factory, email: str, role: UserRole, first_name: str = "Pat"
) -> Account:
    async with session_factory() as session:
        profile, tokens = await auth_services.sign_up(
            session,
            SignUpRequest(
                email=email,
                password=PASSWORD,
                first_name=first_name,
                last_name="Example",
                role=role,
            ),
        )
    return Account(profile, tokens)


@pytest.fixture
async def landlord(session_factory):
    return await create_account(
        session_factory, "landlord@example.com", UserRole.LANDLORD, "Lana"
    )


@pytest.fixture
async def tenant(session_factory):
    return await create_account(
        session_factory, "tenant@example.com", UserRole.TENANT, "Theo"
    )


def property_payload(**overrides) -> dict:
    payload = {
        "title": "Maple Street Duplex",
        "address": "12 Maple Street",
        "city": "Halifax",
        "province": "NS",
        "postal_code": "B3H 1A1",
        "monthly_rent": "1850.00",
        "bedrooms": 2,
        "amenities": ["parking", " laundry "],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def property_obj(session_factory, landlord):
    async with session_factory() as session:
        return await property_services.create_property(
            session, landlord.id, PropertyCreate(**property_payload())
        )


def lease_draft(property_id, tenant_names=("Theo Example",), **overrides) -> LeaseCreate:
    start = date(2026, 11, 1)
    fields = {
        "property_id": property_id,
        "tenants": [TenantEntry(tenant_name=name) for name in tenant_names],
        "lease_start_date": start,
        "lease_end_date": start + timedelta(days=365),
        "monthly_rent": Decimal("1850.00"),
        "security_deposit": Decimal("925.00"),
    }
    fields.update(overrides)
    return LeaseCreate(**fields)


def application_form(**overrides) -> dict:
    form = {
        "first_name": "Theo",
        "last_name": "Example",
        "email": "Theo@Example.com",
        "phone": "902-555-0100",
        "date_of_birth": "1994-05-17",
        "current_address": "88 Quinpool Road",
        "current_city": "Halifax",
        "current_province": "NS",
        "current_postal_code": "B3L 1A1",
        "move_in_date": "2026-12-01",
        "employment_status": "employed",
        "current_employer": "Harbour Labs",
        "monthly_income": "5200.00",
        "emergency_contact_name": "Jo Example",
        "emergency_contact_phone": "902-555-0199",
        "emergency_contact_relation": "sibling",
        "consent": True,
    }
    form.update(overrides)
    return form
