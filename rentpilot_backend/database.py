"""
Database configuration for the RentPilot backend.

Records are keyed by UUID and scoped to their owning profile (landlord,
tenant or sender) rather than to a SaaS tenant.
"""

import enum
import logging
import uuid
from datetime import datetime
from typing import Annotated

from fastapi import Depends
from sqlalchemy import DateTime, Enum
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.sql import func

from .config import settings
from .core.database_types import UUID as UUID_DB
from .core.utils import utc_now

logger = logging.getLogger(__name__)

# Create async engine with SSL support for MySQL
connect_args = {}
if settings.database_url.startswith("mysql+asyncmy"):
    connect_args = {
        "ssl": {
            "ssl_check_hostname": settings.database_ssl_check_hostname,
            "ssl_verify_cert": settings.database_ssl_verify_cert,
            "ssl_verify_identity": settings.database_ssl_verify_identity,
        },
    }

engine = create_async_engine(
    settings.database_url,
    echo=settings.app_debug,
    future=True,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_recycle=3600,
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

# Base class
Base = declarative_base()


class TimestampMixin:
    """Mixin to add created and updated timestamps to models.

    Values are produced client-side so they are available on the instance right
    after a flush, without a refresh round-trip on the async session.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
    )


class UUIDPrimaryKey:
    """Mixin for models identified by a UUID primary key."""

    id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), primary_key=True, default=uuid.uuid4
    )


def enum_column(enum_class: type[enum.Enum]) -> Enum:
    """Enum column type that stores the lowercase enum values."""
    return Enum(
        enum_class,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        length=32,
    )


async def get_db() -> AsyncSession:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


# Type alias for dependency injection
DB = Annotated[AsyncSession, Depends(get_db)]


def import_all_models() -> None:
    """Import every module that registers tables on ``Base.metadata``."""
    from .modules.applications import models as application_models  # noqa: F401
    from .modules.auth import models as auth_models  # noqa: F401
    from .modules.documents import models as document_models  # noqa: F401
    from .modules.lease_management import models as lease_models  # noqa: F401
    from .modules.messaging import models as messaging_models  # noqa: F401
    from .modules.notifications import models as notification_models  # noqa: F401
    from .modules.property_management import models as property_models  # noqa: F401


async def init_db():
    """Initialize database tables."""
    import_all_models()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
