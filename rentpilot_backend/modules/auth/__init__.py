"""Authentication module for RentPilot."""

from .dependencies import (
    CurrentUser,
    LandlordUser,
    OptionalUser,
    TenantUser,
    get_current_user,
    require_role,
)
from .models import Profile, RefreshToken, UserRole
from .routers import access_router, router, ws_router
from .schemas import AuthenticatedUser

__all__ = [
    # Models
    "Profile",
    "RefreshToken",
    "UserRole",
    # Routers
    "router",
    "access_router",
    "ws_router",
    # Dependencies
    "get_current_user",
    "require_role",
    "CurrentUser",
    "OptionalUser",
    "LandlordUser",
    "TenantUser",
    # Schemas
    "AuthenticatedUser",
]
