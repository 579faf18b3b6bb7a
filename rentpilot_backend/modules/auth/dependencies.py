"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, HTTPException, WebSocket, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...core.logging import set_user_id
from .jwt_service import decode_access_token
from .models import UserRole
from .schemas import AuthenticatedUser

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def user_from_token(token: str) -> AuthenticatedUser | None:
    """Resolve an access token into the caller's identity.

    No database call is made; everything needed is in the token.
    Returns None for invalid, expired or malformed tokens.
    """
    payload = decode_access_token(token)
    if payload is None:
        return None
    try:
        user = AuthenticatedUser(
            id=payload["sub"],
            email=payload["email"],
            role=payload["role"],
            first_name=payload.get("first_name"),
            last_name=payload.get("last_name"),
        )
    except (KeyError, ValueError):
        return None
    set_user_id(str(user.id))
    return user


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> AuthenticatedUser:
    user = user_from_token(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(optional_security)
    ],
) -> AuthenticatedUser | None:
    """Like get_current_user, but anonymous callers get None instead of a 401."""
    if credentials is None:
        return None
    return user_from_token(credentials.credentials)


def require_role(*allowed_roles: str | UserRole):
    """Dependency factory for role-based access control.

    Usage:
        @router.post("/leases")
        async def create_lease(
            current_user: AuthenticatedUser = Depends(require_role(UserRole.LANDLORD))
        ):
            ...
    """
    role_values = {r.value if isinstance(r, UserRole) else r for r in allowed_roles}

    async def role_checker(
        current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    ) -> AuthenticatedUser:
        if current_user.role.value not in role_values:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {', '.join(sorted(role_values))}",
            )
        return current_user

    return role_checker


# Type aliases for dependency injection
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
OptionalUser = Annotated[AuthenticatedUser | None, Depends(get_optional_user)]
LandlordUser = Annotated[AuthenticatedUser, Depends(require_role(UserRole.LANDLORD))]
TenantUser = Annotated[AuthenticatedUser, Depends(require_role(UserRole.TENANT))]


WS_UNAUTHORIZED = 4401
WS_FORBIDDEN = 4403


async def authenticate_websocket(
    websocket: WebSocket, token: str | None
) -> AuthenticatedUser | None:
    """Resolve the ``?token=`` of a websocket; closes the socket with 4401 if invalid."""
    user = user_from_token(token) if token else None
    if user is None:
        await websocket.close(code=WS_UNAUTHORIZED)
    return user
