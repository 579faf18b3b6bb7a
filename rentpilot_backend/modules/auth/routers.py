"""Authentication API routes."""

from fastapi import APIRouter, Query, Request, WebSocket, status

from ...core.exceptions import NotFoundError
from ...core.realtime import Hub, stream_topic, user_auth_topic
from ...core.storage import Storage
from ...database import DB
from ..commons import BaseResponse
from . import crud, services
from .dependencies import CurrentUser, OptionalUser, authenticate_websocket
from .role_gate import AccessDecision, SessionState, evaluate_page_access
from .schemas import (
    LoginRequest,
    ProfileResponse,
    ProfileUpdate,
    RefreshTokenRequest,
    SessionResponse,
    SignUpRequest,
    TokenResponse,
    UserUpdate,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])
access_router = APIRouter(prefix="/access", tags=["Access"])
ws_router = APIRouter(prefix="/ws", tags=["Realtime"])


def get_client_info(request: Request) -> tuple[str | None, str | None]:
    """Extract user agent and client IP from request."""
    user_agent = request.headers.get("user-agent")
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return user_agent, ip_address


@router.post(
    "/signup",
    response_model=BaseResponse[SessionResponse],
    status_code=status.HTTP_201_CREATED,
)
async def sign_up(request: Request, data: SignUpRequest, db: DB, hub: Hub):
    """Create a landlord or tenant profile and sign it in."""
    user_agent, ip_address = get_client_info(request)
    profile, tokens = await services.sign_up(
        db, data, hub=hub, user_agent=user_agent, ip_address=ip_address
    )
    return BaseResponse(
        success=True,
        message="Sign up successful",
        data=SessionResponse(
            profile=ProfileResponse.model_validate(profile), tokens=tokens
        ),
    )


@router.post("/login", response_model=BaseResponse[TokenResponse])
async def login(request: Request, login_data: LoginRequest, db: DB, hub: Hub):
    user_agent, ip_address = get_client_info(request)

    profile, tokens = await services.authenticate_user(
        db=db,
        email=login_data.email,
        password=login_data.password,
        remember_me=login_data.remember_me,
        hub=hub,
        user_agent=user_agent,
        ip_address=ip_address,
    )

    return BaseResponse(
        success=True,
        message=f"Welcome back, {profile.full_name}!",
        data=tokens,
    )


@router.post("/refresh", response_model=BaseResponse[TokenResponse])
async def refresh_token(request: Request, refresh_data: RefreshTokenRequest, db: DB):
    user_agent, ip_address = get_client_info(request)

    tokens = await services.refresh_access_token(
        db=db,
        refresh_token=refresh_data.refresh_token,
        user_agent=user_agent,
        ip_address=ip_address,
    )

    return BaseResponse(success=True, message="Token refreshed successfully", data=tokens)


@router.post("/logout", response_model=BaseResponse[None])
async def logout(current_user: CurrentUser, db: DB, hub: Hub):
    """Logout by revoking all refresh tokens."""
    count = await services.logout_user(db, current_user.id, hub=hub)

    return BaseResponse(
        success=True,
        message=f"Logged out successfully. {count} session(s) terminated.",
    )


@router.get("/me", response_model=BaseResponse[ProfileResponse])
async def get_current_user_info(current_user: CurrentUser, db: DB):
    profile = await crud.get_profile_by_id(db, current_user.id)
    if not profile:
        raise NotFoundError("User not found")

    return BaseResponse(success=True, data=ProfileResponse.model_validate(profile))


@router.put("/user", response_model=BaseResponse[ProfileResponse])
async def update_user(current_user: CurrentUser, data: UserUpdate, db: DB, hub: Hub):
    """Change the sign-in email and/or password."""
    profile = await services.update_user(
        db, current_user.id, email=data.email, password=data.password, hub=hub
    )
    return BaseResponse(
        success=True,
        message="Account updated",
        data=ProfileResponse.model_validate(profile),
    )


@router.put("/profile", response_model=BaseResponse[ProfileResponse])
async def update_profile(
    current_user: CurrentUser, data: ProfileUpdate, db: DB, hub: Hub
):
    profile = await services.update_profile(
        db,
        current_user.id,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        hub=hub,
    )
    return BaseResponse(
        success=True,
        message="Profile updated",
        data=ProfileResponse.model_validate(profile),
    )


@router.delete("/account", response_model=BaseResponse[None])
async def delete_account(current_user: CurrentUser, db: DB, storage: Storage, hub: Hub):
    """Permanently delete the caller's account and everything it owns."""
    orphaned = await services.delete_account(
        db, current_user.id, storage=storage, hub=hub
    )
    return BaseResponse(
        success=True,
        message="Account deleted",
        error={"orphaned_files": orphaned} if orphaned else None,
    )


@access_router.get("", response_model=BaseResponse[AccessDecision])
async def check_page_access(
    current_user: OptionalUser,
    db: DB,
    page: str = Query(..., min_length=1, description="Routed page path"),
):
    """Evaluate the role gate for ``page`` and the caller's session."""
    if current_user is None:
        session = SessionState.anonymous()
    else:
        profile = await crud.get_profile_by_id(db, current_user.id)
        session = SessionState.signed_in(profile.role if profile else None)

    return BaseResponse(success=True, data=evaluate_page_access(session, page))


@ws_router.websocket("/auth")
async def auth_events(websocket: WebSocket, hub: Hub, token: str | None = None):
    """Session state changes (signed in, signed out, user updated) for the caller."""
    user = await authenticate_websocket(websocket, token)
    if user is None:
        return
    await websocket.accept()
    await stream_topic(websocket, hub, user_auth_topic(user.id))
