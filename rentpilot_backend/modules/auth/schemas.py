"""Authentication schemas for RentPilot."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from ...core.utils import display_name
from .models import UserRole

# ----- Profile Schemas -----


class ProfileResponse(BaseModel):
    id: UUID
    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    role: UserRole
    last_login: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Editable contact fields. Role is deliberately absent."""

    first_name: str | None = Field(None, max_length=120)
    last_name: str | None = Field(None, max_length=120)
    phone: str | None = Field(None, max_length=40)


class UserUpdate(BaseModel):
    """Credential changes for the signed-in user."""

    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8, max_length=128)


# ----- Auth Schemas -----


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    role: UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    remember_me: bool = False


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class SessionResponse(BaseModel):
    """Profile plus the tokens of a freshly opened session."""

    profile: ProfileResponse
    tokens: TokenResponse


class AuthenticatedUser(BaseModel):
    """Caller identity resolved from the bearer token for one request."""

    id: UUID
    email: str
    role: UserRole
    first_name: str | None = None
    last_name: str | None = None

    @property
    def full_name(self) -> str:
        return display_name(self.first_name, self.last_name, self.email)

    @property
    def is_landlord(self) -> bool:
        return self.role == UserRole.LANDLORD

    class Config:
        from_attributes = True
