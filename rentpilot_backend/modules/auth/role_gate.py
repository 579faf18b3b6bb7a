"""Page access decisions for routed pages.

The gate is a pure function of the caller's session state and the page's
required role. It is evaluated on every request and never cached.
"""

import enum

from pydantic import BaseModel

from ...core.exceptions import NotFoundError
from .models import UserRole

SIGN_IN_PATH = "/auth"
DEFAULT_DASHBOARD_PATH = "/dashboard"

# Routed pages and the role each requires; None means any signed-in profile
PAGE_ROLES: dict[str, UserRole | None] = {
    "/dashboard": None,
    "/dashboard/landlord": UserRole.LANDLORD,
    "/landlord/settings": UserRole.LANDLORD,
    "/lease-form": UserRole.LANDLORD,
    "/dashboard/tenant": UserRole.TENANT,
    "/application-form": UserRole.TENANT,
}


class SessionStatus(str, enum.Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class SessionState(BaseModel):
    """What is known about the caller. ``role`` is None until a profile is loaded."""

    status: SessionStatus
    role: UserRole | None = None

    @classmethod
    def loading(cls) -> "SessionState":
        return cls(status=SessionStatus.LOADING)

    @classmethod
    def anonymous(cls) -> "SessionState":
        return cls(status=SessionStatus.UNAUTHENTICATED)

    @classmethod
    def signed_in(cls, role: UserRole | None) -> "SessionState":
        return cls(status=SessionStatus.AUTHENTICATED, role=role)


class AccessOutcome(str, enum.Enum):
    RENDER = "render"
    REDIRECT = "redirect"
    LOADING = "loading"


class AccessDecision(BaseModel):
    outcome: AccessOutcome
    redirect_to: str | None = None

    @property
    def renders(self) -> bool:
        return self.outcome == AccessOutcome.RENDER


def evaluate_access(
    session: SessionState, required_role: UserRole | None = None
) -> AccessDecision:
    """Decide whether a page renders for this session.

    - auth state still resolving -> loading, never a guess
    - no session -> redirect to sign-in
    - role required and the profile is missing or has another role -> redirect
      to the default dashboard
    - otherwise render
    """
    if session.status == SessionStatus.LOADING:
        return AccessDecision(outcome=AccessOutcome.LOADING)

    if session.status == SessionStatus.UNAUTHENTICATED:
        return AccessDecision(outcome=AccessOutcome.REDIRECT, redirect_to=SIGN_IN_PATH)

    if required_role is not None and session.role != required_role:
        return AccessDecision(
            outcome=AccessOutcome.REDIRECT, redirect_to=DEFAULT_DASHBOARD_PATH
        )

    return AccessDecision(outcome=AccessOutcome.RENDER)


def evaluate_page_access(session: SessionState, page: str) -> AccessDecision:
    """Evaluate the gate for a registered page path.

    Raises:
        NotFoundError: If the page is not a gated route
    """
    normalized = "/" + page.strip().strip("/")
    if normalized not in PAGE_ROLES:
        raise NotFoundError(f"Unknown page '{page}'")
    return evaluate_access(session, PAGE_ROLES[normalized])
