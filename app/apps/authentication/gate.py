"""
Role-based authorization gate for the admin routes
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union
from urllib.parse import quote, urlsplit

from app.common.errors import ConfigurationError
from app.config import LOGIN_PATH
from app.apps.authentication.models import Role
from app.apps.authentication.session import SessionState

ACCESS_DENIED_MESSAGE = "You don't have permission to access this page."

# Longest prefix wins; anything not listed here is public
ROUTE_TIERS: List[Tuple[str, Role]] = [
    ("/admin/users", Role.ADMIN),
    ("/admin/settings", Role.ADMIN),
    ("/admin/pages", Role.EDITOR),
    ("/admin/menus", Role.EDITOR),
    ("/admin/banners", Role.EDITOR),
    ("/admin/collections", Role.EDITOR),
    ("/admin/posts", Role.AUTHOR),
    ("/admin", Role.AUTHOR),
]


class GateState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    UNAUTHENTICATED = "unauthenticated"
    PROVISIONING = "provisioning"
    DENIED = "denied"
    AUTHORIZED = "authorized"


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    required_tier: Optional[Role] = None
    redirect_to: Optional[str] = None
    message: Optional[str] = None
    remediation: List[str] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return self.state is GateState.AUTHORIZED


def _role(value: Union[Role, str]) -> Role:
    try:
        return Role(value)
    except ValueError:
        return Role.SUBSCRIBER


def has_access(role: Union[Role, str], required: Union[Role, str]) -> bool:
    """True when ``role`` is at or above ``required`` (admin > editor > author > subscriber)."""
    return _role(role).rank <= _role(required).rank


def required_tier_for(path: str) -> Optional[Role]:
    """Minimum role for a page route, or None for public routes."""
    path = "/" + urlsplit(path).path.strip("/")
    for prefix, tier in sorted(ROUTE_TIERS, key=lambda item: len(item[0]), reverse=True):
        if path == prefix or path.startswith(prefix + "/"):
            return tier
    return None


class AuthorizationGate:
    """
    Decide what a route renders for the current session.

    Denied users get an inline "Access Denied" message rather than a
    redirect.
    """

    def __init__(self, login_path: str = LOGIN_PATH):
        self.login_path = login_path

    def login_redirect(self, location: str) -> str:
        return f"{self.login_path}?next={quote(location, safe='/')}"

    def evaluate(self, state: SessionState, required: Optional[Role], location: str = "/") -> GateDecision:
        if required is None:
            return GateDecision(GateState.AUTHORIZED)
        if state.loading:
            return GateDecision(GateState.LOADING, required, message="Loading...")
        if isinstance(state.error, ConfigurationError):
            return GateDecision(
                GateState.ERROR,
                required,
                message=state.error.message,
                remediation=list(state.error.remediation),
            )
        if state.session is None:
            return GateDecision(GateState.UNAUTHENTICATED, required, redirect_to=self.login_redirect(location))
        if state.profile is None:
            return GateDecision(GateState.PROVISIONING, required, message="Setting up your profile...")
        if not has_access(state.profile.role, required):
            return GateDecision(GateState.DENIED, required, message=ACCESS_DENIED_MESSAGE)
        return GateDecision(GateState.AUTHORIZED, required)
