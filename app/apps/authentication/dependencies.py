"""
Authentication dependencies for FastAPI
"""
from dataclasses import dataclass
from typing import AsyncGenerator, Callable, Optional
from fastapi import Depends, HTTPException, Request, status, Header, Cookie
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging

from app.dependencies import get_repository
from app.apps.cms.repository import ContentRepository
from app.apps.authentication.gate import AuthorizationGate, GateDecision, GateState
from app.apps.authentication.models import Profile, Role
from app.apps.authentication.notifications import Notifier
from app.apps.authentication.profiles import ProfileResolver
from app.apps.authentication.session import SessionStore
from app.apps.authentication.utils import AuthBackend, Identity, SupabaseAuthBackend

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI
security = HTTPBearer(auto_error=False)

gate = AuthorizationGate()

GATE_STATUS = {
    GateState.LOADING: status.HTTP_503_SERVICE_UNAVAILABLE,
    GateState.ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    GateState.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    GateState.PROVISIONING: status.HTTP_503_SERVICE_UNAVAILABLE,
    GateState.DENIED: status.HTTP_403_FORBIDDEN,
}


@dataclass(frozen=True)
class AuthContext:
    """The caller of a gated endpoint"""
    identity: Identity
    profile: Profile

    @property
    def role(self) -> Role:
        return Role(self.profile.role)


def get_auth_provider() -> Callable[[], AuthBackend]:
    """Factory for the auth backend; the Supabase client is only built when first needed"""
    return SupabaseAuthBackend


def get_profile_resolver(repository: ContentRepository = Depends(get_repository)) -> ProfileResolver:
    return ProfileResolver(repository.backend)


async def get_session_store(
    auth_provider: Callable[[], AuthBackend] = Depends(get_auth_provider),
    resolver: ProfileResolver = Depends(get_profile_resolver),
) -> AsyncGenerator[SessionStore, None]:
    """A session store scoped to one request, closed when the request ends"""
    store = SessionStore(auth_provider, resolver, Notifier())
    try:
        yield store
    finally:
        store.close()


def extract_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    authorization: Optional[str],
    access_token: Optional[str],
) -> Optional[str]:
    """JWT from the bearer scheme, a raw Authorization header or the access_token cookie"""
    if credentials:
        return credentials.credentials
    if authorization:
        if authorization.startswith("Bearer "):
            return authorization[7:]
        return authorization
    return access_token


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    authorization: Optional[str] = Header(None),
    refresh_token: Optional[str] = Header(None, alias="Refresh-Token"),
    access_token: Optional[str] = Cookie(None),
    store: SessionStore = Depends(get_session_store),
) -> SessionStore:
    """Session store initialized from the request's credentials"""
    await store.initialize(extract_token(credentials, authorization, access_token), refresh_token)
    return store


def gate_exception(decision: GateDecision) -> HTTPException:
    headers = None
    if decision.state in (GateState.LOADING, GateState.PROVISIONING):
        headers = {"Retry-After": "1"}
    return HTTPException(
        status_code=GATE_STATUS[decision.state],
        detail={
            "state": decision.state.value,
            "message": decision.message,
            "redirect_to": decision.redirect_to,
            "required_tier": decision.required_tier.value if decision.required_tier else None,
            "remediation": decision.remediation,
        },
        headers=headers,
    )


def require_tier(tier: Role):
    """
    Dependency factory gating an endpoint on a minimum role.

    Usage:
        @router.get("/pages")
        async def list_pages(auth: AuthContext = Depends(require_tier(Role.EDITOR))):
            ...
    """
    async def dependency(request: Request, store: SessionStore = Depends(get_current_session)) -> AuthContext:
        decision = gate.evaluate(store.state, tier, location=request.url.path)
        if not decision.allowed:
            if decision.state is GateState.DENIED:
                logger.warning(
                    f"User {store.user.id} (role={store.profile.role}) denied {request.url.path}, "
                    f"requires {tier.value}"
                )
            raise gate_exception(decision)
        return AuthContext(identity=store.user, profile=store.profile)

    return dependency


require_author = require_tier(Role.AUTHOR)
require_editor = require_tier(Role.EDITOR)
require_admin = require_tier(Role.ADMIN)
