"""
Authentication utilities: Supabase client and auth backend adapter
"""
import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from supabase import AuthApiError, Client, create_client

from app.common.errors import ConfigurationError, InvalidCredentials, NetworkError
from app.config import (
    SUPABASE_SETUP_STEPS,
    get_backend_timeout,
    get_supabase_anon_key,
    get_supabase_configuration_problem,
    get_supabase_url,
)

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    "server disconnected",
    "connection error",
    "timeout",
    "timed out",
    "network error",
    "service unavailable",
    "temporary failure",
)


@dataclass(frozen=True)
class Identity:
    """Authenticated Supabase user, as far as this app cares"""
    id: str
    email: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthSession:
    identity: Identity
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class AuthBackend(Protocol):
    """Operations the session store needs from the auth service"""

    async def sign_in(self, email: str, password: str) -> AuthSession: ...

    async def sign_up(self, email: str, password: str, full_name: str) -> Tuple[Identity, Optional[AuthSession]]: ...

    async def sign_out(self, session: AuthSession) -> None: ...

    async def get_user(self, access_token: str) -> Optional[Identity]: ...


def retry_with_exponential_backoff(func, max_retries=2, base_delay=1, max_delay=10):
    """
    Retry a function with exponential backoff for transient failures.

    Args:
        func: Function to retry
        max_retries: Maximum number of retry attempts
        base_delay: Base delay in seconds for exponential backoff
        max_delay: Maximum delay in seconds
    """
    for attempt in range(max_retries + 1):
        try:
            return func()
        except Exception as e:
            error_message = str(e).lower()
            if not any(transient in error_message for transient in TRANSIENT_ERRORS):
                raise
            if attempt >= max_retries:
                logger.error(f"All {max_retries + 1} attempts failed. Last error: {e}")
                raise
            delay = min(base_delay * (2 ** attempt), max_delay)
            total_delay = delay + random.uniform(0.1, 0.3) * delay
            logger.warning(
                f"Transient error on attempt {attempt + 1}/{max_retries + 1}: {e}. "
                f"Retrying in {total_delay:.2f} seconds..."
            )
            time.sleep(total_delay)


def get_supabase_client() -> Client:
    """
    Create a Supabase client.

    A new client is created per call: the client keeps the signed-in
    session, so sharing one between visitors would share their sessions.

    Raises:
        ConfigurationError: URL or key missing or still a placeholder. No
            network call is made in that case.
    """
    problem = get_supabase_configuration_problem()
    if problem:
        logger.warning(f"Supabase not configured: {problem}")
        raise ConfigurationError(problem, remediation=SUPABASE_SETUP_STEPS)

    try:
        return create_client(get_supabase_url(), get_supabase_anon_key())
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {str(e)}")
        raise ConfigurationError(f"Failed to initialize Supabase client: {e}", remediation=SUPABASE_SETUP_STEPS)


def _identity(user) -> Identity:
    return Identity(id=str(user.id), email=user.email or "", metadata=dict(user.user_metadata or {}))


def _session(response) -> AuthSession:
    return AuthSession(
        identity=_identity(response.user),
        access_token=response.session.access_token,
        refresh_token=response.session.refresh_token,
        expires_in=response.session.expires_in,
    )


class SupabaseAuthBackend:
    """AuthBackend over supabase-py; blocking calls run in a worker thread with a timeout."""

    def __init__(self, client: Optional[Client] = None, timeout: Optional[float] = None):
        self.client = client or get_supabase_client()
        self.timeout = timeout or get_backend_timeout()

    async def _call(self, func: Callable, *args):
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Supabase call {getattr(func, '__name__', func)} timed out after {self.timeout}s")
            raise NetworkError(f"The authentication service did not respond within {self.timeout:g} seconds")

    async def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            response = await self._call(
                self.client.auth.sign_in_with_password, {"email": email, "password": password}
            )
        except AuthApiError as e:
            if (getattr(e, "status", None) or 400) >= 500:
                raise NetworkError(str(e))
            raise InvalidCredentials(str(e) or "Invalid login credentials")

        if not response.user or not response.session:
            raise InvalidCredentials("Invalid login credentials")
        return _session(response)

    async def sign_up(self, email: str, password: str, full_name: str) -> Tuple[Identity, Optional[AuthSession]]:
        try:
            response = await self._call(self.client.auth.sign_up, {
                "email": email,
                "password": password,
                "options": {"data": {"full_name": full_name}},
            })
        except AuthApiError as e:
            raise InvalidCredentials(str(e) or "Sign up was rejected")

        if not response.user:
            raise InvalidCredentials("Sign up was rejected")
        # No session until the email is confirmed when confirmations are enabled
        session = _session(response) if response.session else None
        return _identity(response.user), session

    async def sign_out(self, session: AuthSession) -> None:
        def _sign_out():
            if session.refresh_token:
                self.client.auth.set_session(session.access_token, session.refresh_token)
            self.client.auth.sign_out()

        try:
            await self._call(_sign_out)
        except AuthApiError as e:
            raise NetworkError(f"Sign out failed: {e}")

    async def get_user(self, access_token: str) -> Optional[Identity]:
        def validate_jwt_token():
            return self.client.auth.get_user(access_token)

        try:
            response = await self._call(retry_with_exponential_backoff, validate_jwt_token)
        except AuthApiError as e:
            logger.warning(f"Invalid JWT token provided: {e}")
            return None

        if not response or not response.user:
            return None
        return _identity(response.user)
