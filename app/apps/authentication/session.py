"""
Session store: the signed-in identity, its profile and the auth lifecycle.

Public operations return Success/Failure results instead of raising, and
each of sign-in, sign-up, sign-out and profile update raises exactly one
notification. Listeners subscribe to AuthEvents; anything that resolves
after the store is closed, or after the identity changed underneath it,
is dropped.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional

from app.common.errors import (
    CMSError,
    ConfigurationError,
    Failure,
    InvalidCredentials,
    NetworkError,
    Result,
    Success,
)
from app.apps.authentication.models import Profile
from app.apps.authentication.notifications import Notifier
from app.apps.authentication.profiles import ProfileResolver
from app.apps.authentication.utils import AuthBackend, AuthSession, Identity

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred"


class AuthEventType(str, Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"


@dataclass(frozen=True)
class AuthEvent:
    type: AuthEventType
    session: Optional[AuthSession]


@dataclass
class SessionState:
    session: Optional[AuthSession] = None
    profile: Optional[Profile] = None
    loading: bool = True
    error: Optional[CMSError] = None

    @property
    def user(self) -> Optional[Identity]:
        return self.session.identity if self.session else None


Listener = Callable[[AuthEvent], Any]


class Subscription:
    """Handle returned by SessionStore.subscribe; also usable as a context manager."""

    def __init__(self, store: "SessionStore", listener: Listener):
        self._store = store
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._store._remove_listener(self._listener)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class SessionStore:
    def __init__(
        self,
        auth_provider: Callable[[], AuthBackend],
        resolver: ProfileResolver,
        notifier: Optional[Notifier] = None,
    ):
        self._auth_provider = auth_provider
        self._auth: Optional[AuthBackend] = None
        self.resolver = resolver
        self.notifier = notifier or Notifier()
        self.state = SessionState()
        self._listeners: List[Listener] = []
        self._generation = 0
        self._closed = False

    # -- cached state ------------------------------------------------------

    def get_session(self) -> Optional[AuthSession]:
        return self.state.session

    @property
    def user(self) -> Optional[Identity]:
        return self.state.user

    @property
    def profile(self) -> Optional[Profile]:
        return self.state.profile

    @property
    def loading(self) -> bool:
        return self.state.loading

    # -- events ------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self, event_type: AuthEventType) -> None:
        event = AuthEvent(event_type, self.state.session)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Auth listener failed on {event_type.value}: {e}", exc_info=True)

    def close(self) -> None:
        """Dispose of the store; late backend responses are ignored from now on."""
        self._closed = True
        self._listeners.clear()

    # -- internals ---------------------------------------------------------

    def _backend(self) -> AuthBackend:
        if self._auth is None:
            self._auth = self._auth_provider()
        return self._auth

    def _begin(self) -> int:
        self._generation += 1
        return self._generation

    def _stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    async def _load_profile(self, generation: int) -> None:
        profile = await self.resolver.fetch_profile(self.state.session.identity)
        if self._stale(generation):
            logger.debug("Ignoring profile that arrived after the session changed")
            return
        self.state.profile = profile
        self.state.loading = False

    def _fail(self, generation: int, error: CMSError, message: Optional[str] = None) -> Failure:
        if not self._stale(generation):
            self.state.loading = False
            if isinstance(error, ConfigurationError):
                self.state.error = error
            self.notifier.error(message or error.message)
        return Failure(error)

    # -- operations --------------------------------------------------------

    async def initialize(self, access_token: Optional[str] = None, refresh_token: Optional[str] = None) -> SessionState:
        """
        Resolve the session for a bearer token, then its profile.

        Session echoes never notify. A misconfigured backend is recorded on
        the state; a backend outage is raised as NetworkError.
        """
        generation = self._begin()
        self.state.loading = True
        try:
            backend = self._backend()
            identity = await backend.get_user(access_token) if access_token else None
        except ConfigurationError as e:
            self.state.error = e
            self.state.loading = False
            return self.state
        except CMSError:
            self.state.loading = False
            raise
        except Exception as e:
            self.state.loading = False
            logger.error(f"Session check failed: {e}", exc_info=True)
            raise NetworkError("Could not verify the session")

        if self._stale(generation):
            return self.state

        if identity is None:
            self.state.session = None
            self.state.profile = None
            self.state.loading = False
        else:
            self.state.session = AuthSession(identity, access_token, refresh_token)
            await self._load_profile(generation)
        self._publish(AuthEventType.INITIAL_SESSION)
        return self.state

    async def sign_in(self, email: str, password: str) -> Result[AuthSession]:
        generation = self._begin()
        self.state.loading = True
        try:
            session = await self._backend().sign_in(email, password)
        except CMSError as e:
            return self._fail(generation, e)
        except Exception as e:
            logger.error(f"Unexpected error during sign in: {e}", exc_info=True)
            return self._fail(generation, NetworkError(str(e)), UNEXPECTED_ERROR)

        if self._stale(generation):
            return Success(session)

        self.state.session = session
        self.state.error = None
        await self._load_profile(generation)
        if self._stale(generation):
            return Success(session)
        self.notifier.success("Successfully signed in!")
        self._publish(AuthEventType.SIGNED_IN)
        return Success(session)

    async def sign_up(self, email: str, password: str, full_name: str) -> Result[Identity]:
        generation = self._begin()
        self.state.loading = True
        try:
            identity, session = await self._backend().sign_up(email, password, full_name)
        except CMSError as e:
            return self._fail(generation, e)
        except Exception as e:
            logger.error(f"Unexpected error during sign up: {e}", exc_info=True)
            return self._fail(generation, NetworkError(str(e)), UNEXPECTED_ERROR)

        try:
            profile = await self.resolver.create_profile(identity, full_name)
        except Exception as e:
            # The account exists; the profile is created again on first sign-in
            logger.error(f"Error creating profile for {identity.id}: {e}", exc_info=True)
            profile = None

        if self._stale(generation):
            return Success(identity)

        self.state.loading = False
        if session is not None:
            self.state.session = session
            self.state.profile = profile
            self.state.error = None
        self.notifier.success("Account created successfully!")
        if session is not None:
            self._publish(AuthEventType.SIGNED_IN)
        return Success(identity)

    async def sign_out(self) -> Result[None]:
        generation = self._begin()
        session = self.state.session
        try:
            if session is not None:
                await self._backend().sign_out(session)
        except CMSError as e:
            return self._fail(generation, e)
        except Exception as e:
            logger.error(f"Unexpected error during sign out: {e}", exc_info=True)
            return self._fail(generation, NetworkError(str(e)), UNEXPECTED_ERROR)

        if self._stale(generation):
            return Success(None)

        self.state.session = None
        self.state.profile = None
        self.state.loading = False
        self.notifier.success("Successfully signed out!")
        self._publish(AuthEventType.SIGNED_OUT)
        return Success(None)

    async def update_profile(self, changes: Mapping[str, Any]) -> Result[Profile]:
        if self.user is None:
            return Failure(InvalidCredentials("No user logged in"))
        try:
            profile = await self.resolver.update_profile(self.user.id, changes)
        except CMSError as e:
            self.notifier.error(e.message)
            return Failure(e)
        except Exception as e:
            logger.error(f"Unexpected error updating profile: {e}", exc_info=True)
            self.notifier.error(UNEXPECTED_ERROR)
            return Failure(NetworkError(str(e)))

        if self._closed:
            return Success(profile)
        self.state.profile = profile
        self.notifier.success("Profile updated successfully!")
        self._publish(AuthEventType.USER_UPDATED)
        return Success(profile)
