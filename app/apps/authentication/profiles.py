"""
Profile resolution: maps a Supabase identity to its role-bearing profile
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, List, Mapping, Optional, Union

from app.common.errors import ConfigurationError, DuplicateRecord, NotFound, ValidationError
from app.config import get_default_profile_role
from app.apps.authentication.models import Profile, Role
from app.apps.authentication.utils import Identity
from app.apps.cms.repository.base import StoreBackend

logger = logging.getLogger(__name__)

# Fields a user may change on their own profile
SELF_SERVICE_FIELDS = frozenset({"full_name", "avatar_url", "bio", "website"})


class ProfileResolver:
    def __init__(
        self,
        backend: StoreBackend,
        default_role: Union[Role, str, None] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.backend = backend
        try:
            self.default_role = Role(default_role or get_default_profile_role())
        except ValueError:
            raise ConfigurationError(f"DEFAULT_PROFILE_ROLE must be one of: {', '.join(r.value for r in Role)}")
        self._clock = clock

    async def fetch_profile(self, identity: Identity) -> Optional[Profile]:
        """
        Get the identity's profile, creating it on first sign-in.

        Returns None when the profile cannot be loaded or created; the
        session stays valid and the gate treats the user as provisioning.
        """
        try:
            profile = await self.backend.get(Profile, identity.id)
            if profile is not None:
                return profile
            return await self.create_profile(identity)
        except Exception as e:
            logger.error(f"Error fetching profile for {identity.id}: {e}", exc_info=True)
            return None

    async def create_profile(self, identity: Identity, full_name: Optional[str] = None) -> Profile:
        """Insert a profile with the default role, or return the one another request created first."""
        now = self._clock()
        values = {
            "id": identity.id,
            "email": identity.email,
            "full_name": full_name or identity.metadata.get("full_name") or identity.email.split("@")[0],
            "role": self.default_role.value,
            "created_at": now,
            "updated_at": now,
        }
        try:
            profile = await self.backend.insert(Profile, values)
        except DuplicateRecord:
            logger.info(f"Profile {identity.id} already exists, fetching it")
            profile = await self.backend.get(Profile, identity.id)
            if profile is None:
                raise
            return profile
        logger.info(f"Created profile {identity.id} with role {self.default_role.value}")
        return profile

    async def update_profile(self, user_id: str, changes: Mapping[str, Any]) -> Profile:
        """Owner edits; only self-service fields are accepted."""
        forbidden = set(changes) - SELF_SERVICE_FIELDS
        if forbidden:
            raise ValidationError(f"These profile fields cannot be changed here: {', '.join(sorted(forbidden))}")
        return await self._write(user_id, dict(changes))

    async def set_role(self, user_id: str, role: Union[Role, str]) -> Profile:
        """Admin operation."""
        try:
            role = Role(role)
        except ValueError:
            raise ValidationError(f"Unknown role '{role}'")
        return await self._write(user_id, {"role": role.value})

    async def list_profiles(self) -> List[Profile]:
        return await self.backend.select(Profile, order_by=(("created_at", True),))

    async def _write(self, user_id: str, values: dict) -> Profile:
        current = await self.backend.get(Profile, user_id)
        if current is None:
            raise NotFound(f"Profile {user_id} not found")
        now = self._clock()
        values["updated_at"] = now if now > current.updated_at else current.updated_at + timedelta(microseconds=1)
        profile = await self.backend.update(Profile, user_id, values)
        if profile is None:
            raise NotFound(f"Profile {user_id} not found")
        return profile
