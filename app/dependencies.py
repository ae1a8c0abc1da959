"""
Shared dependencies for FastAPI routes

The content repository is created once per process. Tests call
reset_repository() or override get_repository.
"""
import logging
from typing import Optional

from app.config import get_cms_backend
from app.apps.cms.repository import ContentRepository, MemoryBackend, SqlBackend

logger = logging.getLogger(__name__)

_repository: Optional[ContentRepository] = None


def build_repository(backend_name: Optional[str] = None) -> ContentRepository:
    """Create a repository on the configured backend ("memory" or "database")."""
    backend_name = backend_name or get_cms_backend()
    if backend_name == "memory":
        backend = MemoryBackend()
    elif backend_name == "database":
        from app.database import get_session_factory
        backend = SqlBackend(get_session_factory())
    else:
        raise ValueError(f"Unknown CMS_BACKEND: {backend_name}")
    logger.info(f"Content repository using the {backend.name} backend")
    return ContentRepository(backend)


def init_repository(repository: Optional[ContentRepository] = None) -> ContentRepository:
    """Install the process-wide repository (building one if not given)."""
    global _repository
    _repository = repository or build_repository()
    return _repository


async def reset_repository() -> None:
    """Close and forget the process-wide repository."""
    global _repository
    if _repository is not None:
        await _repository.close()
    _repository = None


def get_repository() -> ContentRepository:
    """Dependency returning the process-wide content repository"""
    if _repository is None:
        return init_repository()
    return _repository
