"""
Content repository and its storage backends
"""
from app.apps.cms.repository.base import StoreBackend
from app.apps.cms.repository.memory import MemoryBackend
from app.apps.cms.repository.sql import SqlBackend
from app.apps.cms.repository.entities import (
    ContentRepository,
    EntityKind,
    EntityRepository,
    PostRepository,
    SettingsRepository,
    DEFAULT_SITE_SETTINGS,
)

__all__ = [
    'StoreBackend',
    'MemoryBackend',
    'SqlBackend',
    'ContentRepository',
    'EntityKind',
    'EntityRepository',
    'PostRepository',
    'SettingsRepository',
    'DEFAULT_SITE_SETTINGS',
]
