"""
Entity repositories: CRUD rules over a storage backend.

Create and update both run the same ``_derive`` step, so fields computed
at creation (slug, reading time, publish stamp) follow identical rules
when a record is edited later.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Set, Tuple, Type

from sqlmodel import SQLModel

from app.common.errors import DuplicateRecord, NotFound, ValidationError
from app.common.fields import handle_postgresql_json
from app.apps.cms.models import (
    Banner,
    BannerPosition,
    Category,
    Collection,
    MenuItem,
    Page,
    PageStatus,
    PageTemplate,
    Post,
    PostStatus,
    Poster,
    SiteContent,
    Tag,
)
from app.apps.cms.repository.base import M, StoreBackend
from app.apps.cms.utils.text import calculate_reading_time, derive_slug, normalize_tags

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class EntityKind:
    """How one content type is validated, derived and ordered."""
    model: Type[SQLModel]
    label: str
    required: Tuple[str, ...]
    slug_source: Optional[str] = None
    ordered: bool = False  # display_order ascending, active records only
    filters: Tuple[str, ...] = ()
    choices: Dict[str, Type[Enum]] = field(default_factory=dict)
    computed: Tuple[str, ...] = ()
    parent_field: Optional[str] = None  # self-reference cleared when the parent is deleted


POST_KIND = EntityKind(
    Post, "post",
    required=("title", "content"),
    slug_source="title",
    filters=("status", "category_id", "author_id"),
    choices={"status": PostStatus},
    computed=("reading_time", "view_count"),
)
PAGE_KIND = EntityKind(
    Page, "page",
    required=("title",),
    slug_source="title",
    filters=("status", "template"),
    choices={"status": PageStatus, "template": PageTemplate},
)
BANNER_KIND = EntityKind(
    Banner, "banner",
    required=("title",),
    ordered=True,
    filters=("position",),
    choices={"position": BannerPosition},
)
MENU_ITEM_KIND = EntityKind(
    MenuItem, "menu item",
    required=("label", "url"),
    ordered=True,
    filters=("parent_id",),
    parent_field="parent_id",
)
COLLECTION_KIND = EntityKind(Collection, "collection", required=("title",), ordered=True, filters=("category",))
POSTER_KIND = EntityKind(Poster, "poster", required=("title", "image_url"), ordered=True, filters=("category",))
CATEGORY_KIND = EntityKind(Category, "category", required=("name",), slug_source="name")


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class EntityRepository(Generic[M]):
    """Uniform CRUD contract for one content type."""

    extra_fields: Set[str] = set()

    def __init__(self, backend: StoreBackend, kind: EntityKind, clock: Callable[[], datetime] = datetime.now):
        self.backend = backend
        self.kind = kind
        self._clock = clock

    @property
    def model(self) -> Type[M]:
        return self.kind.model

    # -- reads -------------------------------------------------------------

    async def list(self, *, include_inactive: bool = False, limit: Optional[int] = None, **filters: Any) -> List[M]:
        unknown = set(filters) - set(self.kind.filters)
        if unknown:
            raise ValidationError(f"Cannot filter {self.kind.label}s by: {', '.join(sorted(unknown))}")
        criteria = {key: _plain(value) for key, value in filters.items() if value is not None}
        if self.kind.ordered:
            if not include_inactive:
                criteria["is_active"] = True
            order = (("display_order", False), ("created_at", False))
        else:
            order = (("created_at", True),)
        return await self.backend.select(self.model, criteria, order, limit)

    async def get(self, key: str) -> Optional[M]:
        """Find a record by id, falling back to slug for slugged types."""
        record = await self.backend.get(self.model, key)
        if record is None and self.kind.slug_source:
            record = await self.backend.find_one(self.model, slug=key)
        return record

    async def find_published(self, slug: str) -> Optional[M]:
        return await self.backend.find_one(self.model, slug=slug, status="published")

    # -- writes ------------------------------------------------------------

    async def create(self, fields: Mapping[str, Any]) -> M:
        changes = self._clean(fields)
        now = self._clock()
        values = self._derive(None, changes, now)
        values.update(id=str(uuid.uuid4()), created_at=now, updated_at=now)
        self._validate(values)
        await self._check_slug(values, None)
        try:
            record = await self.backend.insert(self.model, values)
        except DuplicateRecord as e:
            raise ValidationError(f"Could not create {self.kind.label}: {e.message}")
        logger.info(f"Created {self.kind.label} {record.id}")
        return record

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> M:
        current = await self.backend.get(self.model, record_id)
        if current is None:
            raise NotFound(f"{self.kind.label.capitalize()} {record_id} not found")
        changes = self._clean(fields)
        current_values = current.model_dump()
        values = self._derive(current_values, changes, self._clock())
        values["updated_at"] = self._touch(current.updated_at)
        self._validate({**current_values, **values})
        await self._check_slug(values, record_id)
        try:
            record = await self.backend.update(self.model, record_id, values)
        except DuplicateRecord as e:
            raise ValidationError(f"Could not update {self.kind.label}: {e.message}")
        if record is None:
            raise NotFound(f"{self.kind.label.capitalize()} {record_id} not found")
        return record

    async def delete(self, record_id: str) -> bool:
        if self.kind.parent_field and await self.backend.get(self.model, record_id) is not None:
            # Children move to the top level, as ON DELETE SET NULL does
            for child in await self.backend.select(self.model, {self.kind.parent_field: record_id}):
                await self.backend.update(self.model, child.id, {self.kind.parent_field: None})
        deleted = await self.backend.delete(self.model, record_id)
        if deleted:
            logger.info(f"Deleted {self.kind.label} {record_id}")
        return deleted

    # -- rules -------------------------------------------------------------

    def _clean(self, fields: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        fields = dict(fields or {})
        unknown = set(fields) - set(self.model.model_fields) - self.extra_fields
        if unknown:
            raise ValidationError(f"Unknown {self.kind.label} fields: {', '.join(sorted(unknown))}")
        cleaned = {}
        for key, value in fields.items():
            if key in PROTECTED_FIELDS or key in self.kind.computed:
                continue
            value = _plain(value)
            choices = self.kind.choices.get(key)
            if choices is not None and value not in {choice.value for choice in choices}:
                raise ValidationError(f"Invalid {key} '{value}' for {self.kind.label}")
            cleaned[key] = value
        return cleaned

    def _derive(self, current: Optional[Dict[str, Any]], changes: Dict[str, Any], now: datetime) -> Dict[str, Any]:
        """Values to write for ``changes`` applied on top of ``current`` (None when creating)."""
        values = dict(changes)
        source = self.kind.slug_source
        if source and ("slug" in values or not (current or {}).get("slug")):
            requested = values.get("slug")
            if requested:
                values["slug"] = derive_slug(requested)
            else:
                values["slug"] = derive_slug(values.get(source, (current or {}).get(source)) or "")
        return values

    def _validate(self, record: Mapping[str, Any]) -> None:
        missing = [
            name for name in self.kind.required
            if record.get(name) is None or (isinstance(record.get(name), str) and not record[name].strip())
        ]
        if missing:
            raise ValidationError(f"Missing required {self.kind.label} fields: {', '.join(missing)}")
        if self.kind.slug_source and not record.get("slug"):
            raise ValidationError(f"Could not derive a slug for this {self.kind.label}")

    async def _check_slug(self, values: Mapping[str, Any], record_id: Optional[str]) -> None:
        if not self.kind.slug_source or "slug" not in values:
            return
        existing = await self.backend.find_one(self.model, slug=values["slug"])
        if existing is not None and existing.id != record_id:
            raise ValidationError(f"The slug '{values['slug']}' is already used by another {self.kind.label}")

    def _touch(self, previous: Optional[datetime]) -> datetime:
        now = self._clock()
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        return now


class PostRepository(EntityRepository[Post]):
    """Posts plus tags, publish stamping and view counting."""

    extra_fields = {"tags"}

    def __init__(self, backend: StoreBackend, clock: Callable[[], datetime] = datetime.now):
        super().__init__(backend, POST_KIND, clock)
        self._pending: Set[asyncio.Task] = set()

    def _derive(self, current, changes, now):
        values = super()._derive(current, changes, now)
        values.pop("tags", None)
        if current is None or "content" in values:
            values["reading_time"] = calculate_reading_time(values.get("content") or "")

        previous_status = (current or {}).get("status")
        status = values.get("status", previous_status or PostStatus.DRAFT.value)
        if "published_at" not in values and status == PostStatus.PUBLISHED.value \
                and previous_status != PostStatus.PUBLISHED.value:
            values["published_at"] = now
        return values

    async def create(self, fields: Mapping[str, Any]) -> Post:
        tags = dict(fields or {}).get("tags")
        post = await super().create(fields)
        if tags is not None:
            await self.set_tags(post.id, tags)
        return post

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> Post:
        tags = dict(fields or {}).get("tags")
        post = await super().update(record_id, fields)
        if tags is not None:
            await self.set_tags(post.id, tags)
        return post

    async def set_tags(self, post_id: str, names: Iterable[str]) -> List[Tag]:
        if await self.backend.get(Post, post_id) is None:
            raise NotFound(f"Post {post_id} not found")
        pairs = [(name, derive_slug(name)) for name in normalize_tags(names)]
        return await self.backend.replace_post_tags(post_id, pairs)

    async def get_tags(self, post_id: str) -> List[Tag]:
        return await self.backend.post_tags(post_id)

    async def list_tags(self) -> List[Tag]:
        return await self.backend.select(Tag, order_by=(("name", False),))

    async def get_published_by_slug(self, slug: str, defer: Optional[Callable[..., Any]] = None) -> Optional[Post]:
        """
        Fetch a published post for public display and count the view.

        The view is recorded after the post is returned: through ``defer``
        (e.g. ``BackgroundTasks.add_task``) when given, otherwise on a
        detached task.
        """
        post = await self.find_published(slug)
        if post is None:
            return None
        if defer is not None:
            defer(self.record_view, post.id)
        else:
            task = asyncio.get_running_loop().create_task(self.record_view(post.id))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        return post

    async def record_view(self, post_id: str) -> None:
        try:
            await self.backend.increment(Post, post_id, "view_count")
        except Exception as e:
            logger.warning(f"Could not record view for post {post_id}: {e}", exc_info=True)

    async def flush_pending(self) -> None:
        """Wait for detached view-count writes (used on shutdown and in tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


SITE_SETTINGS_KEY = "site_settings"

DEFAULT_SITE_SETTINGS: Dict[str, Any] = {
    "site_name": "RE_CLAIM.D",
    "site_description": "Modern, sustainable fashion that reclaims the future of design",
    "logo": "/logo.svg",
    "favicon": "/favicon.ico",
    "contact_email": "info@reclaimd.com",
    "contact_phone": "+1 (212) 555-1234",
    "address": "123 Fashion Avenue, New York, NY 10001",
    "social_media": {
        "instagram": "https://instagram.com/re_claim.d",
        "facebook": "https://facebook.com/reclaimd",
        "twitter": "https://twitter.com/reclaimd",
    },
    "seo_settings": {
        "default_meta_title": "RE_CLAIM.D | Sustainable Fashion Design",
        "default_meta_description": (
            "Modern, sustainable fashion that reclaims the future of design. Each piece tells "
            "a story of conscious craftsmanship and innovative style."
        ),
        "google_analytics_id": None,
    },
}


def _merge(base: Mapping[str, Any], changes: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class SettingsRepository:
    """The site settings document, stored as a versioned SiteContent row."""

    def __init__(self, backend: StoreBackend, clock: Callable[[], datetime] = datetime.now):
        self.backend = backend
        self._clock = clock

    async def get(self) -> SiteContent:
        row = await self.backend.find_one(SiteContent, content_key=SITE_SETTINGS_KEY)
        if row is None:
            return SiteContent(content_key=SITE_SETTINGS_KEY, content=dict(DEFAULT_SITE_SETTINGS), version=0)
        row.content = _merge(DEFAULT_SITE_SETTINGS, handle_postgresql_json(row.content) or {})
        return row

    async def update(self, changes: Mapping[str, Any], updated_by: Optional[str] = None) -> SiteContent:
        row = await self.backend.find_one(SiteContent, content_key=SITE_SETTINGS_KEY)
        now = self._clock()
        if row is None:
            return await self.backend.insert(SiteContent, {
                "id": str(uuid.uuid4()),
                "content_key": SITE_SETTINGS_KEY,
                "content": _merge(DEFAULT_SITE_SETTINGS, changes),
                "version": 1,
                "created_at": now,
                "updated_at": now,
                "updated_by": updated_by,
            })
        content = _merge(handle_postgresql_json(row.content) or DEFAULT_SITE_SETTINGS, changes)
        return await self.backend.update(SiteContent, row.id, {
            "content": content,
            "version": row.version + 1,
            "updated_at": max(now, row.updated_at + timedelta(microseconds=1)),
            "updated_by": updated_by,
        })


class ContentRepository:
    """Every content type behind one object, sharing a single backend."""

    def __init__(self, backend: StoreBackend, clock: Callable[[], datetime] = datetime.now):
        self.backend = backend
        self.posts = PostRepository(backend, clock)
        self.pages: EntityRepository[Page] = EntityRepository(backend, PAGE_KIND, clock)
        self.banners: EntityRepository[Banner] = EntityRepository(backend, BANNER_KIND, clock)
        self.menu_items: EntityRepository[MenuItem] = EntityRepository(backend, MENU_ITEM_KIND, clock)
        self.collections: EntityRepository[Collection] = EntityRepository(backend, COLLECTION_KIND, clock)
        self.posters: EntityRepository[Poster] = EntityRepository(backend, POSTER_KIND, clock)
        self.categories: EntityRepository[Category] = EntityRepository(backend, CATEGORY_KIND, clock)
        self.settings = SettingsRepository(backend, clock)

    async def close(self) -> None:
        await self.posts.flush_pending()
        await self.backend.close()
