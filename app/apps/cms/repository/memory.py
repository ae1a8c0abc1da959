"""
In-process content store.

Rows are kept as plain dicts keyed by table name and primary key, and
model instances are built fresh on every read so callers never share
mutable state with the store.
"""
import copy
import logging
import threading
import uuid
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from sqlmodel import SQLModel

from app.common.errors import DuplicateRecord
from app.apps.cms.models import Tag
from app.apps.cms.repository.base import CASCADES, M, OrderBy, StoreBackend

logger = logging.getLogger(__name__)


def _primary_key(model: Type[SQLModel]) -> str:
    return model.__table__.primary_key.columns.keys()[0]


def _unique_columns(model: Type[SQLModel]) -> List[str]:
    return [column.name for column in model.__table__.columns if column.unique]


def _sort_key(field: str):
    # None sorts last, like NULLS LAST
    def key(row: Dict[str, Any]):
        value = row.get(field)
        return (value is None, value if value is not None else 0)
    return key


class MemoryBackend(StoreBackend):
    """Dict-backed store guarded by a lock."""

    name = "memory"

    def __init__(self):
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._links: Dict[str, List[str]] = {}  # post_id -> ordered tag ids
        self._lock = threading.RLock()

    def _table(self, model: Type[SQLModel]) -> Dict[str, Dict[str, Any]]:
        return self._tables.setdefault(model.__tablename__, {})

    @staticmethod
    def _build(model: Type[M], row: Mapping[str, Any]) -> M:
        return model(**copy.deepcopy(dict(row)))

    async def get(self, model: Type[M], record_id: str) -> Optional[M]:
        with self._lock:
            row = self._table(model).get(record_id)
            return self._build(model, row) if row is not None else None

    async def find_one(self, model: Type[M], **filters: Any) -> Optional[M]:
        rows = await self.select(model, filters, limit=1)
        return rows[0] if rows else None

    async def select(
        self,
        model: Type[M],
        filters: Optional[Mapping[str, Any]] = None,
        order_by: OrderBy = (),
        limit: Optional[int] = None,
    ) -> List[M]:
        filters = dict(filters or {})
        with self._lock:
            rows = [
                dict(row) for row in self._table(model).values()
                if all(row.get(key) == value for key, value in filters.items())
            ]
        # Stable sorts applied last-key-first give multi-column ordering
        for field, descending in reversed(list(order_by)):
            rows.sort(key=_sort_key(field), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return [self._build(model, row) for row in rows]

    def _check_unique(self, model: Type[SQLModel], row: Mapping[str, Any], record_id: str) -> None:
        for column in _unique_columns(model):
            value = row.get(column)
            if value is None:
                continue
            for other_id, other in self._table(model).items():
                if other_id != record_id and other.get(column) == value:
                    raise DuplicateRecord(f"{model.__tablename__}.{column} '{value}' already exists")

    async def insert(self, model: Type[M], values: Mapping[str, Any]) -> M:
        pk = _primary_key(model)
        # Let the model fill in its defaults
        row = self._build(model, values).model_dump()
        if row.get(pk) is None:
            row[pk] = str(uuid.uuid4())
        with self._lock:
            table = self._table(model)
            if row[pk] in table:
                raise DuplicateRecord(f"{model.__tablename__}.{pk} '{row[pk]}' already exists")
            self._check_unique(model, row, row[pk])
            table[row[pk]] = row
        return self._build(model, row)

    async def update(self, model: Type[M], record_id: str, values: Mapping[str, Any]) -> Optional[M]:
        with self._lock:
            table = self._table(model)
            current = table.get(record_id)
            if current is None:
                return None
            row = {**current, **copy.deepcopy(dict(values))}
            self._check_unique(model, row, record_id)
            table[record_id] = row
        return self._build(model, row)

    async def delete(self, model: Type[M], record_id: str) -> bool:
        with self._lock:
            table = self._table(model)
            if record_id not in table:
                return False
            del table[record_id]
            link = CASCADES.get(model)
            if link is not None:
                self._drop_links(link[1], record_id)
        return True

    def _drop_links(self, column: str, record_id: str) -> None:
        if column == "post_id":
            self._links.pop(record_id, None)
        else:
            self._links = {
                post_id: [tag_id for tag_id in tag_ids if tag_id != record_id]
                for post_id, tag_ids in self._links.items()
            }

    async def increment(self, model: Type[M], record_id: str, field: str, amount: int = 1) -> None:
        with self._lock:
            row = self._table(model).get(record_id)
            if row is not None:
                row[field] = (row.get(field) or 0) + amount

    async def replace_post_tags(self, post_id: str, tags: Sequence[Tuple[str, str]]) -> List[Tag]:
        with self._lock:
            table = self._table(Tag)
            by_slug = {row["slug"]: row for row in table.values()}
            tag_ids = []
            for name, slug in tags:
                row = by_slug.get(slug)
                if row is None:
                    row = Tag(id=str(uuid.uuid4()), name=name, slug=slug, created_at=datetime.now()).model_dump()
                    table[row["id"]] = row
                    by_slug[slug] = row
                tag_ids.append(row["id"])
            # Swap in the complete new list in one assignment
            if tag_ids:
                self._links[post_id] = tag_ids
            else:
                self._links.pop(post_id, None)
            return [self._build(Tag, table[tag_id]) for tag_id in tag_ids]

    async def post_tags(self, post_id: str) -> List[Tag]:
        with self._lock:
            table = self._table(Tag)
            return [self._build(Tag, table[tag_id]) for tag_id in self._links.get(post_id, []) if tag_id in table]
