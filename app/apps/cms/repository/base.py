"""
Storage backend contract shared by the in-memory and database stores.

Backends are table-style: equality filters, ordering and single-row
writes. Business rules (derived fields, validation, ordering policy) live
in the entity repositories on top of them.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from sqlmodel import SQLModel

from app.apps.cms.models import Post, Tag, PostTag

M = TypeVar("M", bound=SQLModel)

# (field, descending)
OrderBy = Sequence[Tuple[str, bool]]

# Link rows removed together with their owner: model -> (link model, link column)
CASCADES: Dict[Type[SQLModel], Tuple[Type[SQLModel], str]] = {
    Post: (PostTag, "post_id"),
    Tag: (PostTag, "tag_id"),
}


class StoreBackend(ABC):
    """Table-style storage used by the content repository and the profile resolver."""

    name = "abstract"

    @abstractmethod
    async def get(self, model: Type[M], record_id: str) -> Optional[M]:
        """Fetch one record by primary key."""

    @abstractmethod
    async def find_one(self, model: Type[M], **filters: Any) -> Optional[M]:
        """Fetch the first record matching all equality filters."""

    @abstractmethod
    async def select(
        self,
        model: Type[M],
        filters: Optional[Mapping[str, Any]] = None,
        order_by: OrderBy = (),
        limit: Optional[int] = None,
    ) -> List[M]:
        """Fetch every record matching all equality filters."""

    @abstractmethod
    async def insert(self, model: Type[M], values: Mapping[str, Any]) -> M:
        """Insert a record; raises DuplicateRecord on a primary key or unique clash."""

    @abstractmethod
    async def update(self, model: Type[M], record_id: str, values: Mapping[str, Any]) -> Optional[M]:
        """Apply values to a record; returns None if it does not exist."""

    @abstractmethod
    async def delete(self, model: Type[M], record_id: str) -> bool:
        """Hard delete a record (and its link rows); False if it does not exist."""

    @abstractmethod
    async def increment(self, model: Type[M], record_id: str, field: str, amount: int = 1) -> None:
        """Atomically add ``amount`` to a numeric column."""

    @abstractmethod
    async def replace_post_tags(self, post_id: str, tags: Sequence[Tuple[str, str]]) -> List[Tag]:
        """
        Replace a post's tag set in one step.

        ``tags`` holds (name, slug) pairs. Missing tags are created. Readers
        see either the old set or the new one, never an empty set in between.
        """

    @abstractmethod
    async def post_tags(self, post_id: str) -> List[Tag]:
        """Tags linked to a post, in the order they were set."""

    async def close(self) -> None:
        return None
