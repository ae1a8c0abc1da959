"""
Database-backed content store (Supabase Postgres through SQLModel/asyncpg).

Every operation opens its own session from the session factory, so a
write is a single transaction and a fire-and-forget write never depends
on a request-scoped session that may already be closed.
"""
import logging
import uuid
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Type

from sqlalchemy import select, update as sa_update, delete as sa_delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from app.common.errors import DuplicateRecord
from app.apps.cms.models import Tag, PostTag
from app.apps.cms.repository.base import CASCADES, M, OrderBy, StoreBackend

logger = logging.getLogger(__name__)


class SqlBackend(StoreBackend):
    """Store backed by an async SQLAlchemy session factory."""

    name = "database"

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _session(self) -> AsyncSession:
        return self._session_factory()

    @staticmethod
    def _where(stmt, model, filters: Mapping[str, Any]):
        for key, value in filters.items():
            stmt = stmt.where(getattr(model, key) == value)
        return stmt

    async def get(self, model: Type[M], record_id: str) -> Optional[M]:
        async with self._session() as session:
            return await session.get(model, record_id)

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
        stmt = self._where(select(model), model, filters or {})
        for field, descending in order_by:
            column = getattr(model, field)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def insert(self, model: Type[M], values: Mapping[str, Any]) -> M:
        record = model(**dict(values))
        if getattr(record, "id", "") is None:
            record.id = str(uuid.uuid4())
        async with self._session() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.info(f"Insert into {model.__tablename__} rejected: {e.orig}")
                raise DuplicateRecord(f"{model.__tablename__} record violates a unique constraint")
            await session.refresh(record)
            return record

    async def update(self, model: Type[M], record_id: str, values: Mapping[str, Any]) -> Optional[M]:
        async with self._session() as session:
            record = await session.get(model, record_id)
            if record is None:
                return None
            for key, value in values.items():
                setattr(record, key, value)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.info(f"Update of {model.__tablename__} {record_id} rejected: {e.orig}")
                raise DuplicateRecord(f"{model.__tablename__} record violates a unique constraint")
            await session.refresh(record)
            return record

    async def delete(self, model: Type[M], record_id: str) -> bool:
        async with self._session() as session:
            record = await session.get(model, record_id)
            if record is None:
                return False
            link = CASCADES.get(model)
            if link is not None:
                link_model, column = link
                await session.execute(sa_delete(link_model).where(getattr(link_model, column) == record_id))
            await session.delete(record)
            await session.commit()
            return True

    async def increment(self, model: Type[M], record_id: str, field: str, amount: int = 1) -> None:
        column = getattr(model, field)
        async with self._session() as session:
            await session.execute(
                sa_update(model).where(model.id == record_id).values({field: column + amount})
            )
            await session.commit()

    async def replace_post_tags(self, post_id: str, tags: Sequence[Tuple[str, str]]) -> List[Tag]:
        async with self._session() as session:
            try:
                resolved: List[Tag] = []
                for name, slug in tags:
                    result = await session.execute(select(Tag).where(Tag.slug == slug))
                    tag = result.scalar_one_or_none()
                    if tag is None:
                        tag = Tag(id=str(uuid.uuid4()), name=name, slug=slug)
                        session.add(tag)
                        await session.flush()
                    resolved.append(tag)

                await session.execute(sa_delete(PostTag).where(PostTag.post_id == post_id))
                session.add_all([
                    PostTag(post_id=post_id, tag_id=tag.id, position=position)
                    for position, tag in enumerate(resolved)
                ])
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.warning(f"Replacing tags for post {post_id} failed: {e.orig}")
                raise DuplicateRecord("A tag with the same slug was created concurrently")
            return resolved

    async def post_tags(self, post_id: str) -> List[Tag]:
        stmt = (
            select(Tag)
            .join(PostTag, PostTag.tag_id == Tag.id)
            .where(PostTag.post_id == post_id)
            .order_by(PostTag.position)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())
