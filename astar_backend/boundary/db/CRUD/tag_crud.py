"""
Tag CRUD operations.

Dependencies: sqlalchemy, astar_backend.boundary.db.models
System role: Tag persistence operations
"""

from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.models.tag_model import TagModel, TagScope

SORT_COLUMNS = {
    "name": TagModel.name_normalized,
    "usage_count": TagModel.usage_count,
    "last_used_at": TagModel.last_used_at,
}


class TagCRUD(BaseCRUD[TagModel]):
    """CRUD operations for TagModel. Soft-deleted tags are excluded everywhere."""

    def __init__(self) -> None:
        super().__init__(TagModel)

    def _visible_to(self, tenant_id: UUID, user_id: UUID):
        return and_(
            TagModel.tenant_id == tenant_id,
            TagModel.deleted_at.is_(None),
            or_(
                TagModel.scope == TagScope.TENANT,
                and_(TagModel.scope == TagScope.PERSONAL, TagModel.owner_id == user_id),
            ),
        )

    async def get_live(self, session: AsyncSession, tenant_id: UUID, tag_id: UUID) -> TagModel | None:
        stmt = select(TagModel).where(
            TagModel.id == tag_id,
            TagModel.tenant_id == tenant_id,
            TagModel.deleted_at.is_(None),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_normalized(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        name_normalized: str,
    ) -> TagModel | None:
        stmt = select(TagModel).where(
            TagModel.tenant_id == tenant_id,
            TagModel.name_normalized == name_normalized,
            TagModel.deleted_at.is_(None),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        tag_ids: Iterable[UUID],
    ) -> Sequence[TagModel]:
        ids = list(tag_ids)
        if not ids:
            return []
        stmt = select(TagModel).where(
            TagModel.tenant_id == tenant_id,
            TagModel.id.in_(ids),
            TagModel.deleted_at.is_(None),
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_visible(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        user_id: UUID,
        scope: TagScope | None = None,
        search: str | None = None,
        sort_by: str = "name",
        descending: bool = False,
    ) -> Sequence[TagModel]:
        """
        List tenant tags plus the caller's personal tags.

        Args:
            session: Async database session
            tenant_id: Caller's tenant
            user_id: Caller (owner of personal tags)
            scope: Restrict to one scope
            search: Substring matched against the normalized name
            sort_by: name, usage_count or last_used_at
            descending: Sort direction

        Returns:
            Sequence of visible tags
        """
        stmt = select(TagModel).where(self._visible_to(tenant_id, user_id))
        if scope is not None:
            stmt = stmt.where(TagModel.scope == scope)
        if search:
            stmt = stmt.where(TagModel.name_normalized.contains(search.strip().lower(), autoescape=True))
        column = SORT_COLUMNS.get(sort_by, TagModel.name_normalized)
        stmt = stmt.order_by(column.desc() if descending else column.asc(), TagModel.name_normalized)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def suggestions(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        user_id: UUID,
        prefix: str | None = None,
        limit: int = 10,
    ) -> Sequence[TagModel]:
        stmt = select(TagModel).where(self._visible_to(tenant_id, user_id))
        if prefix:
            stmt = stmt.where(
                TagModel.name_normalized.startswith(prefix.strip().lower(), autoescape=True)
            )
        stmt = stmt.order_by(TagModel.usage_count.desc(), TagModel.name_normalized).limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()


tag_crud = TagCRUD()
