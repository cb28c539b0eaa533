"""
Property type catalog CRUD operations.

Dependencies: sqlalchemy, astar_backend.boundary.db.models
System role: Property type catalog persistence operations
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.models.property_type_model import PropertyTypeModel


class PropertyTypeCRUD(BaseCRUD[PropertyTypeModel]):
    """CRUD operations for the property type catalog."""

    def __init__(self) -> None:
        super().__init__(PropertyTypeModel)

    async def list_types(
        self,
        session: AsyncSession,
        active_only: bool = False,
        category: str | None = None,
        is_custom: bool | None = None,
    ) -> Sequence[PropertyTypeModel]:
        """
        List catalog entries with optional filters.

        Args:
            session: Async database session
            active_only: Only active types
            category: Restrict to one category
            is_custom: Restrict to custom (True) or built-in (False) types

        Returns:
            Sequence of catalog entries ordered by category then id
        """
        stmt = select(PropertyTypeModel)
        if active_only:
            stmt = stmt.where(PropertyTypeModel.is_active.is_(True))
        if category is not None:
            stmt = stmt.where(PropertyTypeModel.category == category)
        if is_custom is not None:
            stmt = stmt.where(PropertyTypeModel.is_custom.is_(is_custom))
        stmt = stmt.order_by(PropertyTypeModel.category, PropertyTypeModel.id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def active_ids(self, session: AsyncSession) -> set[str]:
        stmt = select(PropertyTypeModel.id).where(PropertyTypeModel.is_active.is_(True))
        result = await session.execute(stmt)
        return set(result.scalars().all())


property_type_crud = PropertyTypeCRUD()
