"""
Flexible table and record CRUD operations.

Dependencies: sqlalchemy, astar_backend.boundary.db.models
System role: Flexible table persistence operations
"""

from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.models.table_model import RecordModel, TableModel


class TableCRUD(BaseCRUD[TableModel]):
    """CRUD operations for TableModel."""

    def __init__(self) -> None:
        super().__init__(TableModel)

    async def list_by_workspace(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        workspace_id: UUID,
    ) -> Sequence[TableModel]:
        stmt = (
            select(TableModel)
            .where(TableModel.tenant_id == tenant_id, TableModel.workspace_id == workspace_id)
            .order_by(TableModel.created_at, TableModel.name)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_name(
        self,
        session: AsyncSession,
        workspace_id: UUID,
        name: str,
    ) -> TableModel | None:
        stmt = select(TableModel).where(
            TableModel.workspace_id == workspace_id,
            TableModel.name == name,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_in_workspace(self, session: AsyncSession, workspace_id: UUID) -> int:
        stmt = select(func.count()).select_from(TableModel).where(
            TableModel.workspace_id == workspace_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def list_ids_by_workspace(self, session: AsyncSession, workspace_id: UUID) -> list[UUID]:
        stmt = select(TableModel.id).where(TableModel.workspace_id == workspace_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def delete_by_workspace(self, session: AsyncSession, workspace_id: UUID) -> int:
        result = await session.execute(
            delete(TableModel).where(TableModel.workspace_id == workspace_id)
        )
        return result.rowcount


class RecordCRUD(BaseCRUD[RecordModel]):
    """CRUD operations for RecordModel."""

    def __init__(self) -> None:
        super().__init__(RecordModel)

    async def list_by_table(self, session: AsyncSession, table_id: UUID) -> Sequence[RecordModel]:
        """
        Load every record of a table in position order.

        Args:
            session: Async database session
            table_id: Table UUID

        Returns:
            Sequence of records ordered by position then creation time
        """
        stmt = (
            select(RecordModel)
            .where(RecordModel.table_id == table_id)
            .order_by(RecordModel.position, RecordModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_many(
        self,
        session: AsyncSession,
        table_id: UUID,
        record_ids: Iterable[UUID],
    ) -> Sequence[RecordModel]:
        ids = list(record_ids)
        if not ids:
            return []
        stmt = select(RecordModel).where(
            RecordModel.table_id == table_id,
            RecordModel.id.in_(ids),
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_table(self, session: AsyncSession, table_id: UUID) -> int:
        stmt = select(func.count()).select_from(RecordModel).where(RecordModel.table_id == table_id)
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def max_position(self, session: AsyncSession, table_id: UUID) -> float | None:
        stmt = select(func.max(RecordModel.position)).where(RecordModel.table_id == table_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def min_position(self, session: AsyncSession, table_id: UUID) -> float | None:
        stmt = select(func.min(RecordModel.position)).where(RecordModel.table_id == table_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def next_position_after(
        self,
        session: AsyncSession,
        table_id: UUID,
        position: float,
    ) -> float | None:
        """Smallest position strictly greater than `position`, None at the end."""
        stmt = select(func.min(RecordModel.position)).where(
            RecordModel.table_id == table_id,
            RecordModel.position > position,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_many(
        self,
        session: AsyncSession,
        table_id: UUID,
        record_ids: Iterable[UUID],
    ) -> int:
        ids = list(record_ids)
        if not ids:
            return 0
        stmt = delete(RecordModel).where(
            RecordModel.table_id == table_id,
            RecordModel.id.in_(ids),
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def delete_by_table(self, session: AsyncSession, table_id: UUID) -> int:
        result = await session.execute(delete(RecordModel).where(RecordModel.table_id == table_id))
        return result.rowcount

    async def delete_by_tables(self, session: AsyncSession, table_ids: Iterable[UUID]) -> int:
        ids = list(table_ids)
        if not ids:
            return 0
        result = await session.execute(delete(RecordModel).where(RecordModel.table_id.in_(ids)))
        return result.rowcount


table_crud = TableCRUD()
record_crud = RecordCRUD()
