"""
Workspace CRUD operations.

Dependencies: sqlalchemy, astar_backend.boundary.db.models
System role: Workspace persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.models.workspace_model import WorkspaceModel


class WorkspaceCRUD(BaseCRUD[WorkspaceModel]):
    """CRUD operations for WorkspaceModel."""

    def __init__(self) -> None:
        super().__init__(WorkspaceModel)

    async def list_for_tenant(
        self,
        session: AsyncSession,
        tenant_id: UUID,
    ) -> Sequence[WorkspaceModel]:
        stmt = (
            select(WorkspaceModel)
            .where(WorkspaceModel.tenant_id == tenant_id)
            .order_by(WorkspaceModel.created_at, WorkspaceModel.name)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_name(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        name: str,
    ) -> WorkspaceModel | None:
        stmt = select(WorkspaceModel).where(
            WorkspaceModel.tenant_id == tenant_id,
            WorkspaceModel.name == name,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


workspace_crud = WorkspaceCRUD()
