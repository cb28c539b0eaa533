"""
Attachment CRUD operations.

Dependencies: sqlalchemy, astar_backend.boundary.db.models
System role: Attachment persistence operations
"""

from datetime import datetime
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.models.attachment_model import AttachmentModel, AttachmentStatus


class AttachmentCRUD(BaseCRUD[AttachmentModel]):
    """CRUD operations for AttachmentModel."""

    def __init__(self) -> None:
        super().__init__(AttachmentModel)

    async def get_live(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        attachment_id: UUID,
    ) -> AttachmentModel | None:
        stmt = select(AttachmentModel).where(
            AttachmentModel.id == attachment_id,
            AttachmentModel.tenant_id == tenant_id,
            AttachmentModel.status != AttachmentStatus.DELETED,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        attachment_ids: Iterable[UUID],
    ) -> Sequence[AttachmentModel]:
        ids = list(attachment_ids)
        if not ids:
            return []
        stmt = select(AttachmentModel).where(
            AttachmentModel.tenant_id == tenant_id,
            AttachmentModel.id.in_(ids),
            AttachmentModel.status != AttachmentStatus.DELETED,
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_by_expense(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        expense_id: UUID,
    ) -> Sequence[AttachmentModel]:
        stmt = (
            select(AttachmentModel)
            .where(
                AttachmentModel.tenant_id == tenant_id,
                AttachmentModel.expense_id == expense_id,
                AttachmentModel.status == AttachmentStatus.LINKED,
            )
            .order_by(AttachmentModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_expired_temporary(
        self,
        session: AsyncSession,
        now: datetime,
        tenant_id: UUID | None = None,
    ) -> Sequence[AttachmentModel]:
        """Temporary uploads whose expiry has passed."""
        stmt = select(AttachmentModel).where(
            AttachmentModel.status == AttachmentStatus.TEMPORARY,
            AttachmentModel.expires_at.is_not(None),
            AttachmentModel.expires_at < now,
        )
        if tenant_id is not None:
            stmt = stmt.where(AttachmentModel.tenant_id == tenant_id)
        result = await session.execute(stmt)
        return result.scalars().all()


attachment_crud = AttachmentCRUD()
