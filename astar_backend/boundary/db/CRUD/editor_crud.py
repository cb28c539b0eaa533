"""
Document tree CRUD operations: nodes, revisions and metadata.

Dependencies: sqlalchemy, astar_backend.boundary.db.models
System role: Editor persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.models.editor_model import (
    DocumentMetadataModel,
    DocumentNodeModel,
    DocumentRevisionModel,
)


class DocumentNodeCRUD(BaseCRUD[DocumentNodeModel]):
    """CRUD operations for folders and documents."""

    def __init__(self) -> None:
        super().__init__(DocumentNodeModel)

    def _sibling_filter(self, stmt, workspace_id: UUID, parent_id: UUID | None):
        stmt = stmt.where(DocumentNodeModel.workspace_id == workspace_id)
        if parent_id is None:
            return stmt.where(DocumentNodeModel.parent_id.is_(None))
        return stmt.where(DocumentNodeModel.parent_id == parent_id)

    async def slug_exists(
        self,
        session: AsyncSession,
        workspace_id: UUID,
        parent_id: UUID | None,
        slug: str,
        exclude_id: UUID | None = None,
    ) -> bool:
        stmt = self._sibling_filter(select(DocumentNodeModel.id), workspace_id, parent_id)
        stmt = stmt.where(DocumentNodeModel.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(DocumentNodeModel.id != exclude_id)
        result = await session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def max_sibling_position(
        self,
        session: AsyncSession,
        workspace_id: UUID,
        parent_id: UUID | None,
    ) -> float | None:
        stmt = self._sibling_filter(
            select(func.max(DocumentNodeModel.position)), workspace_id, parent_id
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_children(
        self,
        session: AsyncSession,
        workspace_id: UUID,
        parent_id: UUID | None,
        include_archived: bool = False,
    ) -> Sequence[DocumentNodeModel]:
        stmt = self._sibling_filter(select(DocumentNodeModel), workspace_id, parent_id)
        if not include_archived:
            stmt = stmt.where(DocumentNodeModel.is_archived.is_(False))
        stmt = stmt.order_by(DocumentNodeModel.position, DocumentNodeModel.title)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_descendants(
        self,
        session: AsyncSession,
        workspace_id: UUID,
        path: str,
    ) -> Sequence[DocumentNodeModel]:
        """
        Load every node below a materialized path.

        Args:
            session: Async database session
            workspace_id: Workspace UUID
            path: Materialized path of the ancestor

        Returns:
            Sequence of descendants ordered by depth
        """
        stmt = (
            select(DocumentNodeModel)
            .where(
                DocumentNodeModel.workspace_id == workspace_id,
                DocumentNodeModel.materialized_path.startswith(path + "/", autoescape=True),
            )
            .order_by(DocumentNodeModel.depth, DocumentNodeModel.position)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_workspace(
        self,
        session: AsyncSession,
        workspace_id: UUID,
        include_archived: bool = False,
    ) -> Sequence[DocumentNodeModel]:
        stmt = select(DocumentNodeModel).where(DocumentNodeModel.workspace_id == workspace_id)
        if not include_archived:
            stmt = stmt.where(DocumentNodeModel.is_archived.is_(False))
        stmt = stmt.order_by(DocumentNodeModel.depth, DocumentNodeModel.position)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_subtree(self, session: AsyncSession, node: DocumentNodeModel) -> list[UUID]:
        """Delete a node and its descendants, returning the removed ids."""
        stmt = select(DocumentNodeModel.id).where(
            DocumentNodeModel.workspace_id == node.workspace_id,
            or_(
                DocumentNodeModel.id == node.id,
                DocumentNodeModel.materialized_path.startswith(
                    node.materialized_path + "/", autoescape=True
                ),
            ),
        )
        ids = list((await session.execute(stmt)).scalars().all())
        if ids:
            await session.execute(
                delete(DocumentRevisionModel).where(DocumentRevisionModel.document_id.in_(ids))
            )
            await session.execute(
                delete(DocumentMetadataModel).where(DocumentMetadataModel.document_id.in_(ids))
            )
            await session.execute(delete(DocumentNodeModel).where(DocumentNodeModel.id.in_(ids)))
        return ids

    async def delete_by_workspace(self, session: AsyncSession, workspace_id: UUID) -> int:
        await session.execute(
            delete(DocumentRevisionModel).where(DocumentRevisionModel.workspace_id == workspace_id)
        )
        await session.execute(
            delete(DocumentMetadataModel).where(DocumentMetadataModel.workspace_id == workspace_id)
        )
        result = await session.execute(
            delete(DocumentNodeModel).where(DocumentNodeModel.workspace_id == workspace_id)
        )
        return result.rowcount


class DocumentRevisionCRUD(BaseCRUD[DocumentRevisionModel]):
    """CRUD operations for document revisions."""

    def __init__(self) -> None:
        super().__init__(DocumentRevisionModel)

    async def get_latest(self, session: AsyncSession, document_id: UUID) -> DocumentRevisionModel | None:
        stmt = (
            select(DocumentRevisionModel)
            .where(DocumentRevisionModel.document_id == document_id)
            .order_by(DocumentRevisionModel.revision_number.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_number(
        self,
        session: AsyncSession,
        document_id: UUID,
        revision_number: int,
    ) -> DocumentRevisionModel | None:
        stmt = select(DocumentRevisionModel).where(
            DocumentRevisionModel.document_id == document_id,
            DocumentRevisionModel.revision_number == revision_number,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> Sequence[DocumentRevisionModel]:
        stmt = (
            select(DocumentRevisionModel)
            .where(DocumentRevisionModel.document_id == document_id)
            .order_by(DocumentRevisionModel.revision_number.desc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_for_document(self, session: AsyncSession, document_id: UUID) -> int:
        stmt = select(func.count()).select_from(DocumentRevisionModel).where(
            DocumentRevisionModel.document_id == document_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())


class DocumentMetadataCRUD(BaseCRUD[DocumentMetadataModel]):
    """CRUD operations for document metadata rows (keyed by document id)."""

    def __init__(self) -> None:
        super().__init__(DocumentMetadataModel)

    async def get_for_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> DocumentMetadataModel | None:
        stmt = select(DocumentMetadataModel).where(DocumentMetadataModel.document_id == document_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


document_node_crud = DocumentNodeCRUD()
document_revision_crud = DocumentRevisionCRUD()
document_metadata_crud = DocumentMetadataCRUD()
