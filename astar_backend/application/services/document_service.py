"""
Document service orchestrator.

Documents are leaves of the workspace tree. Every content change appends a
revision; the node keeps title, slug and path, the metadata row keeps flags.

Dependencies: astar_backend.application.services.folder_service, astar_backend.boundary.db.CRUD
System role: Editor document orchestration
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.application.services.folder_service import FolderService, node_to_dict, validate_title
from astar_backend.boundary.db.CRUD.editor_crud import (
    document_metadata_crud,
    document_node_crud,
    document_revision_crud,
)
from astar_backend.boundary.db.models.editor_model import (
    DocumentMetadataModel,
    DocumentNodeType,
    DocumentRevisionModel,
)
from astar_backend.core.exceptions import NotFoundError
from astar_backend.core.slugs import build_path, checksum, parent_path

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "text/markdown"


def revision_to_dict(revision: DocumentRevisionModel, include_content: bool = True) -> dict:
    data = {
        "id": revision.id,
        "document_id": revision.document_id,
        "revision_number": revision.revision_number,
        "title": revision.title_snapshot,
        "author_id": revision.author_id,
        "summary": revision.summary,
        "content_type": revision.content_type,
        "size_bytes": revision.size_bytes,
        "checksum": revision.checksum,
        "created_at": revision.created_at,
    }
    if include_content:
        data["content"] = revision.content
    return data


def metadata_to_dict(metadata: DocumentMetadataModel | None) -> dict:
    if metadata is None:
        return {"metadata": {}, "tags": [], "is_published": False, "is_favorited": False}
    return {
        "metadata": metadata.metadata_json or {},
        "tags": metadata.tags or [],
        "is_published": metadata.is_published,
        "is_favorited": metadata.is_favorited,
    }


class DocumentService:
    """Document service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.folders = FolderService(db)

    async def _append_revision(
        self,
        document,
        content: str | None,
        content_type: str,
        summary: str | None,
        author_id: UUID | None,
    ) -> DocumentRevisionModel:
        latest = await document_revision_crud.get_latest(self.db, document.id)
        number = latest.revision_number + 1 if latest else 1
        return await document_revision_crud.create(
            self.db,
            tenant_id=document.tenant_id,
            workspace_id=document.workspace_id,
            document_id=document.id,
            revision_number=number,
            title_snapshot=document.title,
            author_id=author_id,
            summary=summary,
            content=content,
            content_type=content_type,
            size_bytes=len(content.encode("utf-8")) if content is not None else None,
            checksum=checksum(content),
        )

    async def _detail(self, document) -> dict:
        latest = await document_revision_crud.get_latest(self.db, document.id)
        metadata = await document_metadata_crud.get_for_document(self.db, document.id)
        return {
            **node_to_dict(document),
            "latest_revision": revision_to_dict(latest) if latest else None,
            "revision_count": await document_revision_crud.count_for_document(self.db, document.id),
            **metadata_to_dict(metadata),
        }

    async def create_document(
        self,
        tenant_id: UUID,
        workspace_id: UUID,
        title: str,
        content: str | None = None,
        parent_id: UUID | None = None,
        content_type: str = DEFAULT_CONTENT_TYPE,
        summary: str | None = None,
        user_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
        tags: list[str] | None = None,
    ) -> dict:
        """
        Create a document with its first revision and metadata row.

        Args:
            tenant_id: Caller's tenant
            workspace_id: Workspace holding the tree
            title: Document title
            content: Initial body
            parent_id: Parent folder (root when None)
            content_type: MIME type of the body
            summary: Revision summary
            user_id: Author
            metadata: Free-form metadata
            tags: Tag names attached to the document

        Returns:
            dict: Document detail including revision 1
        """
        await self.folders.workspaces.get_model(tenant_id, workspace_id)
        title = validate_title(title, "Document")
        parent = await self.folders.resolve_parent(tenant_id, workspace_id, parent_id)
        slug = await self.folders.unique_slug(workspace_id, parent_id, title, "doc")

        document = await document_node_crud.create(
            self.db,
            tenant_id=tenant_id,
            workspace_id=workspace_id,
            parent_id=parent_id,
            type=DocumentNodeType.DOCUMENT,
            title=title,
            slug=slug,
            materialized_path=build_path(parent.materialized_path if parent else None, slug),
            depth=parent.depth + 1 if parent else 0,
            position=await self.folders.next_position(workspace_id, parent_id),
            is_archived=False,
            created_by=user_id,
            updated_by=user_id,
        )
        await self._append_revision(document, content, content_type, summary, user_id)
        await document_metadata_crud.create(
            self.db,
            document_id=document.id,
            tenant_id=tenant_id,
            workspace_id=workspace_id,
            metadata_json=metadata or {},
            tags=list(tags or []),
            is_published=False,
            is_favorited=False,
        )
        logger.info(
            "Document created",
            extra={"workspace_id": str(workspace_id), "document_id": str(document.id)},
        )
        return await self._detail(document)

    async def get_document(self, tenant_id: UUID, document_id: UUID) -> dict:
        document = await self.folders.get_node(tenant_id, document_id, DocumentNodeType.DOCUMENT)
        return await self._detail(document)

    async def update_document(
        self,
        tenant_id: UUID,
        document_id: UUID,
        title: str | None = None,
        content: str | None = None,
        content_type: str | None = None,
        summary: str | None = None,
        user_id: UUID | None = None,
    ) -> dict:
        """
        Save a new revision; a changed title also regenerates the slug.

        Content left as None carries over from the latest revision.
        """
        document = await self.folders.get_node(tenant_id, document_id, DocumentNodeType.DOCUMENT)
        latest = await document_revision_crud.get_latest(self.db, document.id)

        if title is not None:
            title = validate_title(title, "Document")
            if title != document.title:
                slug = await self.folders.unique_slug(
                    document.workspace_id, document.parent_id, title, "doc", exclude_id=document.id
                )
                document.title = title
                document.slug = slug
                document.materialized_path = build_path(parent_path(document.materialized_path), slug)

        if content is None and latest is not None:
            content = latest.content
        if content_type is None:
            content_type = latest.content_type if latest else DEFAULT_CONTENT_TYPE

        document.updated_by = user_id
        await self._append_revision(document, content, content_type, summary, user_id)
        logger.info("Document updated", extra={"document_id": str(document_id)})
        return await self._detail(document)

    async def update_metadata(
        self,
        tenant_id: UUID,
        document_id: UUID,
        metadata: dict[str, Any] | None = None,
        tags: list[str] | None = None,
        is_published: bool | None = None,
        is_favorited: bool | None = None,
    ) -> dict:
        document = await self.folders.get_node(tenant_id, document_id, DocumentNodeType.DOCUMENT)
        row = await document_metadata_crud.get_for_document(self.db, document.id)
        if row is None:
            row = await document_metadata_crud.create(
                self.db,
                document_id=document.id,
                tenant_id=tenant_id,
                workspace_id=document.workspace_id,
                metadata_json={},
                tags=[],
                is_published=False,
                is_favorited=False,
            )
        if metadata is not None:
            row.metadata_json = dict(metadata)
        if tags is not None:
            row.tags = list(tags)
        if is_published is not None:
            row.is_published = is_published
        if is_favorited is not None:
            row.is_favorited = is_favorited
        await self.db.flush()
        return await self._detail(document)

    async def list_revisions(self, tenant_id: UUID, document_id: UUID) -> list[dict]:
        """Revision summaries, newest first, without bodies."""
        document = await self.folders.get_node(tenant_id, document_id, DocumentNodeType.DOCUMENT)
        revisions = await document_revision_crud.list_for_document(self.db, document.id)
        return [revision_to_dict(r, include_content=False) for r in revisions]

    async def get_revision(self, tenant_id: UUID, document_id: UUID, revision_number: int) -> dict:
        document = await self.folders.get_node(tenant_id, document_id, DocumentNodeType.DOCUMENT)
        revision = await document_revision_crud.get_by_number(self.db, document.id, revision_number)
        if revision is None:
            raise NotFoundError("Revision", f"{document_id}#{revision_number}")
        return revision_to_dict(revision)

    async def move_document(
        self,
        tenant_id: UUID,
        document_id: UUID,
        new_parent_id: UUID | None,
        user_id: UUID | None = None,
    ) -> dict:
        document = await self.folders.get_node(tenant_id, document_id, DocumentNodeType.DOCUMENT)
        parent = await self.folders.resolve_parent(tenant_id, document.workspace_id, new_parent_id)
        if new_parent_id != document.parent_id:
            slug = await self.folders.unique_slug(
                document.workspace_id, new_parent_id, document.title, "doc", exclude_id=document.id
            )
            document.parent_id = new_parent_id
            document.slug = slug
            document.materialized_path = build_path(parent.materialized_path if parent else None, slug)
            document.depth = parent.depth + 1 if parent else 0
            document.position = await self.folders.next_position(document.workspace_id, new_parent_id)
            document.updated_by = user_id
            await self.db.flush()
        return await self._detail(document)

    async def set_archived(self, tenant_id: UUID, document_id: UUID, archived: bool) -> dict:
        document = await self.folders.get_node(tenant_id, document_id, DocumentNodeType.DOCUMENT)
        document.is_archived = archived
        await self.db.flush()
        return await self._detail(document)

    async def delete_document(self, tenant_id: UUID, document_id: UUID) -> None:
        document = await self.folders.get_node(tenant_id, document_id, DocumentNodeType.DOCUMENT)
        await document_node_crud.delete_subtree(self.db, document)
        logger.info("Document deleted", extra={"document_id": str(document_id)})
