"""
Folder service orchestrator.

Folders and documents share one tree per workspace. Each node stores a
sibling-unique slug, its materialized path and depth, so renames and moves
rewrite the paths of the whole subtree.

Dependencies: astar_backend.boundary.db.CRUD, astar_backend.core.slugs
System role: Editor tree orchestration
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.application.services.workspace_service import WorkspaceService
from astar_backend.boundary.db.CRUD.editor_crud import document_node_crud
from astar_backend.boundary.db.models.editor_model import DocumentNodeModel, DocumentNodeType
from astar_backend.core.exceptions import ConflictError, NotFoundError
from astar_backend.core.slugs import (
    MAX_SLUG_ATTEMPTS,
    NODE_POSITION_STEP,
    build_path,
    parent_path,
    rebase_path,
    slug_candidates,
    slugify,
)

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255


def validate_title(title: str, kind: str = "Folder") -> str:
    if title is None or not title.strip():
        raise ValueError(f"{kind} title must not be blank")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValueError(f"{kind} title must not exceed 255 characters")
    return title.strip()


def node_to_dict(node: DocumentNodeModel) -> dict:
    return {
        "id": node.id,
        "workspace_id": node.workspace_id,
        "parent_id": node.parent_id,
        "type": node.type.value,
        "title": node.title,
        "slug": node.slug,
        "path": node.materialized_path,
        "depth": node.depth,
        "position": node.position,
        "is_archived": node.is_archived,
        "created_by": node.created_by,
        "updated_by": node.updated_by,
        "created_at": node.created_at,
        "updated_at": node.updated_at,
    }


class FolderService:
    """Folder operations and the tree helpers documents reuse."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.workspaces = WorkspaceService(db)

    async def get_node(
        self,
        tenant_id: UUID,
        node_id: UUID,
        node_type: DocumentNodeType | None = None,
    ) -> DocumentNodeModel:
        node = await document_node_crud.get_for_tenant(self.db, tenant_id, node_id)
        if node is None or (node_type is not None and node.type is not node_type):
            label = "Document" if node_type is DocumentNodeType.DOCUMENT else "Folder"
            raise NotFoundError(label, node_id)
        return node

    async def resolve_parent(
        self,
        tenant_id: UUID,
        workspace_id: UUID,
        parent_id: UUID | None,
    ) -> DocumentNodeModel | None:
        """
        Load the parent folder of a new or moved node.

        Raises:
            NotFoundError: Parent missing
            ValueError: Parent is a document or lives in another workspace
        """
        if parent_id is None:
            return None
        parent = await document_node_crud.get_for_tenant(self.db, tenant_id, parent_id)
        if parent is None:
            raise NotFoundError("Folder", parent_id)
        if parent.type is not DocumentNodeType.FOLDER:
            raise ValueError("Parent must be a folder")
        if parent.workspace_id != workspace_id:
            raise ValueError("Parent folder belongs to a different workspace")
        return parent

    async def unique_slug(
        self,
        workspace_id: UUID,
        parent_id: UUID | None,
        title: str,
        fallback_prefix: str,
        exclude_id: UUID | None = None,
    ) -> str:
        """First free slug among `base`, `base-2`, ... for the given siblings."""
        base = slugify(title, fallback_prefix)
        for candidate in slug_candidates(base):
            if not await document_node_crud.slug_exists(
                self.db, workspace_id, parent_id, candidate, exclude_id=exclude_id
            ):
                return candidate
        raise ConflictError(
            f"Could not generate a unique slug for '{title}' after {MAX_SLUG_ATTEMPTS} attempts",
            {"slug": base},
        )

    async def next_position(self, workspace_id: UUID, parent_id: UUID | None) -> float:
        current = await document_node_crud.max_sibling_position(self.db, workspace_id, parent_id)
        return (current or 0.0) + NODE_POSITION_STEP

    async def _rewrite_subtree(
        self,
        node: DocumentNodeModel,
        old_path: str,
        depth_delta: int,
    ) -> int:
        descendants = await document_node_crud.list_descendants(self.db, node.workspace_id, old_path)
        for child in descendants:
            child.materialized_path = rebase_path(child.materialized_path, old_path, node.materialized_path)
            child.depth += depth_delta
        return len(descendants)

    async def create_folder(
        self,
        tenant_id: UUID,
        workspace_id: UUID,
        title: str,
        parent_id: UUID | None = None,
        user_id: UUID | None = None,
    ) -> dict:
        """
        Create a folder.

        Args:
            tenant_id: Caller's tenant
            workspace_id: Workspace holding the tree
            title: Folder title
            parent_id: Parent folder (root when None)
            user_id: Author

        Returns:
            dict: Created folder
        """
        await self.workspaces.get_model(tenant_id, workspace_id)
        title = validate_title(title)
        parent = await self.resolve_parent(tenant_id, workspace_id, parent_id)
        slug = await self.unique_slug(workspace_id, parent_id, title, "folder")

        folder = await document_node_crud.create(
            self.db,
            tenant_id=tenant_id,
            workspace_id=workspace_id,
            parent_id=parent_id,
            type=DocumentNodeType.FOLDER,
            title=title,
            slug=slug,
            materialized_path=build_path(parent.materialized_path if parent else None, slug),
            depth=parent.depth + 1 if parent else 0,
            position=await self.next_position(workspace_id, parent_id),
            is_archived=False,
            created_by=user_id,
            updated_by=user_id,
        )
        logger.info(
            "Folder created",
            extra={"workspace_id": str(workspace_id), "folder_id": str(folder.id), "path": folder.materialized_path},
        )
        return node_to_dict(folder)

    async def get_folder(self, tenant_id: UUID, folder_id: UUID) -> dict:
        return node_to_dict(await self.get_node(tenant_id, folder_id, DocumentNodeType.FOLDER))

    async def rename_folder(
        self,
        tenant_id: UUID,
        folder_id: UUID,
        title: str,
        user_id: UUID | None = None,
    ) -> dict:
        folder = await self.get_node(tenant_id, folder_id, DocumentNodeType.FOLDER)
        title = validate_title(title)
        old_path = folder.materialized_path
        slug = await self.unique_slug(folder.workspace_id, folder.parent_id, title, "folder", exclude_id=folder.id)

        folder.title = title
        folder.slug = slug
        folder.materialized_path = build_path(parent_path(old_path), slug)
        folder.updated_by = user_id
        if folder.materialized_path != old_path:
            await self._rewrite_subtree(folder, old_path, 0)
        await self.db.flush()
        return node_to_dict(folder)

    async def move_folder(
        self,
        tenant_id: UUID,
        folder_id: UUID,
        new_parent_id: UUID | None,
        user_id: UUID | None = None,
    ) -> dict:
        """
        Move a folder (and its subtree) under another folder or to the root.

        Raises:
            ValueError: Target is the folder itself or one of its descendants
            ConflictError: Target already has a child with the same slug
        """
        folder = await self.get_node(tenant_id, folder_id, DocumentNodeType.FOLDER)
        if new_parent_id == folder.id:
            raise ValueError("A folder cannot be moved into itself")
        parent = await self.resolve_parent(tenant_id, folder.workspace_id, new_parent_id)
        if parent is not None and parent.materialized_path.startswith(folder.materialized_path + "/"):
            raise ValueError("A folder cannot be moved into one of its descendants")
        if new_parent_id == folder.parent_id:
            return node_to_dict(folder)
        if await document_node_crud.slug_exists(
            self.db, folder.workspace_id, new_parent_id, folder.slug, exclude_id=folder.id
        ):
            raise ConflictError(
                f"Target folder already contains an item named '{folder.slug}'",
                {"slug": folder.slug},
            )

        old_path = folder.materialized_path
        new_depth = parent.depth + 1 if parent else 0
        depth_delta = new_depth - folder.depth

        folder.parent_id = new_parent_id
        folder.materialized_path = build_path(parent.materialized_path if parent else None, folder.slug)
        folder.depth = new_depth
        folder.position = await self.next_position(folder.workspace_id, new_parent_id)
        folder.updated_by = user_id
        moved = await self._rewrite_subtree(folder, old_path, depth_delta)
        await self.db.flush()
        logger.info(
            "Folder moved",
            extra={"folder_id": str(folder_id), "path": folder.materialized_path, "descendants": moved},
        )
        return node_to_dict(folder)

    async def set_archived(
        self,
        tenant_id: UUID,
        folder_id: UUID,
        archived: bool,
        user_id: UUID | None = None,
    ) -> dict:
        """Archive or unarchive a folder together with everything below it."""
        folder = await self.get_node(tenant_id, folder_id, DocumentNodeType.FOLDER)
        folder.is_archived = archived
        folder.updated_by = user_id
        for child in await document_node_crud.list_descendants(
            self.db, folder.workspace_id, folder.materialized_path
        ):
            child.is_archived = archived
        await self.db.flush()
        return node_to_dict(folder)

    async def delete_folder(self, tenant_id: UUID, folder_id: UUID) -> int:
        folder = await self.get_node(tenant_id, folder_id, DocumentNodeType.FOLDER)
        removed = await document_node_crud.delete_subtree(self.db, folder)
        logger.info("Folder deleted", extra={"folder_id": str(folder_id), "nodes": len(removed)})
        return len(removed)

    async def list_children(
        self,
        tenant_id: UUID,
        workspace_id: UUID,
        parent_id: UUID | None = None,
        include_archived: bool = False,
    ) -> list[dict]:
        await self.workspaces.get_model(tenant_id, workspace_id)
        if parent_id is not None:
            await self.resolve_parent(tenant_id, workspace_id, parent_id)
        children = await document_node_crud.list_children(
            self.db, workspace_id, parent_id, include_archived=include_archived
        )
        return [node_to_dict(c) for c in children]

    async def get_tree(
        self,
        tenant_id: UUID,
        workspace_id: UUID,
        include_archived: bool = False,
    ) -> list[dict]:
        """Nested tree of the workspace; each node carries a `children` list."""
        await self.workspaces.get_model(tenant_id, workspace_id)
        nodes = await document_node_crud.list_workspace(self.db, workspace_id, include_archived)

        by_id: dict[UUID, dict] = {}
        roots: list[dict] = []
        for node in nodes:
            by_id[node.id] = {**node_to_dict(node), "children": []}
        for node in nodes:
            entry = by_id[node.id]
            parent = by_id.get(node.parent_id) if node.parent_id else None
            if parent is not None:
                parent["children"].append(entry)
            elif node.parent_id is None:
                roots.append(entry)
        return roots
