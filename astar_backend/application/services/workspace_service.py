"""
Workspace service orchestrator.

Dependencies: astar_backend.boundary.db.CRUD
System role: Workspace use case orchestration
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.editor_crud import document_node_crud
from astar_backend.boundary.db.CRUD.table_crud import record_crud, table_crud
from astar_backend.boundary.db.CRUD.workspace_crud import workspace_crud
from astar_backend.boundary.db.models.workspace_model import WorkspaceModel
from astar_backend.core.exceptions import BusinessRuleError, DuplicateError, NotFoundError

logger = logging.getLogger(__name__)

MAX_WORKSPACES_PER_TENANT = 10
DEFAULT_WORKSPACE_NAME = "Default Workspace"
MAX_WORKSPACE_NAME_LENGTH = 255


def validate_workspace_name(name: str) -> str:
    if name is None or not name.strip():
        raise ValueError("Workspace name must not be blank")
    if len(name) > MAX_WORKSPACE_NAME_LENGTH:
        raise ValueError("Workspace name must not exceed 255 characters")
    return name.strip()


def workspace_to_dict(workspace: WorkspaceModel) -> dict:
    return {
        "id": workspace.id,
        "name": workspace.name,
        "description": workspace.description,
        "created_by": workspace.created_by,
        "team_id": workspace.team_id,
        "created_at": workspace.created_at,
        "updated_at": workspace.updated_at,
    }


class WorkspaceService:
    """Workspace service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_model(self, tenant_id: UUID, workspace_id: UUID) -> WorkspaceModel:
        """Workspace of the tenant; other tenants' workspaces are reported as missing."""
        workspace = await workspace_crud.get_for_tenant(self.db, tenant_id, workspace_id)
        if workspace is None:
            raise NotFoundError("Workspace", workspace_id)
        return workspace

    async def _ensure_unique_name(self, tenant_id: UUID, name: str, exclude_id: UUID | None = None) -> None:
        existing = await workspace_crud.get_by_name(self.db, tenant_id, name)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateError(f"Workspace name already exists: {name}", {"name": name})

    async def create_workspace(
        self,
        tenant_id: UUID,
        name: str,
        description: str | None = None,
        created_by: UUID | None = None,
    ) -> dict:
        """
        Create a workspace.

        Args:
            tenant_id: Owning tenant
            name: Unique per tenant
            description: Optional description
            created_by: Owner

        Returns:
            dict: Created workspace

        Raises:
            ValueError: Blank or too long name
            DuplicateError: Name taken
            BusinessRuleError: Tenant already has the maximum number of workspaces
        """
        name = validate_workspace_name(name)
        if await self.count_workspaces(tenant_id) >= MAX_WORKSPACES_PER_TENANT:
            raise BusinessRuleError(
                f"Tenant cannot have more than {MAX_WORKSPACES_PER_TENANT} workspaces",
                {"limit": MAX_WORKSPACES_PER_TENANT},
            )
        await self._ensure_unique_name(tenant_id, name)

        workspace = await workspace_crud.create(
            self.db,
            tenant_id=tenant_id,
            name=name,
            description=description,
            created_by=created_by,
        )
        logger.info(
            "Workspace created",
            extra={"tenant_id": str(tenant_id), "workspace_id": str(workspace.id)},
        )
        return workspace_to_dict(workspace)

    async def get_workspace(self, tenant_id: UUID, workspace_id: UUID) -> dict:
        return workspace_to_dict(await self.get_model(tenant_id, workspace_id))

    async def list_workspaces(self, tenant_id: UUID) -> list[dict]:
        return [workspace_to_dict(w) for w in await workspace_crud.list_for_tenant(self.db, tenant_id)]

    async def count_workspaces(self, tenant_id: UUID) -> int:
        return await workspace_crud.count_for_tenant(self.db, tenant_id)

    async def update_workspace(
        self,
        tenant_id: UUID,
        workspace_id: UUID,
        name: str | None = None,
        description: str | None = None,
    ) -> dict:
        workspace = await self.get_model(tenant_id, workspace_id)
        if name is not None:
            name = validate_workspace_name(name)
            await self._ensure_unique_name(tenant_id, name, exclude_id=workspace.id)
            workspace.name = name
        if description is not None:
            workspace.description = description
        await self.db.flush()
        return workspace_to_dict(workspace)

    async def delete_workspace(self, tenant_id: UUID, workspace_id: UUID) -> None:
        """Delete a workspace with its tables, records and documents."""
        workspace = await self.get_model(tenant_id, workspace_id)
        table_ids = await table_crud.list_ids_by_workspace(self.db, workspace.id)
        records = await record_crud.delete_by_tables(self.db, table_ids)
        await table_crud.delete_by_workspace(self.db, workspace.id)
        await document_node_crud.delete_by_workspace(self.db, workspace.id)
        await workspace_crud.delete_by_id(self.db, workspace.id)
        logger.info(
            "Workspace deleted",
            extra={
                "tenant_id": str(tenant_id),
                "workspace_id": str(workspace_id),
                "tables": len(table_ids),
                "records": records,
            },
        )

    async def get_or_create_default(self, tenant_id: UUID, created_by: UUID | None = None) -> dict:
        """Return the tenant's default workspace, creating it on first use."""
        existing = await workspace_crud.get_by_name(self.db, tenant_id, DEFAULT_WORKSPACE_NAME)
        if existing is not None:
            return workspace_to_dict(existing)
        return await self.create_workspace(
            tenant_id,
            DEFAULT_WORKSPACE_NAME,
            description="Created automatically",
            created_by=created_by,
        )

    async def transfer_ownership(self, tenant_id: UUID, workspace_id: UUID, new_owner_id: UUID) -> dict:
        workspace = await self.get_model(tenant_id, workspace_id)
        previous = workspace.created_by
        workspace.created_by = new_owner_id
        await self.db.flush()
        logger.info(
            "Workspace ownership transferred",
            extra={
                "workspace_id": str(workspace_id),
                "from_user": str(previous),
                "to_user": str(new_owner_id),
            },
        )
        return workspace_to_dict(workspace)

    async def assign_team(self, tenant_id: UUID, workspace_id: UUID, team_id: UUID | None) -> dict:
        workspace = await self.get_model(tenant_id, workspace_id)
        workspace.team_id = team_id
        await self.db.flush()
        return workspace_to_dict(workspace)
