"""
Workspace API endpoints.

Routes:
- GET /workspaces - List workspaces
- POST /workspaces - Create workspace
- GET /workspaces/default - Get or create the default workspace
- GET /workspaces/{workspace_id} - Get workspace
- PUT /workspaces/{workspace_id} - Update workspace
- DELETE /workspaces/{workspace_id} - Delete workspace and its content
- POST /workspaces/{workspace_id}/transfer - Transfer ownership
- PUT /workspaces/{workspace_id}/team - Assign team

Dependencies: astar_backend.application.services.workspace_service
System role: Workspace HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from astar_backend.api.deps.dependencies import get_workspace_service, require_permission
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.workspace_service import WorkspaceService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.workspace import (
    AssignTeamRequest,
    CreateWorkspaceRequest,
    TransferWorkspaceRequest,
    UpdateWorkspaceRequest,
    WorkspaceResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.get("", response_model=list[WorkspaceResponse])
@handle_domain_errors
async def list_workspaces(
    user: AuthenticatedUser = Depends(require_permission("workspace.view.all")),
    workspace_service: WorkspaceService = Depends(get_workspace_service),
) -> list[WorkspaceResponse]:
    workspaces = await workspace_service.list_workspaces(user.tenant_id)
    return [WorkspaceResponse(**w) for w in workspaces]


@router.post("", response_model=WorkspaceResponse, status_code=201)
@handle_domain_errors
async def create_workspace(
    request: CreateWorkspaceRequest,
    user: AuthenticatedUser = Depends(require_permission("workspace.create.all")),
    workspace_service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceResponse:
    """
    Create a workspace owned by the caller.

    Raises:
        HTTPException(409): Name already used in the tenant
        HTTPException(422): Workspace limit reached
    """
    logger.info("Creating workspace", extra={"workspace_name": request.name})
    workspace = await workspace_service.create_workspace(
        user.tenant_id,
        request.name,
        description=request.description,
        created_by=user.user_id,
    )
    logger.info("Workspace created successfully", extra={"workspace_id": str(workspace["id"])})
    return WorkspaceResponse(**workspace)


@router.get("/default", response_model=WorkspaceResponse)
@handle_domain_errors
async def get_default_workspace(
    user: AuthenticatedUser = Depends(require_permission("workspace.view.all")),
    workspace_service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceResponse:
    workspace = await workspace_service.get_or_create_default(user.tenant_id, created_by=user.user_id)
    return WorkspaceResponse(**workspace)


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
@handle_domain_errors
async def get_workspace(
    workspace_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("workspace.view.all")),
    workspace_service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceResponse:
    return WorkspaceResponse(**await workspace_service.get_workspace(user.tenant_id, workspace_id))


@router.put("/{workspace_id}", response_model=WorkspaceResponse)
@handle_domain_errors
async def update_workspace(
    workspace_id: UUID,
    request: UpdateWorkspaceRequest,
    user: AuthenticatedUser = Depends(require_permission("workspace.edit.all")),
    workspace_service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceResponse:
    workspace = await workspace_service.update_workspace(
        user.tenant_id,
        workspace_id,
        name=request.name,
        description=request.description,
    )
    return WorkspaceResponse(**workspace)


@router.delete("/{workspace_id}", status_code=204)
@handle_domain_errors
async def delete_workspace(
    workspace_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("workspace.delete.all")),
    workspace_service: WorkspaceService = Depends(get_workspace_service),
) -> None:
    """Delete a workspace together with its tables, records and documents."""
    await workspace_service.delete_workspace(user.tenant_id, workspace_id)


@router.post("/{workspace_id}/transfer", response_model=WorkspaceResponse)
@handle_domain_errors
async def transfer_workspace(
    workspace_id: UUID,
    request: TransferWorkspaceRequest,
    user: AuthenticatedUser = Depends(require_permission("workspace.manage.all")),
    workspace_service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceResponse:
    workspace = await workspace_service.transfer_ownership(
        user.tenant_id, workspace_id, request.new_owner_id
    )
    return WorkspaceResponse(**workspace)


@router.put("/{workspace_id}/team", response_model=WorkspaceResponse)
@handle_domain_errors
async def assign_workspace_team(
    workspace_id: UUID,
    request: AssignTeamRequest,
    user: AuthenticatedUser = Depends(require_permission("workspace.manage.all")),
    workspace_service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceResponse:
    workspace = await workspace_service.assign_team(user.tenant_id, workspace_id, request.team_id)
    return WorkspaceResponse(**workspace)
