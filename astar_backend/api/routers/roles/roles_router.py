"""
Role API endpoints.

Routes:
- GET /roles - List roles
- POST /roles - Create role
- GET /roles/search - Search roles by name
- PUT /roles/reorder - Reorder roles
- GET /roles/export - Export role definitions
- POST /roles/import - Import role definitions
- GET /roles/{role_id} - Get role
- PUT /roles/{role_id} - Update role
- DELETE /roles/{role_id} - Delete role
- POST /roles/{role_id}/duplicate - Copy role with its permissions
- GET/POST/PUT/DELETE /roles/{role_id}/permissions - Manage permission rules

Dependencies: astar_backend.application.services.role_service
System role: RBAC HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from astar_backend.api.deps.dependencies import (
    get_role_service,
    get_user_role_service,
    require_permission,
)
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.role_service import RoleService, UserRoleService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.role import (
    CreateRoleRequest,
    DuplicateRoleRequest,
    ImportRolesRequest,
    ImportRolesResponse,
    PermissionListRequest,
    ReorderRolesRequest,
    RoleExportItem,
    RoleResponse,
    UpdateRoleRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=list[RoleResponse])
@handle_domain_errors
async def list_roles(
    user: AuthenticatedUser = Depends(require_permission("role.view.all")),
    role_service: RoleService = Depends(get_role_service),
) -> list[RoleResponse]:
    roles = await role_service.list_roles(user.tenant_id)
    return [RoleResponse(**r) for r in roles]


@router.post("", response_model=RoleResponse, status_code=201)
@handle_domain_errors
async def create_role(
    request: CreateRoleRequest,
    user: AuthenticatedUser = Depends(require_permission("role.create.all")),
    role_service: RoleService = Depends(get_role_service),
) -> RoleResponse:
    """
    Create a role with an initial permission set.

    Raises:
        HTTPException(400): Invalid name, colour or permission string
        HTTPException(409): Name already used in the tenant
    """
    logger.info("Creating role", extra={"role_name": request.name})
    role = await role_service.create_role(
        user.tenant_id,
        name=request.name,
        display_name=request.display_name,
        color=request.color,
        position=request.position,
        permissions=request.permissions,
    )
    logger.info("Role created successfully", extra={"role_id": str(role["id"])})
    return RoleResponse(**role)


@router.get("/search", response_model=list[RoleResponse])
@handle_domain_errors
async def search_roles(
    q: str = Query("", description="Substring of name or display name"),
    user: AuthenticatedUser = Depends(require_permission("role.view.all")),
    role_service: RoleService = Depends(get_role_service),
) -> list[RoleResponse]:
    return [RoleResponse(**r) for r in await role_service.search_roles(user.tenant_id, q)]


@router.put("/reorder", response_model=list[RoleResponse])
@handle_domain_errors
async def reorder_roles(
    request: ReorderRolesRequest,
    user: AuthenticatedUser = Depends(require_permission("role.edit.all")),
    role_service: RoleService = Depends(get_role_service),
) -> list[RoleResponse]:
    roles = await role_service.reorder_roles(user.tenant_id, request.role_ids)
    return [RoleResponse(**r) for r in roles]


@router.get("/export", response_model=list[RoleExportItem])
@handle_domain_errors
async def export_roles(
    user: AuthenticatedUser = Depends(require_permission("role.export.all")),
    role_service: RoleService = Depends(get_role_service),
) -> list[RoleExportItem]:
    return [RoleExportItem(**r) for r in await role_service.export_roles(user.tenant_id)]


@router.post("/import", response_model=ImportRolesResponse)
@handle_domain_errors
async def import_roles(
    request: ImportRolesRequest,
    user: AuthenticatedUser = Depends(require_permission("role.import.all")),
    role_service: RoleService = Depends(get_role_service),
) -> ImportRolesResponse:
    """Create roles from an export. Existing names are reported as skipped."""
    result = await role_service.import_roles(
        user.tenant_id, [item.model_dump() for item in request.roles]
    )
    return ImportRolesResponse(**result)


@router.get("/{role_id}", response_model=RoleResponse)
@handle_domain_errors
async def get_role(
    role_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("role.view.all")),
    role_service: RoleService = Depends(get_role_service),
) -> RoleResponse:
    return RoleResponse(**await role_service.get_role(user.tenant_id, role_id))


@router.put("/{role_id}", response_model=RoleResponse)
@handle_domain_errors
async def update_role(
    role_id: UUID,
    request: UpdateRoleRequest,
    user: AuthenticatedUser = Depends(require_permission("role.edit.all")),
    role_service: RoleService = Depends(get_role_service),
) -> RoleResponse:
    role = await role_service.update_role(
        user.tenant_id,
        role_id,
        display_name=request.display_name,
        color=request.color,
        position=request.position,
    )
    return RoleResponse(**role)


@router.delete("/{role_id}", status_code=204)
@handle_domain_errors
async def delete_role(
    role_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("role.delete.all")),
    role_service: RoleService = Depends(get_role_service),
) -> None:
    """
    Delete a role.

    Raises:
        HTTPException(404): Role not found
        HTTPException(409): Role still assigned to users
        HTTPException(422): System role
    """
    await role_service.delete_role(user.tenant_id, role_id)


@router.post("/{role_id}/duplicate", response_model=RoleResponse, status_code=201)
@handle_domain_errors
async def duplicate_role(
    role_id: UUID,
    request: DuplicateRoleRequest | None = None,
    user: AuthenticatedUser = Depends(require_permission("role.create.all")),
    role_service: RoleService = Depends(get_role_service),
) -> RoleResponse:
    request = request or DuplicateRoleRequest()
    role = await role_service.duplicate_role(
        user.tenant_id,
        role_id,
        new_name=request.new_name,
        display_name=request.display_name,
    )
    return RoleResponse(**role)


@router.get("/{role_id}/permissions", response_model=list[str])
@handle_domain_errors
async def list_role_permissions(
    role_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("role.view.all")),
    role_service: RoleService = Depends(get_role_service),
) -> list[str]:
    return await role_service.list_permissions(user.tenant_id, role_id)


@router.post("/{role_id}/permissions", response_model=list[str])
@handle_domain_errors
async def grant_role_permissions(
    role_id: UUID,
    request: PermissionListRequest,
    user: AuthenticatedUser = Depends(require_permission("role.edit.all")),
    role_service: RoleService = Depends(get_role_service),
) -> list[str]:
    logger.info(
        "Granting permissions",
        extra={"role_id": str(role_id), "permission_count": len(request.permissions)},
    )
    return await role_service.grant_permissions(user.tenant_id, role_id, request.permissions)


@router.put("/{role_id}/permissions", response_model=list[str])
@handle_domain_errors
async def sync_role_permissions(
    role_id: UUID,
    request: PermissionListRequest,
    user: AuthenticatedUser = Depends(require_permission("role.edit.all")),
    role_service: RoleService = Depends(get_role_service),
) -> list[str]:
    return await role_service.sync_permissions(user.tenant_id, role_id, request.permissions)


@router.delete("/{role_id}/permissions", response_model=list[str])
@handle_domain_errors
async def revoke_role_permission(
    role_id: UUID,
    rule: str = Query(..., description="Permission string to revoke"),
    user: AuthenticatedUser = Depends(require_permission("role.edit.all")),
    role_service: RoleService = Depends(get_role_service),
) -> list[str]:
    return await role_service.revoke_permission(user.tenant_id, role_id, rule)


@router.get("/{role_id}/users", response_model=list[UUID])
@handle_domain_errors
async def list_role_users(
    role_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("role.view.all")),
    user_role_service: UserRoleService = Depends(get_user_role_service),
) -> list[UUID]:
    return await user_role_service.list_role_users(user.tenant_id, role_id)
