"""
User role assignment endpoints.

Routes:
- GET /users/me/permissions - Caller's roles and effective permissions
- GET /users/{user_id}/roles - Roles of a member
- POST /users/{user_id}/roles - Assign role
- PUT /users/{user_id}/roles - Replace member's roles
- DELETE /users/{user_id}/roles/{role_id} - Unassign role

Dependencies: astar_backend.application.services.role_service
System role: Role assignment HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from astar_backend.api.deps.dependencies import (
    get_current_user,
    get_user_role_service,
    require_permission,
)
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.role_service import UserRoleService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.auth import PermissionsResponse
from astar_backend.models.role import AssignRoleRequest, SyncUserRolesRequest, UserRoleResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["user-roles"])


@router.get("/me/permissions", response_model=PermissionsResponse)
@handle_domain_errors
async def get_my_permissions(
    user: AuthenticatedUser = Depends(get_current_user),
) -> PermissionsResponse:
    """Return the permissions resolved for the caller at authentication."""
    return PermissionsResponse(
        user_id=user.user_id,
        tenant_id=user.tenant_id,
        roles=list(user.roles),
        permissions=sorted(rule.to_database_string() for rule in user.permissions),
    )


@router.get("/{user_id}/roles", response_model=list[UserRoleResponse])
@handle_domain_errors
async def list_user_roles(
    user_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("user.view.all")),
    user_role_service: UserRoleService = Depends(get_user_role_service),
) -> list[UserRoleResponse]:
    roles = await user_role_service.list_user_roles(user.tenant_id, user_id)
    return [UserRoleResponse(**r) for r in roles]


@router.post("/{user_id}/roles", response_model=UserRoleResponse, status_code=201)
@handle_domain_errors
async def assign_role(
    user_id: UUID,
    request: AssignRoleRequest,
    user: AuthenticatedUser = Depends(require_permission("role.manage.all")),
    user_role_service: UserRoleService = Depends(get_user_role_service),
) -> UserRoleResponse:
    role = await user_role_service.assign_role(
        user.tenant_id, user_id, request.role_id, assigned_by=user.user_id
    )
    return UserRoleResponse(**role)


@router.put("/{user_id}/roles", response_model=list[UserRoleResponse])
@handle_domain_errors
async def sync_user_roles(
    user_id: UUID,
    request: SyncUserRolesRequest,
    user: AuthenticatedUser = Depends(require_permission("role.manage.all")),
    user_role_service: UserRoleService = Depends(get_user_role_service),
) -> list[UserRoleResponse]:
    roles = await user_role_service.sync_user_roles(
        user.tenant_id, user_id, request.role_ids, assigned_by=user.user_id
    )
    return [UserRoleResponse(**r) for r in roles]


@router.delete("/{user_id}/roles/{role_id}", status_code=204)
@handle_domain_errors
async def unassign_role(
    user_id: UUID,
    role_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("role.manage.all")),
    user_role_service: UserRoleService = Depends(get_user_role_service),
) -> None:
    await user_role_service.unassign_role(user.tenant_id, user_id, role_id)
