"""
Tenant API endpoints.

Routes:
- GET /tenants/current - Caller's tenant
- PUT /tenants/current - Rename caller's tenant
- GET /tenants/current/members - List members
- POST /tenants/current/members - Add member
- DELETE /tenants/current/members/{user_id} - Remove member

Dependencies: astar_backend.application.services, astar_backend.models
System role: Tenant management HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from astar_backend.api.deps.dependencies import get_tenant_service, require_permission
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.tenant_service import TenantService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.tenant import (
    AddMemberRequest,
    MemberResponse,
    TenantResponse,
    UpdateTenantRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.get("/current", response_model=TenantResponse)
@handle_domain_errors
async def get_current_tenant(
    user: AuthenticatedUser = Depends(require_permission("tenant.view.all")),
    tenant_service: TenantService = Depends(get_tenant_service),
) -> TenantResponse:
    """Return the tenant bound to the caller's token."""
    return TenantResponse(**await tenant_service.get_tenant(user.tenant_id))


@router.put("/current", response_model=TenantResponse)
@handle_domain_errors
async def update_current_tenant(
    request: UpdateTenantRequest,
    user: AuthenticatedUser = Depends(require_permission("tenant.edit.all")),
    tenant_service: TenantService = Depends(get_tenant_service),
) -> TenantResponse:
    logger.info("Updating tenant", extra={"tenant_id": str(user.tenant_id)})
    tenant = await tenant_service.update_name(user.tenant_id, request.name)
    return TenantResponse(**tenant)


@router.get("/current/members", response_model=list[MemberResponse])
@handle_domain_errors
async def list_members(
    include_inactive: bool = False,
    user: AuthenticatedUser = Depends(require_permission("user.view.all")),
    tenant_service: TenantService = Depends(get_tenant_service),
) -> list[MemberResponse]:
    members = await tenant_service.list_members(user.tenant_id, include_inactive=include_inactive)
    return [MemberResponse(**m) for m in members]


@router.post("/current/members", response_model=MemberResponse, status_code=201)
@handle_domain_errors
async def add_member(
    request: AddMemberRequest,
    user: AuthenticatedUser = Depends(require_permission("user.create.all")),
    tenant_service: TenantService = Depends(get_tenant_service),
) -> MemberResponse:
    """
    Add an existing user to the caller's tenant.

    Raises:
        HTTPException(404): User not found
        HTTPException(409): Already an active member
    """
    logger.info(
        "Adding tenant member",
        extra={"tenant_id": str(user.tenant_id), "user_id": str(request.user_id)},
    )
    member = await tenant_service.add_member(user.tenant_id, request.user_id)
    return MemberResponse(**member)


@router.delete("/current/members/{user_id}", status_code=204)
@handle_domain_errors
async def remove_member(
    user_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("user.delete.all")),
    tenant_service: TenantService = Depends(get_tenant_service),
) -> None:
    await tenant_service.remove_member(user.tenant_id, user_id)
    logger.info(
        "Tenant member removed",
        extra={"tenant_id": str(user.tenant_id), "user_id": str(user_id)},
    )
