"""
Auth API endpoints.

Routes:
- GET /auth/me - Caller identity, roles and authorities
- GET /auth/tenants - Tenants the caller belongs to (allowed in setup mode)

Dependencies: astar_backend.api.deps, astar_backend.application.services
System role: Identity HTTP API
"""

import logging

from fastapi import APIRouter, Depends

from astar_backend.api.deps.dependencies import (
    get_auth_service,
    get_current_principal,
    require_authority,
)
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.auth_service import AuthService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.auth import PrincipalResponse
from astar_backend.models.tenant import TenantResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def map_principal_to_response(principal: AuthenticatedUser) -> PrincipalResponse:
    return PrincipalResponse(
        auth0_sub=principal.auth0_sub,
        user_id=principal.user_id,
        tenant_id=principal.tenant_id,
        email=principal.email,
        roles=list(principal.roles),
        permissions=sorted(rule.to_database_string() for rule in principal.permissions),
        authorities=sorted(principal.authorities),
        setup_mode=principal.setup_mode,
    )


@router.get("/me", response_model=PrincipalResponse)
@handle_domain_errors
async def get_me(
    principal: AuthenticatedUser = Depends(get_current_principal),
) -> PrincipalResponse:
    """Return the authenticated caller."""
    return map_principal_to_response(principal)


@router.get("/tenants", response_model=list[TenantResponse])
@handle_domain_errors
async def list_my_tenants(
    principal: AuthenticatedUser = Depends(require_authority("SCOPE_auth.view_my_tenants")),
    auth_service: AuthService = Depends(get_auth_service),
) -> list[TenantResponse]:
    """
    List the tenants the caller is an active member of.

    Raises:
        HTTPException(401): Invalid token
    """
    tenants = await auth_service.list_my_tenants(principal.auth0_sub)
    logger.info("Tenants listed for caller", extra={"count": len(tenants)})
    return [TenantResponse(**t) for t in tenants]
