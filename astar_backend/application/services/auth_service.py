"""
Authentication service.

Turns validated token claims into an AuthenticatedUser. Users and
memberships are never created here; Auth0 is the identity source and the
tenant administrator manages memberships.

Dependencies: astar_backend.boundary.db.CRUD, astar_backend.application.services.authorization_service
System role: Principal resolution
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.application.services.authorization_service import AuthorizationService
from astar_backend.application.services.tenant_service import tenant_to_dict
from astar_backend.boundary.auth.jwt_validator import TokenClaims
from astar_backend.boundary.db.CRUD.tenant_crud import membership_crud, tenant_crud, user_crud
from astar_backend.core.exceptions import AuthenticationError, PermissionDeniedError
from astar_backend.core.principal import AuthenticatedUser

logger = logging.getLogger(__name__)


class AuthService:
    """Resolves the principal of an authenticated request."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.authorization = AuthorizationService(db)

    async def resolve_principal(self, claims: TokenClaims) -> AuthenticatedUser:
        """
        Build the principal for a token.

        Args:
            claims: Claims extracted from a validated token

        Returns:
            AuthenticatedUser: Tenant member, or a setup-mode principal when
                the token carries no organization

        Raises:
            AuthenticationError: Unknown tenant, inactive tenant or unknown user
            PermissionDeniedError: User is not an active member of the tenant
        """
        if not claims.org_id:
            logger.info("Setup mode principal", extra={"auth0_sub": claims.sub})
            return AuthenticatedUser.setup(claims.sub, email=claims.email)

        tenant = await tenant_crud.get_by_org_id(self.db, claims.org_id)
        if tenant is None:
            raise AuthenticationError(f"Tenant not found for org_id: {claims.org_id}")
        if not tenant.is_active:
            raise AuthenticationError(f"Tenant is not active: {claims.org_id}")

        user = await user_crud.get_by_sub(self.db, claims.sub)
        if user is None:
            raise AuthenticationError(f"User not registered: {claims.sub}")

        membership = await membership_crud.get_membership(self.db, tenant.id, user.id)
        if membership is None or not membership.is_active:
            raise PermissionDeniedError(
                "tenant.membership",
                {"tenant_id": str(tenant.id), "user_id": str(user.id)},
            )

        roles = await self.authorization.get_user_roles(user.id, tenant.id)
        rules = await self.authorization.get_user_permissions(user.id, tenant.id)

        logger.debug(
            "Principal resolved",
            extra={
                "tenant_id": str(tenant.id),
                "user_id": str(user.id),
                "role_count": len(roles),
                "permission_count": len(rules),
            },
        )
        return AuthenticatedUser(
            auth0_sub=claims.sub,
            user_id=user.id,
            tenant_id=tenant.id,
            roles=roles,
            permissions=rules,
            email=claims.email or user.email,
        )

    async def list_my_tenants(self, auth0_sub: str) -> list[dict]:
        """Tenants the token's user is an active member of (empty for unknown users)."""
        user = await user_crud.get_by_sub(self.db, auth0_sub)
        if user is None:
            return []
        tenants = await tenant_crud.list_for_user(self.db, user.id)
        return [tenant_to_dict(t) for t in tenants]
