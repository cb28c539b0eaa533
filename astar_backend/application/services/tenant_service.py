"""
Tenant service orchestrator.

Coordinates tenant lifecycle and membership operations.

Dependencies: astar_backend.boundary.db.CRUD, astar_backend.core.tenancy
System role: Tenancy use case orchestration
"""

import logging
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.tenant_crud import membership_crud, tenant_crud, user_crud
from astar_backend.boundary.db.models.role_model import UserRoleModel
from astar_backend.boundary.db.models.tenant_model import TenantModel
from astar_backend.core.exceptions import ConflictError, DuplicateError, NotFoundError
from astar_backend.core.tenancy import validate_tenant_name, validate_tenant_slug

logger = logging.getLogger(__name__)


def tenant_to_dict(tenant: TenantModel) -> dict:
    return {
        "id": tenant.id,
        "slug": tenant.slug,
        "name": tenant.name,
        "auth0_org_id": tenant.auth0_org_id,
        "is_active": tenant.is_active,
        "created_at": tenant.created_at,
        "updated_at": tenant.updated_at,
    }


class TenantService:
    """Tenant service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize tenant service with async database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db

    async def _get_model(self, tenant_id: UUID) -> TenantModel:
        tenant = await tenant_crud.get_by_id(self.db, tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant", tenant_id)
        return tenant

    async def create_tenant(self, slug: str, name: str, auth0_org_id: str | None = None) -> dict:
        """
        Create a tenant.

        Args:
            slug: Unique URL-safe identifier
            name: Display name
            auth0_org_id: Auth0 organization mapped to the tenant

        Returns:
            dict: Created tenant

        Raises:
            ValueError: Invalid slug or name
            DuplicateError: Slug already taken
        """
        slug = validate_tenant_slug(slug)
        name = validate_tenant_name(name)
        if await tenant_crud.get_by_slug(self.db, slug):
            raise DuplicateError(f"Tenant slug already exists: {slug}", {"slug": slug})

        tenant = await tenant_crud.create(
            self.db, slug=slug, name=name, auth0_org_id=auth0_org_id, is_active=True
        )
        logger.info("Tenant created", extra={"tenant_id": str(tenant.id), "slug": slug})
        return tenant_to_dict(tenant)

    async def get_tenant(self, tenant_id: UUID) -> dict:
        return tenant_to_dict(await self._get_model(tenant_id))

    async def get_by_org_id(self, org_id: str) -> dict:
        tenant = await tenant_crud.get_by_org_id(self.db, org_id)
        if tenant is None:
            raise NotFoundError("Tenant", org_id)
        return tenant_to_dict(tenant)

    async def list_user_tenants(self, user_id: UUID) -> list[dict]:
        tenants = await tenant_crud.list_for_user(self.db, user_id)
        return [tenant_to_dict(t) for t in tenants]

    async def update_name(self, tenant_id: UUID, name: str) -> dict:
        tenant = await self._get_model(tenant_id)
        tenant.name = validate_tenant_name(name)
        await self.db.flush()
        logger.info("Tenant renamed", extra={"tenant_id": str(tenant_id)})
        return tenant_to_dict(tenant)

    async def set_active(self, tenant_id: UUID, active: bool) -> dict:
        """Activate or deactivate a tenant. Inactive tenants cannot sign in."""
        tenant = await self._get_model(tenant_id)
        tenant.is_active = active
        await self.db.flush()
        logger.info(
            "Tenant activation changed",
            extra={"tenant_id": str(tenant_id), "is_active": active},
        )
        return tenant_to_dict(tenant)

    async def add_member(self, tenant_id: UUID, user_id: UUID) -> dict:
        """
        Add an existing user to a tenant.

        A deactivated membership is reactivated.

        Raises:
            NotFoundError: Tenant or user missing
            ConflictError: User already an active member
        """
        await self._get_model(tenant_id)
        user = await user_crud.get_by_id(self.db, user_id)
        if user is None:
            raise NotFoundError("User", user_id)

        membership = await membership_crud.get_membership(self.db, tenant_id, user_id)
        if membership is not None and membership.is_active:
            raise ConflictError(
                "User is already a member of this tenant",
                {"tenant_id": str(tenant_id), "user_id": str(user_id)},
            )
        if membership is None:
            membership = await membership_crud.create(
                self.db, tenant_id=tenant_id, user_id=user_id, is_active=True
            )
        else:
            membership.is_active = True
            await self.db.flush()

        logger.info(
            "Member added",
            extra={"tenant_id": str(tenant_id), "user_id": str(user_id)},
        )
        return {
            "user_id": user.id,
            "email": user.email,
            "display_name": user.display_name,
            "is_active": membership.is_active,
            "joined_at": membership.joined_at,
        }

    async def remove_member(self, tenant_id: UUID, user_id: UUID) -> None:
        """Remove a membership and the user's role assignments in the tenant."""
        membership = await membership_crud.get_membership(self.db, tenant_id, user_id)
        if membership is None:
            raise NotFoundError("Membership", user_id)
        await self.db.execute(
            delete(UserRoleModel).where(
                UserRoleModel.tenant_id == tenant_id,
                UserRoleModel.user_id == user_id,
            )
        )
        await membership_crud.delete_by_id(self.db, membership.id)
        logger.info(
            "Member removed",
            extra={"tenant_id": str(tenant_id), "user_id": str(user_id)},
        )

    async def list_members(self, tenant_id: UUID, include_inactive: bool = False) -> list[dict]:
        rows = await membership_crud.list_members(self.db, tenant_id, include_inactive)
        return [
            {
                "user_id": user.id,
                "email": user.email,
                "display_name": user.display_name,
                "is_active": membership.is_active,
                "joined_at": membership.joined_at,
            }
            for membership, user in rows
        ]
