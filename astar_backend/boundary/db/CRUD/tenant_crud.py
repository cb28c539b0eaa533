"""
Tenant, user and membership CRUD operations.

Dependencies: sqlalchemy, astar_backend.boundary.db.models
System role: Tenancy persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.models.tenant_model import (
    TenantMembershipModel,
    TenantModel,
    UserModel,
)


class TenantCRUD(BaseCRUD[TenantModel]):
    """CRUD operations for TenantModel."""

    def __init__(self) -> None:
        super().__init__(TenantModel)

    async def get_by_slug(self, session: AsyncSession, slug: str) -> TenantModel | None:
        result = await session.execute(select(TenantModel).where(TenantModel.slug == slug))
        return result.scalar_one_or_none()

    async def get_by_org_id(self, session: AsyncSession, org_id: str) -> TenantModel | None:
        """
        Resolve the tenant mapped to an Auth0 organization.

        Args:
            session: Async database session
            org_id: Auth0 organization id from the token

        Returns:
            TenantModel if mapped, None otherwise
        """
        result = await session.execute(
            select(TenantModel).where(TenantModel.auth0_org_id == org_id)
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, session: AsyncSession, user_id: UUID) -> Sequence[TenantModel]:
        stmt = (
            select(TenantModel)
            .join(TenantMembershipModel, TenantMembershipModel.tenant_id == TenantModel.id)
            .where(
                TenantMembershipModel.user_id == user_id,
                TenantMembershipModel.is_active.is_(True),
            )
            .order_by(TenantModel.name)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


class UserCRUD(BaseCRUD[UserModel]):
    """CRUD operations for UserModel."""

    def __init__(self) -> None:
        super().__init__(UserModel)

    async def get_by_sub(self, session: AsyncSession, auth0_sub: str) -> UserModel | None:
        result = await session.execute(select(UserModel).where(UserModel.auth0_sub == auth0_sub))
        return result.scalar_one_or_none()

    async def get_by_email(self, session: AsyncSession, email: str) -> UserModel | None:
        result = await session.execute(select(UserModel).where(func.lower(UserModel.email) == email.lower()))
        return result.scalars().first()

    async def count_tenants(self, session: AsyncSession, user_id: UUID) -> int:
        """Number of active memberships of a user."""
        stmt = select(func.count()).select_from(TenantMembershipModel).where(
            TenantMembershipModel.user_id == user_id,
            TenantMembershipModel.is_active.is_(True),
        )
        result = await session.execute(stmt)
        return result.scalar_one()


class MembershipCRUD(BaseCRUD[TenantMembershipModel]):
    """CRUD operations for tenant memberships."""

    def __init__(self) -> None:
        super().__init__(TenantMembershipModel)

    async def get_membership(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        user_id: UUID,
    ) -> TenantMembershipModel | None:
        stmt = select(TenantMembershipModel).where(
            TenantMembershipModel.tenant_id == tenant_id,
            TenantMembershipModel.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_members(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        include_inactive: bool = False,
    ) -> Sequence[tuple[TenantMembershipModel, UserModel]]:
        """
        List memberships of a tenant with their users.

        Args:
            session: Async database session
            tenant_id: Tenant UUID
            include_inactive: Include deactivated memberships

        Returns:
            Sequence of (membership, user) pairs ordered by join date
        """
        stmt = (
            select(TenantMembershipModel, UserModel)
            .join(UserModel, UserModel.id == TenantMembershipModel.user_id)
            .where(TenantMembershipModel.tenant_id == tenant_id)
            .order_by(TenantMembershipModel.joined_at)
        )
        if not include_inactive:
            stmt = stmt.where(TenantMembershipModel.is_active.is_(True))
        result = await session.execute(stmt)
        return result.tuples().all()


tenant_crud = TenantCRUD()
user_crud = UserCRUD()
membership_crud = MembershipCRUD()
