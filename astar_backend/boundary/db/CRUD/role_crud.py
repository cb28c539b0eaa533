"""
Role, role permission and user role CRUD operations.

Dependencies: sqlalchemy, astar_backend.boundary.db.models
System role: RBAC persistence operations
"""

from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.models.role_model import (
    RoleModel,
    RolePermissionModel,
    UserRoleModel,
)


class RoleCRUD(BaseCRUD[RoleModel]):
    """CRUD operations for RoleModel."""

    def __init__(self) -> None:
        super().__init__(RoleModel)

    async def list_for_tenant(self, session: AsyncSession, tenant_id: UUID) -> Sequence[RoleModel]:
        stmt = (
            select(RoleModel)
            .where(RoleModel.tenant_id == tenant_id)
            .order_by(RoleModel.position, RoleModel.name)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_name(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        name: str,
    ) -> RoleModel | None:
        stmt = select(RoleModel).where(RoleModel.tenant_id == tenant_id, RoleModel.name == name)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        role_ids: Iterable[UUID],
    ) -> Sequence[RoleModel]:
        ids = list(role_ids)
        if not ids:
            return []
        stmt = select(RoleModel).where(RoleModel.tenant_id == tenant_id, RoleModel.id.in_(ids))
        result = await session.execute(stmt)
        return result.scalars().all()

    async def search(self, session: AsyncSession, tenant_id: UUID, query: str) -> Sequence[RoleModel]:
        stmt = (
            select(RoleModel)
            .where(
                RoleModel.tenant_id == tenant_id,
                or_(
                    RoleModel.name.icontains(query, autoescape=True),
                    RoleModel.display_name.icontains(query, autoescape=True),
                ),
            )
            .order_by(RoleModel.position, RoleModel.name)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def max_position(self, session: AsyncSession, tenant_id: UUID) -> int:
        stmt = select(func.max(RoleModel.position)).where(RoleModel.tenant_id == tenant_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() or 0


class RolePermissionCRUD(BaseCRUD[RolePermissionModel]):
    """CRUD operations for role permission strings."""

    def __init__(self) -> None:
        super().__init__(RolePermissionModel)

    async def list_for_role(self, session: AsyncSession, role_id: UUID) -> list[str]:
        stmt = (
            select(RolePermissionModel.permission_rule)
            .where(RolePermissionModel.role_id == role_id)
            .order_by(RolePermissionModel.permission_rule)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_roles(
        self,
        session: AsyncSession,
        role_ids: Iterable[UUID],
    ) -> dict[UUID, list[str]]:
        """
        Load permission strings for several roles in one query.

        Args:
            session: Async database session
            role_ids: Role UUIDs

        Returns:
            dict mapping role id to its permission strings
        """
        ids = list(role_ids)
        grouped: dict[UUID, list[str]] = {role_id: [] for role_id in ids}
        if not ids:
            return grouped
        stmt = select(RolePermissionModel.role_id, RolePermissionModel.permission_rule).where(
            RolePermissionModel.role_id.in_(ids)
        )
        result = await session.execute(stmt)
        for role_id, rule in result.all():
            grouped.setdefault(role_id, []).append(rule)
        return grouped

    async def exists_rule(self, session: AsyncSession, role_id: UUID, rule: str) -> bool:
        stmt = select(RolePermissionModel.id).where(
            RolePermissionModel.role_id == role_id,
            RolePermissionModel.permission_rule == rule,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def delete_rule(self, session: AsyncSession, role_id: UUID, rule: str) -> bool:
        stmt = delete(RolePermissionModel).where(
            RolePermissionModel.role_id == role_id,
            RolePermissionModel.permission_rule == rule,
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def delete_for_role(self, session: AsyncSession, role_id: UUID) -> int:
        result = await session.execute(
            delete(RolePermissionModel).where(RolePermissionModel.role_id == role_id)
        )
        return result.rowcount


class UserRoleCRUD(BaseCRUD[UserRoleModel]):
    """CRUD operations for user role assignments."""

    def __init__(self) -> None:
        super().__init__(UserRoleModel)

    async def get_assignment(
        self,
        session: AsyncSession,
        user_id: UUID,
        role_id: UUID,
    ) -> UserRoleModel | None:
        stmt = select(UserRoleModel).where(
            UserRoleModel.user_id == user_id,
            UserRoleModel.role_id == role_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_role_ids(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        user_id: UUID,
    ) -> list[UUID]:
        stmt = select(UserRoleModel.role_id).where(
            UserRoleModel.tenant_id == tenant_id,
            UserRoleModel.user_id == user_id,
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_user_ids(self, session: AsyncSession, role_id: UUID) -> list[UUID]:
        stmt = select(UserRoleModel.user_id).where(UserRoleModel.role_id == role_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def count_users(self, session: AsyncSession, role_id: UUID) -> int:
        stmt = select(func.count()).select_from(UserRoleModel).where(UserRoleModel.role_id == role_id)
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def delete_assignment(self, session: AsyncSession, user_id: UUID, role_id: UUID) -> bool:
        stmt = delete(UserRoleModel).where(
            UserRoleModel.user_id == user_id,
            UserRoleModel.role_id == role_id,
        )
        result = await session.execute(stmt)
        return result.rowcount > 0


role_crud = RoleCRUD()
role_permission_crud = RolePermissionCRUD()
user_role_crud = UserRoleCRUD()
