"""
Authorization service.

Loads a user's effective permission rules from their roles and evaluates
them with the permission module.

Dependencies: astar_backend.boundary.db.CRUD, astar_backend.core.permissions
System role: Permission evaluation
"""

import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.role_crud import role_crud, role_permission_crud, user_role_crud
from astar_backend.core import permissions as perms
from astar_backend.core.permissions import Action, PermissionRule, ResourceType, Scope

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Permission lookups for one request."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_user_roles(self, user_id: UUID, tenant_id: UUID) -> list[str]:
        role_ids = await user_role_crud.list_role_ids(self.db, tenant_id, user_id)
        roles = await role_crud.get_many(self.db, tenant_id, role_ids)
        return sorted(role.name for role in roles)

    async def get_user_permissions(self, user_id: UUID, tenant_id: UUID) -> set[PermissionRule]:
        """
        Union of the permission rules of every role assigned to the user.

        Stored strings that no longer parse are skipped with a warning.

        Args:
            user_id: User UUID
            tenant_id: Tenant UUID

        Returns:
            set[PermissionRule]: Effective rules
        """
        role_ids = await user_role_crud.list_role_ids(self.db, tenant_id, user_id)
        grouped = await role_permission_crud.list_for_roles(self.db, role_ids)

        rule_sets = []
        for role_id, rule_strings in grouped.items():
            parsed = []
            for rule in rule_strings:
                try:
                    parsed.append(perms.parse_permission(rule))
                except ValueError:
                    logger.warning(
                        "Skipping unparseable stored permission",
                        extra={"role_id": str(role_id), "permission_rule": rule},
                    )
            rule_sets.append(parsed)
        return perms.effective_permissions(rule_sets)

    async def has_permission(self, user_id: UUID, tenant_id: UUID, permission: str) -> bool:
        rules = await self.get_user_permissions(user_id, tenant_id)
        return perms.has_permission(rules, permission)

    async def can_access_resource(
        self,
        user_id: UUID,
        tenant_id: UUID,
        resource_type: ResourceType,
        action: Action,
        resource_id: UUID,
        owner_id: UUID | None = None,
        resource_team_id: UUID | None = None,
        user_team_ids: Iterable[UUID] = (),
    ) -> bool:
        rules = await self.get_user_permissions(user_id, tenant_id)
        return perms.can_access_resource(
            rules,
            resource_type,
            action,
            resource_id,
            user_id,
            owner_id=owner_id,
            resource_team_id=resource_team_id,
            user_team_ids=user_team_ids,
        )

    async def get_highest_scope(
        self,
        user_id: UUID,
        tenant_id: UUID,
        resource_type: ResourceType,
        action: Action,
    ) -> Scope | None:
        rules = await self.get_user_permissions(user_id, tenant_id)
        return perms.highest_scope(rules, resource_type, action)
