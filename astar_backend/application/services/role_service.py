"""
Role service orchestrator.

Role lifecycle, role permissions and user role assignments.

Dependencies: astar_backend.boundary.db.CRUD, astar_backend.core.roles, astar_backend.core.permissions
System role: RBAC use case orchestration
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.role_crud import role_crud, role_permission_crud, user_role_crud
from astar_backend.boundary.db.CRUD.tenant_crud import membership_crud
from astar_backend.boundary.db.models.role_model import RoleModel
from astar_backend.core.exceptions import (
    BusinessRuleError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    RoleInUseError,
    ValidationError,
)
from astar_backend.core.permissions import parse_permission
from astar_backend.core.roles import (
    MAX_ROLES_PER_TENANT,
    copy_name_candidates,
    validate_color,
    validate_display_name,
    validate_role_name,
)

logger = logging.getLogger(__name__)


def normalize_permission(rule: str) -> str:
    """Parse and re-serialize a permission string (lowercase canonical form)."""
    try:
        return parse_permission(rule).to_database_string()
    except ValueError as e:
        raise ValidationError(str(e), field="permission") from e


class RoleService:
    """Role service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize role service with async database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db

    async def _get_model(self, tenant_id: UUID, role_id: UUID) -> RoleModel:
        role = await role_crud.get_for_tenant(self.db, tenant_id, role_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    def _ensure_mutable(self, role: RoleModel) -> None:
        if role.is_system:
            raise BusinessRuleError(
                f"System role '{role.name}' cannot be modified",
                {"role_id": str(role.id)},
            )

    async def _to_dict(self, role: RoleModel) -> dict:
        return {
            "id": role.id,
            "name": role.name,
            "display_name": role.display_name,
            "color": role.color,
            "position": role.position,
            "is_system": role.is_system,
            "permissions": await role_permission_crud.list_for_role(self.db, role.id),
            "user_count": await user_role_crud.count_users(self.db, role.id),
            "created_at": role.created_at,
            "updated_at": role.updated_at,
        }

    async def create_role(
        self,
        tenant_id: UUID,
        name: str,
        display_name: str | None = None,
        color: str | None = None,
        position: int | None = None,
        permissions: list[str] | None = None,
        is_system: bool = False,
    ) -> dict:
        """
        Create a role, optionally with an initial permission set.

        Args:
            tenant_id: Owning tenant
            name: Machine name (`^[a-z0-9_]+$`)
            display_name: Human readable name
            color: Hex colour
            position: Sort position (appended after the last role when None)
            permissions: Permission strings to grant
            is_system: Protect the role against modification

        Returns:
            dict: Created role

        Raises:
            ValueError: Invalid name, colour or display name
            DuplicateError: Name taken in the tenant
            BusinessRuleError: Tenant already has the maximum number of roles
        """
        name = validate_role_name(name)
        validate_color(color)
        validate_display_name(display_name)
        rules = [normalize_permission(p) for p in permissions or []]

        if await role_crud.get_by_name(self.db, tenant_id, name):
            raise DuplicateError(f"Role name already exists: {name}", {"name": name})
        if await role_crud.count_for_tenant(self.db, tenant_id) >= MAX_ROLES_PER_TENANT:
            raise BusinessRuleError(
                f"Tenant cannot have more than {MAX_ROLES_PER_TENANT} roles",
                {"limit": MAX_ROLES_PER_TENANT},
            )
        if position is None:
            position = await role_crud.max_position(self.db, tenant_id) + 1

        role = await role_crud.create(
            self.db,
            tenant_id=tenant_id,
            name=name,
            display_name=display_name,
            color=color,
            position=position,
            is_system=is_system,
        )
        for rule in dict.fromkeys(rules):
            await role_permission_crud.create(self.db, role_id=role.id, permission_rule=rule)

        logger.info(
            "Role created",
            extra={"tenant_id": str(tenant_id), "role_id": str(role.id), "role_name": name},
        )
        return await self._to_dict(role)

    async def get_role(self, tenant_id: UUID, role_id: UUID) -> dict:
        return await self._to_dict(await self._get_model(tenant_id, role_id))

    async def list_roles(self, tenant_id: UUID) -> list[dict]:
        roles = await role_crud.list_for_tenant(self.db, tenant_id)
        return [await self._to_dict(role) for role in roles]

    async def search_roles(self, tenant_id: UUID, query: str) -> list[dict]:
        if not query or not query.strip():
            return await self.list_roles(tenant_id)
        roles = await role_crud.search(self.db, tenant_id, query.strip())
        return [await self._to_dict(role) for role in roles]

    async def update_role(
        self,
        tenant_id: UUID,
        role_id: UUID,
        display_name: str | None = None,
        color: str | None = None,
        position: int | None = None,
    ) -> dict:
        role = await self._get_model(tenant_id, role_id)
        self._ensure_mutable(role)
        if display_name is not None:
            role.display_name = validate_display_name(display_name)
        if color is not None:
            role.color = validate_color(color)
        if position is not None:
            role.position = position
        await self.db.flush()
        logger.info("Role updated", extra={"tenant_id": str(tenant_id), "role_id": str(role_id)})
        return await self._to_dict(role)

    async def reorder_roles(self, tenant_id: UUID, role_ids: list[UUID]) -> list[dict]:
        """
        Assign positions 1..n following the given order.

        Raises:
            ValidationError: Duplicate ids in the list
            NotFoundError: An id is not a role of the tenant
        """
        if len(set(role_ids)) != len(role_ids):
            raise ValidationError("Role order contains duplicates", field="role_ids")
        roles = {r.id: r for r in await role_crud.get_many(self.db, tenant_id, role_ids)}
        for role_id in role_ids:
            if role_id not in roles:
                raise NotFoundError("Role", role_id)
        for index, role_id in enumerate(role_ids, start=1):
            roles[role_id].position = index
        await self.db.flush()
        return await self.list_roles(tenant_id)

    async def duplicate_role(
        self,
        tenant_id: UUID,
        role_id: UUID,
        new_name: str | None = None,
        display_name: str | None = None,
    ) -> dict:
        """Copy a role and its permissions under `new_name` or `<name>_copy[_n]`."""
        source = await self._get_model(tenant_id, role_id)
        if new_name is None:
            for candidate in copy_name_candidates(source.name):
                if await role_crud.get_by_name(self.db, tenant_id, candidate) is None:
                    new_name = candidate
                    break
            else:
                raise ConflictError(f"Could not find a free name for a copy of '{source.name}'")

        permissions = await role_permission_crud.list_for_role(self.db, source.id)
        return await self.create_role(
            tenant_id,
            name=new_name,
            display_name=display_name or (f"{source.display_name} (copy)" if source.display_name else None),
            color=source.color,
            permissions=permissions,
        )

    async def delete_role(self, tenant_id: UUID, role_id: UUID) -> None:
        role = await self._get_model(tenant_id, role_id)
        if role.is_system:
            raise BusinessRuleError(f"System role '{role.name}' cannot be deleted")
        user_count = await user_role_crud.count_users(self.db, role.id)
        if user_count > 0:
            raise RoleInUseError(role.name, user_count)

        await role_permission_crud.delete_for_role(self.db, role.id)
        await role_crud.delete_by_id(self.db, role.id)
        logger.info("Role deleted", extra={"tenant_id": str(tenant_id), "role_id": str(role_id)})

    async def export_roles(self, tenant_id: UUID) -> list[dict]:
        roles = await role_crud.list_for_tenant(self.db, tenant_id)
        exported = []
        for role in roles:
            exported.append(
                {
                    "name": role.name,
                    "display_name": role.display_name,
                    "color": role.color,
                    "position": role.position,
                    "permissions": await role_permission_crud.list_for_role(self.db, role.id),
                }
            )
        return exported

    async def import_roles(self, tenant_id: UUID, roles: list[dict]) -> dict:
        """
        Create roles from an export; names that already exist are skipped.

        Returns:
            dict: {"created": [names], "skipped": [names]}
        """
        created, skipped = [], []
        for item in roles:
            name = item.get("name", "")
            if await role_crud.get_by_name(self.db, tenant_id, name):
                skipped.append(name)
                continue
            await self.create_role(
                tenant_id,
                name=name,
                display_name=item.get("display_name"),
                color=item.get("color"),
                position=item.get("position"),
                permissions=item.get("permissions") or [],
            )
            created.append(name)
        logger.info(
            "Roles imported",
            extra={"tenant_id": str(tenant_id), "created_count": len(created), "skipped_count": len(skipped)},
        )
        return {"created": created, "skipped": skipped}

    # Permissions

    async def list_permissions(self, tenant_id: UUID, role_id: UUID) -> list[str]:
        role = await self._get_model(tenant_id, role_id)
        return await role_permission_crud.list_for_role(self.db, role.id)

    async def grant_permissions(self, tenant_id: UUID, role_id: UUID, rules: list[str]) -> list[str]:
        """Grant permission strings; already granted ones are left alone."""
        role = await self._get_model(tenant_id, role_id)
        self._ensure_mutable(role)
        for rule in dict.fromkeys(normalize_permission(r) for r in rules):
            if not await role_permission_crud.exists_rule(self.db, role.id, rule):
                await role_permission_crud.create(self.db, role_id=role.id, permission_rule=rule)
        return await role_permission_crud.list_for_role(self.db, role.id)

    async def revoke_permission(self, tenant_id: UUID, role_id: UUID, rule: str) -> list[str]:
        role = await self._get_model(tenant_id, role_id)
        self._ensure_mutable(role)
        rule = normalize_permission(rule)
        if not await role_permission_crud.delete_rule(self.db, role.id, rule):
            raise NotFoundError("Permission", rule)
        return await role_permission_crud.list_for_role(self.db, role.id)

    async def sync_permissions(self, tenant_id: UUID, role_id: UUID, rules: list[str]) -> list[str]:
        """Replace the role's permission set."""
        role = await self._get_model(tenant_id, role_id)
        self._ensure_mutable(role)
        wanted = list(dict.fromkeys(normalize_permission(r) for r in rules))
        await role_permission_crud.delete_for_role(self.db, role.id)
        for rule in wanted:
            await role_permission_crud.create(self.db, role_id=role.id, permission_rule=rule)
        logger.info(
            "Role permissions synced",
            extra={"role_id": str(role_id), "permission_count": len(wanted)},
        )
        return await role_permission_crud.list_for_role(self.db, role.id)


class UserRoleService:
    """Assignment of roles to tenant members."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _ensure_member(self, tenant_id: UUID, user_id: UUID) -> None:
        membership = await membership_crud.get_membership(self.db, tenant_id, user_id)
        if membership is None or not membership.is_active:
            raise NotFoundError("User", user_id)

    async def _get_role(self, tenant_id: UUID, role_id: UUID) -> RoleModel:
        role = await role_crud.get_for_tenant(self.db, tenant_id, role_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    @staticmethod
    def _role_dict(role: RoleModel) -> dict:
        return {
            "id": role.id,
            "name": role.name,
            "display_name": role.display_name,
            "color": role.color,
            "position": role.position,
            "is_system": role.is_system,
        }

    async def assign_role(
        self,
        tenant_id: UUID,
        user_id: UUID,
        role_id: UUID,
        assigned_by: UUID | None = None,
    ) -> dict:
        """
        Assign a role to a member.

        Raises:
            NotFoundError: Role or member missing in the tenant
            ConflictError: Role already assigned
        """
        await self._ensure_member(tenant_id, user_id)
        role = await self._get_role(tenant_id, role_id)
        if await user_role_crud.get_assignment(self.db, user_id, role_id):
            raise ConflictError(
                f"Role '{role.name}' is already assigned to this user",
                {"user_id": str(user_id), "role_id": str(role_id)},
            )
        assignment = await user_role_crud.create(
            self.db,
            tenant_id=tenant_id,
            user_id=user_id,
            role_id=role_id,
            assigned_by=assigned_by,
        )
        logger.info(
            "Role assigned",
            extra={"tenant_id": str(tenant_id), "user_id": str(user_id), "role_id": str(role_id)},
        )
        return {**self._role_dict(role), "assigned_at": assignment.assigned_at}

    async def unassign_role(self, tenant_id: UUID, user_id: UUID, role_id: UUID) -> None:
        await self._get_role(tenant_id, role_id)
        if not await user_role_crud.delete_assignment(self.db, user_id, role_id):
            raise NotFoundError("Role assignment", role_id)
        logger.info(
            "Role unassigned",
            extra={"tenant_id": str(tenant_id), "user_id": str(user_id), "role_id": str(role_id)},
        )

    async def list_user_roles(self, tenant_id: UUID, user_id: UUID) -> list[dict]:
        role_ids = await user_role_crud.list_role_ids(self.db, tenant_id, user_id)
        roles = await role_crud.get_many(self.db, tenant_id, role_ids)
        return [self._role_dict(r) for r in sorted(roles, key=lambda r: (r.position, r.name))]

    async def list_role_users(self, tenant_id: UUID, role_id: UUID) -> list[UUID]:
        role = await self._get_role(tenant_id, role_id)
        return await user_role_crud.list_user_ids(self.db, role.id)

    async def sync_user_roles(
        self,
        tenant_id: UUID,
        user_id: UUID,
        role_ids: list[UUID],
        assigned_by: UUID | None = None,
    ) -> list[dict]:
        """Make the user's roles exactly `role_ids`."""
        await self._ensure_member(tenant_id, user_id)
        wanted = list(dict.fromkeys(role_ids))
        for role_id in wanted:
            await self._get_role(tenant_id, role_id)

        current = set(await user_role_crud.list_role_ids(self.db, tenant_id, user_id))
        for role_id in current - set(wanted):
            await user_role_crud.delete_assignment(self.db, user_id, role_id)
        for role_id in wanted:
            if role_id not in current:
                await user_role_crud.create(
                    self.db,
                    tenant_id=tenant_id,
                    user_id=user_id,
                    role_id=role_id,
                    assigned_by=assigned_by,
                )
        return await self.list_user_roles(tenant_id, user_id)
