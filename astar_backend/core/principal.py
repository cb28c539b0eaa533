"""
Authenticated principal.

The identity the API layer works with after a bearer token has been
validated: either a tenant member with roles and permissions, or a
setup-mode principal (token without an organization).

Dependencies: astar_backend.core.permissions
System role: Request identity
"""

from dataclasses import dataclass, field
from uuid import UUID

from astar_backend.core.permissions import PermissionRule, build_authorities, has_permission

SETUP_MODE_AUTHORITIES = frozenset(
    {
        "ROLE_SETUP_MODE",
        "SCOPE_auth.setup",
        "SCOPE_auth.view_my_tenants",
        "SCOPE_auth.create_default_tenant",
    }
)


@dataclass
class AuthenticatedUser:
    """Principal resolved from a validated token."""

    auth0_sub: str
    user_id: UUID | None = None
    tenant_id: UUID | None = None
    roles: list[str] = field(default_factory=list)
    permissions: set[PermissionRule] = field(default_factory=set)
    email: str | None = None
    setup_mode: bool = False

    @property
    def authorities(self) -> set[str]:
        if self.setup_mode:
            return set(SETUP_MODE_AUTHORITIES)
        return build_authorities(self.roles, self.permissions)

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities

    def can(self, permission: str) -> bool:
        return has_permission(self.permissions, permission)

    @classmethod
    def setup(cls, auth0_sub: str, email: str | None = None) -> "AuthenticatedUser":
        return cls(auth0_sub=auth0_sub, email=email, setup_mode=True)
