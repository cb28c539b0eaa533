"""
Tenant rules and request-scoped tenant context.

The current tenant and user are kept in ContextVars for the lifetime of a
request, mirroring the correlation ID handling in observability.

Dependencies: contextvars (stdlib)
System role: Multi-tenant isolation primitives
"""

import re
from contextvars import ContextVar
from uuid import UUID

from astar_backend.core.exceptions import TenantContextError

TENANT_SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
MAX_TENANT_SLUG_LENGTH = 100
MAX_TENANT_NAME_LENGTH = 255

current_tenant_ctx: ContextVar[UUID | None] = ContextVar("current_tenant", default=None)
current_user_ctx: ContextVar[UUID | None] = ContextVar("current_user", default=None)


def validate_tenant_slug(slug: str) -> str:
    if slug is None or not slug.strip():
        raise ValueError("Tenant slug cannot be blank")
    if len(slug) > MAX_TENANT_SLUG_LENGTH:
        raise ValueError("Tenant slug cannot exceed 100 characters")
    if not TENANT_SLUG_PATTERN.match(slug):
        raise ValueError(
            "Tenant slug can only contain lowercase letters, numbers, and hyphens"
        )
    return slug


def validate_tenant_name(name: str) -> str:
    if name is None or not name.strip():
        raise ValueError("Tenant name cannot be blank")
    if len(name) > MAX_TENANT_NAME_LENGTH:
        raise ValueError("Tenant name cannot exceed 255 characters")
    return name.strip()


def set_tenant_context(tenant_id: UUID | None, user_id: UUID | None = None) -> None:
    current_tenant_ctx.set(tenant_id)
    current_user_ctx.set(user_id)


def clear_tenant_context() -> None:
    current_tenant_ctx.set(None)
    current_user_ctx.set(None)


def get_tenant_context() -> UUID | None:
    return current_tenant_ctx.get()


def require_tenant_context() -> UUID:
    """
    Return the current tenant id.

    Raises:
        TenantContextError: If no tenant is bound to the request
    """
    tenant_id = current_tenant_ctx.get()
    if tenant_id is None:
        raise TenantContextError("Tenant context is required for this operation")
    return tenant_id
