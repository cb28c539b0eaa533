"""
Authentication schemas.

Dependencies: pydantic
System role: Auth API contracts
"""

import uuid

from pydantic import BaseModel


class PrincipalResponse(BaseModel):
    """Caller identity as resolved from the bearer token."""

    auth0_sub: str
    user_id: uuid.UUID | None = None
    tenant_id: uuid.UUID | None = None
    email: str | None = None
    roles: list[str]
    permissions: list[str]
    authorities: list[str]
    setup_mode: bool = False


class PermissionsResponse(BaseModel):
    user_id: uuid.UUID
    tenant_id: uuid.UUID
    roles: list[str]
    permissions: list[str]
