"""
Role and permission schemas.

Dependencies: pydantic
System role: RBAC API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CreateRoleRequest(BaseModel):
    """Request schema for creating a role."""

    name: str = Field(..., min_length=1, max_length=100, description="Lowercase identifier, e.g. `lawyer`")
    display_name: str | None = Field(None, max_length=255)
    color: str | None = Field(None, description="Hex colour such as #FF5733")
    position: int | None = Field(None, ge=0)
    permissions: list[str] = Field(default_factory=list, description="Permission strings")


class UpdateRoleRequest(BaseModel):
    display_name: str | None = Field(None, max_length=255)
    color: str | None = None
    position: int | None = Field(None, ge=0)


class DuplicateRoleRequest(BaseModel):
    new_name: str | None = Field(None, max_length=100)
    display_name: str | None = Field(None, max_length=255)


class ReorderRolesRequest(BaseModel):
    role_ids: list[uuid.UUID] = Field(..., min_length=1)


class PermissionListRequest(BaseModel):
    permissions: list[str]


class RoleResponse(BaseModel):
    id: uuid.UUID
    name: str
    display_name: str | None = None
    color: str | None = None
    position: int
    is_system: bool
    permissions: list[str] = Field(default_factory=list)
    user_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RoleExportItem(BaseModel):
    """Portable role definition used by export and import."""

    name: str
    display_name: str | None = None
    color: str | None = None
    position: int | None = None
    permissions: list[str] = Field(default_factory=list)


class ImportRolesRequest(BaseModel):
    roles: list[RoleExportItem]


class ImportRolesResponse(BaseModel):
    created: list[str]
    skipped: list[str]


class AssignRoleRequest(BaseModel):
    role_id: uuid.UUID


class SyncUserRolesRequest(BaseModel):
    role_ids: list[uuid.UUID]


class UserRoleResponse(BaseModel):
    id: uuid.UUID
    name: str
    display_name: str | None = None
    color: str | None = None
    position: int
    is_system: bool
    assigned_at: datetime | None = None
