"""
Tenant domain schemas.

Dependencies: pydantic
System role: Tenant and membership API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class TenantResponse(BaseModel):
    id: uuid.UUID
    slug: str
    name: str
    auth0_org_id: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UpdateTenantRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Tenant display name")


class AddMemberRequest(BaseModel):
    user_id: uuid.UUID


class MemberResponse(BaseModel):
    user_id: uuid.UUID
    email: str | None = None
    display_name: str | None = None
    is_active: bool
    joined_at: datetime | None = None
