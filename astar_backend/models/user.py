"""
User domain schemas.

Dependencies: pydantic
System role: User account and profile API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    id: uuid.UUID
    auth0_sub: str
    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    updated_at: datetime


class CurrentUserResponse(UserResponse):
    current_tenant_id: uuid.UUID | None = None
    tenant_count: int = 0


class UserDetailResponse(UserResponse):
    tenant_count: int = 0


class UpdateUserRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255, description="New email address")


class UserProfileResponse(BaseModel):
    user_id: uuid.UUID
    display_name: str | None = None
    avatar_url: str | None = None
    updated_at: datetime


class UpdateProfileRequest(BaseModel):
    """Only the fields present in the body are changed; null clears a field."""

    display_name: str | None = Field(None, max_length=255)
    avatar_url: str | None = Field(None, max_length=2048)
