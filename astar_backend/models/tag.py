"""
Tag schemas.

Dependencies: pydantic
System role: Tag API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from astar_backend.boundary.db.models.tag_model import TagScope


class CreateTagRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    color: str | None = Field(None, description="Hex colour; a palette colour is picked when omitted")
    scope: TagScope = TagScope.TENANT


class UpdateTagRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    color: str | None = None


class FindOrCreateTagsRequest(BaseModel):
    names: list[str] = Field(..., min_length=1)


class TagResponse(BaseModel):
    id: uuid.UUID
    name: str
    name_normalized: str
    color: str
    scope: TagScope
    owner_id: uuid.UUID | None = None
    usage_count: int
    last_used_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
