"""
Workspace schemas.

Dependencies: pydantic
System role: Workspace API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CreateWorkspaceRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=4096)


class UpdateWorkspaceRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=4096)


class TransferWorkspaceRequest(BaseModel):
    new_owner_id: uuid.UUID


class AssignTeamRequest(BaseModel):
    team_id: uuid.UUID | None = None


class WorkspaceResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None = None
    created_by: uuid.UUID | None = None
    team_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime
