"""
Editor schemas: folders, documents and revisions.

Dependencies: pydantic
System role: Document tree API contracts
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CreateFolderRequest(BaseModel):
    workspace_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    parent_id: uuid.UUID | None = None


class RenameRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class MoveNodeRequest(BaseModel):
    parent_id: uuid.UUID | None = None


class NodeResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    parent_id: uuid.UUID | None = None
    type: str
    title: str
    slug: str
    path: str
    depth: int
    position: float
    is_archived: bool
    created_by: uuid.UUID | None = None
    updated_by: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


class TreeNodeResponse(NodeResponse):
    children: list["TreeNodeResponse"] = Field(default_factory=list)


class CreateDocumentRequest(BaseModel):
    workspace_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    content: str | None = None
    parent_id: uuid.UUID | None = None
    content_type: str = "text/markdown"
    summary: str | None = Field(None, max_length=1000)
    metadata: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)


class UpdateDocumentRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = None
    content_type: str | None = None
    summary: str | None = Field(None, max_length=1000)


class UpdateDocumentMetadataRequest(BaseModel):
    metadata: dict[str, Any] | None = None
    tags: list[str] | None = None
    is_published: bool | None = None
    is_favorited: bool | None = None


class RevisionResponse(BaseModel):
    id: uuid.UUID
    document_id: uuid.UUID
    revision_number: int
    title: str
    author_id: uuid.UUID | None = None
    summary: str | None = None
    content_type: str
    size_bytes: int | None = None
    checksum: str | None = None
    content: str | None = None
    created_at: datetime


class DocumentResponse(NodeResponse):
    latest_revision: RevisionResponse | None = None
    revision_count: int
    metadata: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    is_published: bool = False
    is_favorited: bool = False
