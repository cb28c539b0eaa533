"""
Attachment schemas.

Dependencies: pydantic
System role: Attachment API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel

from astar_backend.boundary.db.models.attachment_model import AttachmentStatus


class AttachmentResponse(BaseModel):
    id: uuid.UUID
    file_name: str
    original_name: str
    file_size: int
    mime_type: str
    status: AttachmentStatus
    expense_id: uuid.UUID | None = None
    linked_at: datetime | None = None
    expires_at: datetime | None = None
    thumbnail_path: str | None = None
    uploaded_by: uuid.UUID
    created_at: datetime


class LinkAttachmentRequest(BaseModel):
    expense_id: uuid.UUID


class DownloadUrlResponse(BaseModel):
    url: str
    expires_in: int
