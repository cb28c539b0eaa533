"""
Record schemas.

Dependencies: pydantic
System role: Flexible record API contracts
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CreateRecordRequest(BaseModel):
    data: dict[str, Any] = Field(default_factory=dict)
    position: float | None = None


class BatchCreateRecordsRequest(BaseModel):
    records: list[dict[str, Any]]


class UpdateRecordRequest(BaseModel):
    data: dict[str, Any]
    merge: bool = Field(True, description="Merge into existing data instead of replacing it")


class UpdateFieldRequest(BaseModel):
    value: Any = None


class BatchDeleteRecordsRequest(BaseModel):
    record_ids: list[uuid.UUID]


class MoveRecordRequest(BaseModel):
    after_record_id: uuid.UUID | None = Field(None, description="Anchor record; None moves to the top")


class ReorderRecordsRequest(BaseModel):
    record_ids: list[uuid.UUID]


class BulkUpdateFieldRequest(BaseModel):
    record_ids: list[uuid.UUID]
    key: str
    value: Any = None


class ValidateRecordRequest(BaseModel):
    data: dict[str, Any]
    partial: bool = False


class ValidationResultResponse(BaseModel):
    valid: bool
    errors: list[str]


class RecordQueryRequest(BaseModel):
    """Body of the record query endpoint."""

    page: int = Field(0, ge=0)
    size: int = Field(50, ge=1, le=1000)
    sort_by: str = "position"
    descending: bool = False
    filters: dict[str, Any] | None = None
    search: str | None = None


class RecordResponse(BaseModel):
    id: uuid.UUID
    table_id: uuid.UUID
    data: dict[str, Any]
    position: float
    created_by: uuid.UUID | None = None
    updated_by: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


class RecordPageResponse(BaseModel):
    items: list[RecordResponse]
    total: int
    page: int
    size: int
    has_next: bool
