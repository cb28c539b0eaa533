"""
Flexible table schemas.

Dependencies: pydantic
System role: Table and schema API contracts
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class PropertyDefinitionModel(BaseModel):
    """Column definition; `config.options` holds select choices."""

    type_id: str
    display_name: str
    config: dict[str, Any] = Field(default_factory=dict)
    required: bool = False
    description: str | None = None


class CreateTableRequest(BaseModel):
    workspace_id: uuid.UUID
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=4096)
    properties: dict[str, PropertyDefinitionModel] = Field(default_factory=dict)
    property_order: list[str] | None = None


class CreateFromTemplateRequest(BaseModel):
    workspace_id: uuid.UUID
    template: str
    name: str | None = Field(None, max_length=255)


class UpdateTableRequest(BaseModel):
    """Rename and/or change the description. `expected_version` guards the rename."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=4096)
    expected_version: int | None = None


class AddPropertyRequest(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    definition: PropertyDefinitionModel
    expected_version: int | None = None


class UpdatePropertyRequest(BaseModel):
    definition: PropertyDefinitionModel
    expected_version: int | None = None


class ReorderPropertiesRequest(BaseModel):
    order: list[str]
    expected_version: int | None = None


class DuplicateTableRequest(BaseModel):
    new_name: str | None = Field(None, max_length=255)
    include_records: bool = False


class TableResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    description: str | None = None
    properties: dict[str, dict[str, Any]]
    property_order: list[str]
    version: int
    created_by: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


class SchemaPropertyResponse(PropertyDefinitionModel):
    key: str


class TableStatisticsResponse(BaseModel):
    table_id: uuid.UUID
    record_count: int
    property_count: int
    property_types: dict[str, int]
    version: int


class TemplateResponse(BaseModel):
    name: str
    description: str
    properties: list[str]


class CsvImportRequest(BaseModel):
    content: str


class CsvImportResponse(BaseModel):
    imported: int
    skipped: int
    errors: list[dict[str, Any]] = Field(default_factory=list)
