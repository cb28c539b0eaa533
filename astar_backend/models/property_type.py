"""
Property type catalog schemas.

Dependencies: pydantic
System role: Property type API contracts
"""

from typing import Any

from pydantic import BaseModel, Field


class PropertyTypeResponse(BaseModel):
    id: str
    category: str
    validation_schema: dict[str, Any] = Field(default_factory=dict)
    default_config: dict[str, Any] = Field(default_factory=dict)
    description: str | None = None
    icon: str | None = None
    ui_component: str | None = None
    is_active: bool
    is_custom: bool
    is_system: bool = False


class CreatePropertyTypeRequest(BaseModel):
    id: str = Field(..., min_length=1, max_length=50, description="Lowercase type identifier")
    category: str
    validation_schema: dict[str, Any] = Field(default_factory=dict)
    default_config: dict[str, Any] = Field(default_factory=dict)
    description: str | None = Field(None, max_length=1000)
    icon: str | None = Field(None, max_length=100)
    ui_component: str | None = Field(None, max_length=100)


class UpdatePropertyTypeRequest(BaseModel):
    category: str | None = None
    validation_schema: dict[str, Any] | None = None
    default_config: dict[str, Any] | None = None
    description: str | None = Field(None, max_length=1000)
    icon: str | None = Field(None, max_length=100)
    ui_component: str | None = Field(None, max_length=100)


class PropertyTypeSummaryResponse(BaseModel):
    total: int
    active: int
    custom: int
    by_category: dict[str, int]
