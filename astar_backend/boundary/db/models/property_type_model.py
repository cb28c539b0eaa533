"""
Property type catalog ORM model.

Keyed by a readable type id (`text`, `number`, ...) instead of a UUID.

Dependencies: sqlalchemy, astar_backend.boundary.db.base
System role: Property type catalog persistence
"""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from astar_backend.boundary.db.base import Base, JSONType, TimestampMixin


class PropertyTypeModel(Base, TimestampMixin):
    """Catalog entry describing one property type."""

    __tablename__ = "property_type_catalog"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    validation_schema: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    default_config: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)
    ui_component: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_custom: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
