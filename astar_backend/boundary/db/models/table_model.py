"""
Flexible table and record ORM models.

A table stores its schema as JSON (`properties` + `property_order`); records
store their values as JSON keyed by property key.

Dependencies: sqlalchemy, astar_backend.boundary.db.base
System role: Flexible table persistence
"""

import uuid

from sqlalchemy import Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from astar_backend.boundary.db.base import (
    AuditMixin,
    Base,
    JSONType,
    TenantMixin,
    TimestampMixin,
    UUIDMixin,
)


class TableModel(Base, UUIDMixin, TimestampMixin, TenantMixin, AuditMixin):
    """
    User-defined table.

    Attributes:
        workspace_id: Owning workspace
        name: Unique per workspace
        properties: Mapping of property key to definition
        property_order: Display order of property keys
        version: Incremented on every schema change (optimistic locking)
    """

    __tablename__ = "tables"
    __table_args__ = (UniqueConstraint("workspace_id", "name", name="uq_tables_workspace_name"),)

    workspace_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    properties: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    property_order: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class RecordModel(Base, UUIDMixin, TimestampMixin, TenantMixin, AuditMixin):
    """Row of a flexible table."""

    __tablename__ = "records"

    table_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tables.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    data: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    position: Mapped[float] = mapped_column(Float, nullable=False, index=True)
