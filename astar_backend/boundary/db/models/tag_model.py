"""
Tag ORM model.

Tags label expenses. TENANT tags are shared; PERSONAL tags belong to their
creator. Deleted tags are kept with `deleted_at` set.

Dependencies: sqlalchemy, astar_backend.boundary.db.base
System role: Tag persistence
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, Integer, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from astar_backend.boundary.db.base import (
    AuditMixin,
    Base,
    SoftDeleteMixin,
    TenantMixin,
    TimestampMixin,
    UUIDMixin,
)


class TagScope(str, enum.Enum):
    """Tag visibility."""

    TENANT = "TENANT"
    PERSONAL = "PERSONAL"


class TagModel(Base, UUIDMixin, TimestampMixin, TenantMixin, AuditMixin, SoftDeleteMixin):
    """
    Tag ORM model.

    Attributes:
        name: Display name
        name_normalized: Lowercased, whitespace-collapsed name; unique per
            tenant among live tags
        color: Hex colour
        scope: TENANT or PERSONAL
        owner_id: Creator of a PERSONAL tag
        usage_count: Number of times the tag was applied
        last_used_at: Last time the tag was applied
    """

    __tablename__ = "tags"
    __table_args__ = (
        Index(
            "uq_tags_tenant_name_live",
            "tenant_id",
            "name_normalized",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    name_normalized: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False)
    scope: Mapped[TagScope] = mapped_column(Enum(TagScope, name="tag_scope"), nullable=False)
    owner_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
