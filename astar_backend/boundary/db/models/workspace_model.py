"""
Workspace ORM model.

Workspaces group flexible tables and documents inside a tenant.

Dependencies: sqlalchemy, astar_backend.boundary.db.base
System role: Workspace persistence
"""

import uuid

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from astar_backend.boundary.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class WorkspaceModel(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """
    Workspace ORM model.

    Attributes:
        name: Unique per tenant
        description: Optional description
        created_by: Owner; changed by ownership transfer
        team_id: Team the workspace is shared with
    """

    __tablename__ = "workspaces"
    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_workspaces_tenant_name"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    team_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
