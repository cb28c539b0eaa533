"""
Document tree ORM models.

Folders and documents share one node table with a materialized path.
Document content is versioned in revisions; flags and free-form metadata
live in a side table.

Dependencies: sqlalchemy, astar_backend.boundary.db.base
System role: Editor persistence
"""

import enum
import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
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


class DocumentNodeType(str, enum.Enum):
    """Kind of tree node."""

    FOLDER = "folder"
    DOCUMENT = "document"


class DocumentNodeModel(Base, UUIDMixin, TimestampMixin, TenantMixin, AuditMixin):
    """
    Folder or document in a workspace tree.

    Attributes:
        parent_id: Parent folder (None at the root)
        slug: Unique among siblings
        materialized_path: `/a/b/c` built from slugs
        depth: 0 at the root
        position: Sibling ordering
        is_archived: Hidden from default listings
    """

    __tablename__ = "document_nodes"

    workspace_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("document_nodes.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    type: Mapped[DocumentNodeType] = mapped_column(
        Enum(DocumentNodeType, name="document_node_type"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)
    materialized_path: Mapped[str] = mapped_column(String(2000), nullable=False, index=True)
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    position: Mapped[float] = mapped_column(Float, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class DocumentRevisionModel(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Immutable content snapshot of a document."""

    __tablename__ = "document_revisions"
    __table_args__ = (
        UniqueConstraint("document_id", "revision_number", name="uq_document_revision_number"),
    )

    workspace_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("document_nodes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    revision_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title_snapshot: Mapped[str] = mapped_column(String(255), nullable=False)
    author_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    summary: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False, default="text/markdown")
    size_bytes: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    checksum: Mapped[str | None] = mapped_column(String(64), nullable=True)


class DocumentMetadataModel(Base, TimestampMixin, TenantMixin):
    """Flags and free-form metadata of a document (one row per document)."""

    __tablename__ = "document_metadata"

    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("document_nodes.id", ondelete="CASCADE"),
        primary_key=True,
    )
    workspace_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    metadata_json: Mapped[dict] = mapped_column("metadata", JSONType, nullable=False, default=dict)
    tags: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_favorited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
