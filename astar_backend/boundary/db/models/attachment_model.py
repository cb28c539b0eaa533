"""
Attachment ORM model.

Uploaded files start TEMPORARY with an expiry and become LINKED once tied to
an expense. Deleted attachments keep their row with status DELETED.

Dependencies: sqlalchemy, astar_backend.boundary.db.base
System role: Attachment metadata persistence
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from astar_backend.boundary.db.base import (
    Base,
    SoftDeleteMixin,
    TenantMixin,
    TimestampMixin,
    UUIDMixin,
)


class AttachmentStatus(str, enum.Enum):
    """
    Attachment lifecycle states.

    TEMPORARY: Uploaded, not yet linked; removed after expiry
    LINKED: Attached to an expense
    DELETED: Soft deleted, file removed from storage
    """

    TEMPORARY = "TEMPORARY"
    LINKED = "LINKED"
    DELETED = "DELETED"


class AttachmentModel(Base, UUIDMixin, TimestampMixin, TenantMixin, SoftDeleteMixin):
    """
    Attachment ORM model.

    Attributes:
        file_name: Stored file name (`<uuid>.<ext>`)
        original_name: Name supplied by the uploader
        file_size: Size in bytes
        mime_type: Validated content type
        storage_path: `<tenant>/<YYYY-MM-DD>/<uuid>.<ext>`
        status: TEMPORARY, LINKED or DELETED
        expense_id: Linked expense
        linked_at: When the attachment was linked
        expires_at: Cleanup deadline for TEMPORARY uploads
        thumbnail_path: Storage path of the generated thumbnail
        uploaded_by: Uploading user
    """

    __tablename__ = "attachments"

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    storage_path: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    status: Mapped[AttachmentStatus] = mapped_column(
        Enum(AttachmentStatus, name="attachment_status"),
        nullable=False,
        default=AttachmentStatus.TEMPORARY,
    )
    expense_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("expenses.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    linked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    thumbnail_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    thumbnail_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    uploaded_by: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
