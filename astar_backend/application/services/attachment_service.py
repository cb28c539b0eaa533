"""
Attachment service orchestrator.

Uploads are validated, written to the configured FileStorage and recorded as
TEMPORARY rows that expire unless linked to an expense. Storage calls are
blocking (boto3, filesystem) and run in a worker thread.

Stored objects follow the database transaction: an upload is removed again
when its transaction rolls back, and files of deleted attachments are only
removed once the deletion has been committed.

Dependencies: astar_backend.boundary.storage, astar_backend.boundary.db.CRUD.attachment_crud
System role: Attachment use case orchestration
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.base import utcnow
from astar_backend.boundary.db.CRUD.attachment_crud import attachment_crud
from astar_backend.boundary.db.CRUD.expense_crud import expense_crud
from astar_backend.boundary.db.models.attachment_model import AttachmentModel, AttachmentStatus
from astar_backend.boundary.storage.base import FileStorage
from astar_backend.core.attachments import (
    MAX_FILE_SIZE,
    TEMPORARY_EXPIRY_HOURS,
    build_storage_path,
    validate_upload,
)
from astar_backend.core.exceptions import BusinessRuleError, NotFoundError, StorageError, ValidationError
from astar_backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


def attachment_to_dict(attachment: AttachmentModel) -> dict:
    return {
        "id": attachment.id,
        "file_name": attachment.file_name,
        "original_name": attachment.original_name,
        "file_size": attachment.file_size,
        "mime_type": attachment.mime_type,
        "storage_path": attachment.storage_path,
        "status": attachment.status.value,
        "expense_id": attachment.expense_id,
        "linked_at": attachment.linked_at,
        "expires_at": attachment.expires_at,
        "thumbnail_path": attachment.thumbnail_path,
        "uploaded_by": attachment.uploaded_by,
        "created_at": attachment.created_at,
    }


class AttachmentService:
    """Attachment service orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        storage: FileStorage,
        max_file_size: int = MAX_FILE_SIZE,
        temporary_expiry_hours: int = TEMPORARY_EXPIRY_HOURS,
        url_expiry_seconds: int = 3600,
    ) -> None:
        self.db = db
        self.storage = storage
        self.max_file_size = max_file_size
        self.temporary_expiry = timedelta(hours=temporary_expiry_hours)
        self.url_expiry_seconds = url_expiry_seconds

    def _delete_files(self, paths: list[str]) -> None:
        for path in paths:
            try:
                self.storage.delete(path)
            except StorageError as e:
                log_exception_with_context(logger, "Stored file left behind", e, storage_path=path)

    def _on_transaction_end(self, on_commit: list[str] | None = None, on_rollback: list[str] | None = None) -> None:
        """Delete `on_commit` paths after commit, or `on_rollback` paths after rollback."""
        sync_session = self.db.sync_session
        state = {"done": False}

        def finish(paths: list[str] | None) -> None:
            if not state["done"]:
                state["done"] = True
                self._delete_files(paths or [])

        event.listen(sync_session, "after_commit", lambda session: finish(on_commit), once=True)
        event.listen(sync_session, "after_rollback", lambda session: finish(on_rollback), once=True)

    async def get_model(self, tenant_id: UUID, attachment_id: UUID) -> AttachmentModel:
        attachment = await attachment_crud.get_live(self.db, tenant_id, attachment_id)
        if attachment is None:
            raise NotFoundError("Attachment", attachment_id)
        return attachment

    async def upload(
        self,
        tenant_id: UUID,
        user_id: UUID,
        filename: str,
        content_type: str,
        content: bytes,
    ) -> dict:
        """
        Validate and store an upload.

        Args:
            tenant_id: Caller's tenant
            user_id: Uploader
            filename: Client file name
            content_type: Declared MIME type
            content: File bytes

        Returns:
            dict: TEMPORARY attachment expiring after the configured window

        Raises:
            ValidationError: Name, size or type rejected
            StorageError: Backend write failed
        """
        try:
            validate_upload(filename, content_type, len(content), self.max_file_size)
        except ValueError as e:
            raise ValidationError(str(e), field="file") from e

        file_id = uuid.uuid4()
        path = build_storage_path(tenant_id, filename, utcnow().date(), file_id)
        await asyncio.to_thread(self.storage.store, path, content, content_type)

        try:
            attachment = await attachment_crud.create(
                self.db,
                id=file_id,
                tenant_id=tenant_id,
                file_name=path.rsplit("/", 1)[-1],
                original_name=filename,
                file_size=len(content),
                mime_type=content_type,
                storage_path=path,
                status=AttachmentStatus.TEMPORARY,
                expires_at=utcnow() + self.temporary_expiry,
                uploaded_by=user_id,
            )
        except Exception:
            await asyncio.to_thread(self._delete_files, [path])
            raise
        self._on_transaction_end(on_rollback=[path])
        logger.info(
            "Attachment uploaded",
            extra={"attachment_id": str(attachment.id), "size": len(content), "mime_type": content_type},
        )
        return attachment_to_dict(attachment)

    async def get_attachment(self, tenant_id: UUID, attachment_id: UUID) -> dict:
        return attachment_to_dict(await self.get_model(tenant_id, attachment_id))

    async def download(self, tenant_id: UUID, attachment_id: UUID) -> tuple[bytes, str, str]:
        """Return (content, mime type, original name)."""
        attachment = await self.get_model(tenant_id, attachment_id)
        content = await asyncio.to_thread(self.storage.read, attachment.storage_path)
        return content, attachment.mime_type, attachment.original_name

    async def download_url(self, tenant_id: UUID, attachment_id: UUID) -> dict:
        attachment = await self.get_model(tenant_id, attachment_id)
        url = await asyncio.to_thread(
            self.storage.download_url,
            attachment.storage_path,
            str(attachment.id),
            self.url_expiry_seconds,
        )
        return {"url": url, "expires_in": self.url_expiry_seconds}

    async def link_to_expense(self, tenant_id: UUID, attachment_id: UUID, expense_id: UUID) -> dict:
        attachment = await self.get_model(tenant_id, attachment_id)
        if await expense_crud.get_live(self.db, tenant_id, expense_id) is None:
            raise NotFoundError("Expense", expense_id)
        if attachment.status is AttachmentStatus.LINKED and attachment.expense_id != expense_id:
            raise BusinessRuleError(
                "Attachment is already linked to another expense",
                {"expense_id": str(attachment.expense_id)},
            )
        attachment.status = AttachmentStatus.LINKED
        attachment.expense_id = expense_id
        attachment.linked_at = utcnow()
        attachment.expires_at = None
        await self.db.flush()
        return attachment_to_dict(attachment)

    async def unlink(self, tenant_id: UUID, attachment_id: UUID) -> dict:
        """Detach from its expense; the upload becomes TEMPORARY again."""
        attachment = await self.get_model(tenant_id, attachment_id)
        attachment.status = AttachmentStatus.TEMPORARY
        attachment.expense_id = None
        attachment.linked_at = None
        attachment.expires_at = utcnow() + self.temporary_expiry
        await self.db.flush()
        return attachment_to_dict(attachment)

    async def list_by_expense(self, tenant_id: UUID, expense_id: UUID) -> list[dict]:
        attachments = await attachment_crud.list_by_expense(self.db, tenant_id, expense_id)
        return [attachment_to_dict(a) for a in attachments]

    def _remove(self, attachment: AttachmentModel, user_id: UUID | None) -> list[str]:
        """Mark an attachment DELETED and return its stored paths."""
        attachment.status = AttachmentStatus.DELETED
        attachment.deleted_at = utcnow()
        attachment.deleted_by = user_id
        return [p for p in (attachment.storage_path, attachment.thumbnail_path) if p]

    async def delete_attachment(self, tenant_id: UUID, attachment_id: UUID, user_id: UUID | None = None) -> None:
        attachment = await self.get_model(tenant_id, attachment_id)
        paths = self._remove(attachment, user_id)
        await self.db.flush()
        self._on_transaction_end(on_commit=paths)
        logger.info("Attachment deleted", extra={"attachment_id": str(attachment_id)})

    async def cleanup_expired(self, tenant_id: UUID | None = None, now: datetime | None = None) -> int:
        """
        Delete TEMPORARY uploads past their expiry.

        Rows are marked DELETED now; their files go once the caller commits.

        Args:
            tenant_id: Restrict to one tenant (all tenants when None)
            now: Reference time (current UTC time when None)

        Returns:
            int: Number of attachments removed
        """
        expired = await attachment_crud.list_expired_temporary(self.db, now or utcnow(), tenant_id)
        paths: list[str] = []
        for attachment in expired:
            paths.extend(self._remove(attachment, None))
        await self.db.flush()
        if paths:
            self._on_transaction_end(on_commit=paths)
        if expired:
            logger.info("Expired attachments removed", extra={"count": len(expired)})
        return len(expired)
