"""
Test suite for tags and expense attachments.

Attachments are stored with LocalFileStorage under a temporary directory.

System role: Verification of tagging and file upload flows
"""

import uuid
from datetime import date, timedelta
from unittest.mock import patch

import pytest

from astar_backend.application.services.attachment_service import AttachmentService
from astar_backend.application.services.expense_service import ExpenseService
from astar_backend.application.services.tag_service import TagService
from astar_backend.boundary.db.CRUD.attachment_crud import attachment_crud
from astar_backend.boundary.db.base import utcnow
from astar_backend.boundary.db.models.tag_model import TagScope
from astar_backend.boundary.storage.local_storage import LocalFileStorage
from astar_backend.core.exceptions import BusinessRuleError, DuplicateError, NotFoundError, ValidationError


@pytest.fixture
def tags(test_async_db) -> TagService:
    return TagService(test_async_db)


@pytest.fixture
def attachments(test_async_db, storage_root) -> AttachmentService:
    return AttachmentService(
        test_async_db,
        LocalFileStorage(storage_root),
        max_file_size=1024,
        temporary_expiry_hours=24,
    )


async def _expense(db, tenant_id, user_id, description: str = "Court fee") -> dict:
    return await ExpenseService(db).create_expense(
        tenant_id,
        user_id,
        {
            "date": date(2024, 4, 1),
            "category": "Fees",
            "description": description,
            "income_amount": "0",
            "expense_amount": "3000",
        },
    )


class TestTagService:
    """Test suite for TagService."""

    @pytest.mark.asyncio
    async def test_normalized_names_are_unique(self, tags, tenant, member) -> None:
        created = await tags.create_tag(tenant["id"], member.id, "Urgent  Case", color="#FF0000")

        assert created["name_normalized"] == "urgent case"
        with pytest.raises(DuplicateError):
            await tags.create_tag(tenant["id"], member.id, "urgent case")

    @pytest.mark.asyncio
    async def test_bad_color_is_validation_error(self, tags, tenant, member) -> None:
        with pytest.raises(ValidationError):
            await tags.create_tag(tenant["id"], member.id, "Billing", color="red")

    @pytest.mark.asyncio
    async def test_personal_tags_are_private(self, tags, tenant, member) -> None:
        personal = await tags.create_tag(tenant["id"], member.id, "Mine", scope=TagScope.PERSONAL)
        await tags.create_tag(tenant["id"], member.id, "Shared")
        other_user = uuid.uuid4()

        assert personal["owner_id"] == member.id
        assert [t["name"] for t in await tags.list_tags(tenant["id"], member.id)] == ["Mine", "Shared"]
        assert [t["name"] for t in await tags.list_tags(tenant["id"], other_user)] == ["Shared"]
        with pytest.raises(NotFoundError):
            await tags.get_tag(tenant["id"], other_user, personal["id"])

    @pytest.mark.asyncio
    async def test_unknown_sort_column(self, tags, tenant, member) -> None:
        with pytest.raises(ValidationError):
            await tags.list_tags(tenant["id"], member.id, sort_by="color")

    @pytest.mark.asyncio
    async def test_find_or_create_reuses_existing(self, tags, tenant, member) -> None:
        existing = await tags.create_tag(tenant["id"], member.id, "Travel")

        resolved = await tags.find_or_create(tenant["id"], member.id, ["travel", "Hotel", "hotel "])

        assert [t["name"] for t in resolved] == ["Travel", "Hotel"]
        assert resolved[0]["id"] == existing["id"]

    @pytest.mark.asyncio
    async def test_find_or_create_hides_other_users_personal_tag(self, tags, tenant, member) -> None:
        await tags.create_tag(tenant["id"], member.id, "Divorce Smith", scope=TagScope.PERSONAL)
        other_user = uuid.uuid4()

        with pytest.raises(DuplicateError) as exc_info:
            await tags.find_or_create(tenant["id"], other_user, ["divorce smith"])

        assert exc_info.value.details == {"name": "divorce smith"}

    @pytest.mark.asyncio
    async def test_find_or_create_returns_own_personal_tag(self, tags, tenant, member) -> None:
        personal = await tags.create_tag(tenant["id"], member.id, "Divorce Smith", scope=TagScope.PERSONAL)

        resolved = await tags.find_or_create(tenant["id"], member.id, ["divorce smith"])

        assert [t["id"] for t in resolved] == [personal["id"]]

    @pytest.mark.asyncio
    async def test_suggestions_prefer_used_tags(self, tags, tenant, member) -> None:
        court = await tags.create_tag(tenant["id"], member.id, "Court")
        await tags.create_tag(tenant["id"], member.id, "Copy")
        await tags.increment_usage(tenant["id"], [court["id"]])

        suggested = await tags.suggestions(tenant["id"], member.id, prefix="co")

        assert [t["name"] for t in suggested] == ["Court", "Copy"]

    @pytest.mark.asyncio
    async def test_update_and_soft_delete(self, tags, tenant, member) -> None:
        tag = await tags.create_tag(tenant["id"], member.id, "Draft")

        renamed = await tags.update_tag(tenant["id"], member.id, tag["id"], name="Final", color="#00FF00")
        await tags.delete_tag(tenant["id"], member.id, tag["id"])

        assert renamed["name"] == "Final"
        assert await tags.list_tags(tenant["id"], member.id) == []
        recreated = await tags.create_tag(tenant["id"], member.id, "Final")
        assert recreated["id"] != tag["id"]


class TestAttachmentService:
    """Test suite for AttachmentService."""

    @pytest.mark.asyncio
    async def test_upload_is_temporary_and_downloadable(self, attachments, tenant, member, storage_root) -> None:
        # Act
        uploaded = await attachments.upload(tenant["id"], member.id, "receipt.pdf", "application/pdf", b"%PDF-1")
        content, mime_type, name = await attachments.download(tenant["id"], uploaded["id"])

        # Assert
        assert uploaded["status"] == "TEMPORARY"
        assert uploaded["expires_at"] is not None
        assert uploaded["storage_path"].startswith(f"{tenant['id']}/")
        assert uploaded["file_name"] == f"{uploaded['id']}.pdf"
        assert (content, mime_type, name) == (b"%PDF-1", "application/pdf", "receipt.pdf")

    @pytest.mark.asyncio
    async def test_upload_validation(self, attachments, tenant, member) -> None:
        with pytest.raises(ValidationError):
            await attachments.upload(tenant["id"], member.id, "big.pdf", "application/pdf", b"x" * 2048)
        with pytest.raises(ValidationError):
            await attachments.upload(tenant["id"], member.id, "run.sh", "application/x-sh", b"#!")

    @pytest.mark.asyncio
    async def test_link_and_unlink(self, attachments, test_async_db, tenant, member) -> None:
        expense = await _expense(test_async_db, tenant["id"], member.id)
        other = await _expense(test_async_db, tenant["id"], member.id, "Copy fee")
        uploaded = await attachments.upload(tenant["id"], member.id, "r.png", "image/png", b"png")

        linked = await attachments.link_to_expense(tenant["id"], uploaded["id"], expense["id"])

        assert linked["status"] == "LINKED"
        assert linked["expires_at"] is None
        assert [a["id"] for a in await attachments.list_by_expense(tenant["id"], expense["id"])] == [uploaded["id"]]
        with pytest.raises(BusinessRuleError):
            await attachments.link_to_expense(tenant["id"], uploaded["id"], other["id"])

        unlinked = await attachments.unlink(tenant["id"], uploaded["id"])
        assert unlinked["status"] == "TEMPORARY"
        assert unlinked["expense_id"] is None

    @pytest.mark.asyncio
    async def test_link_to_unknown_expense(self, attachments, tenant, member) -> None:
        uploaded = await attachments.upload(tenant["id"], member.id, "r.png", "image/png", b"png")

        with pytest.raises(NotFoundError):
            await attachments.link_to_expense(tenant["id"], uploaded["id"], uuid.uuid4())

    @pytest.mark.asyncio
    async def test_cleanup_removes_only_expired_temporary(
        self, attachments, test_async_db, tenant, member, storage_root
    ) -> None:
        expense = await _expense(test_async_db, tenant["id"], member.id)
        stale = await attachments.upload(tenant["id"], member.id, "a.txt", "text/plain", b"a")
        kept = await attachments.upload(tenant["id"], member.id, "b.txt", "text/plain", b"b")
        await attachments.link_to_expense(tenant["id"], kept["id"], expense["id"])

        removed = await attachments.cleanup_expired(now=utcnow() + timedelta(hours=25))
        assert (storage_root / stale["storage_path"]).exists()
        await test_async_db.commit()

        assert removed == 1
        assert not (storage_root / stale["storage_path"]).exists()
        assert (storage_root / kept["storage_path"]).exists()
        with pytest.raises(NotFoundError):
            await attachments.get_attachment(tenant["id"], stale["id"])

    @pytest.mark.asyncio
    async def test_delete_and_download_url(self, attachments, tenant, member) -> None:
        uploaded = await attachments.upload(tenant["id"], member.id, "a.txt", "text/plain", b"a")

        url = await attachments.download_url(tenant["id"], uploaded["id"])
        await attachments.delete_attachment(tenant["id"], uploaded["id"], member.id)

        assert url["url"] == f"/api/v1/attachments/{uploaded['id']}/download"
        with pytest.raises(NotFoundError):
            await attachments.get_attachment(tenant["id"], uploaded["id"])

    @pytest.mark.asyncio
    async def test_rolled_back_upload_leaves_no_file(self, attachments, test_async_db, tenant, member, storage_root) -> None:
        uploaded = await attachments.upload(tenant["id"], member.id, "a.txt", "text/plain", b"a")
        assert (storage_root / uploaded["storage_path"]).exists()

        await test_async_db.rollback()

        assert not (storage_root / uploaded["storage_path"]).exists()

    @pytest.mark.asyncio
    async def test_failed_insert_removes_stored_file(self, attachments, tenant, member, storage_root) -> None:
        with patch.object(attachment_crud, "create", side_effect=RuntimeError("insert failed")):
            with pytest.raises(RuntimeError):
                await attachments.upload(tenant["id"], member.id, "a.txt", "text/plain", b"a")

        assert [p for p in storage_root.rglob("*") if p.is_file()] == []

    @pytest.mark.asyncio
    async def test_delete_keeps_file_until_commit(self, attachments, test_async_db, tenant, member, storage_root) -> None:
        member_id = member.id
        uploaded = await attachments.upload(tenant["id"], member_id, "a.txt", "text/plain", b"a")
        stored = storage_root / uploaded["storage_path"]
        await test_async_db.commit()

        await attachments.delete_attachment(tenant["id"], uploaded["id"], member_id)
        await test_async_db.rollback()

        assert stored.exists()
        assert (await attachments.get_attachment(tenant["id"], uploaded["id"]))["status"] == "TEMPORARY"

        await attachments.delete_attachment(tenant["id"], uploaded["id"], member_id)
        assert stored.exists()
        await test_async_db.commit()

        assert not stored.exists()
