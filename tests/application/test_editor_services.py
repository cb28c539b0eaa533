"""
Test suite for the folder/document tree and document revisions.

System role: Verification of the workspace editor
"""

import uuid

import pytest

from astar_backend.application.services.document_service import DocumentService
from astar_backend.application.services.folder_service import FolderService
from astar_backend.application.services.workspace_service import WorkspaceService
from astar_backend.core.exceptions import ConflictError, NotFoundError


@pytest.fixture
def folders(test_async_db) -> FolderService:
    return FolderService(test_async_db)


@pytest.fixture
def documents(test_async_db) -> DocumentService:
    return DocumentService(test_async_db)


class TestFolderService:
    """Test suite for FolderService."""

    @pytest.mark.asyncio
    async def test_nested_paths_and_sibling_slugs(self, folders, tenant, workspace) -> None:
        # Arrange
        tid, wid = tenant["id"], workspace["id"]

        # Act
        cases = await folders.create_folder(tid, wid, "Cases")
        again = await folders.create_folder(tid, wid, "Cases")
        child = await folders.create_folder(tid, wid, "2024 Filings", parent_id=cases["id"])

        # Assert
        assert cases["path"] == "/cases"
        assert again["slug"] == "cases-2"
        assert child["path"] == "/cases/2024-filings"
        assert child["depth"] == 1
        assert again["position"] > cases["position"]

    @pytest.mark.asyncio
    async def test_rename_rewrites_descendant_paths(self, folders, documents, tenant, workspace) -> None:
        tid, wid = tenant["id"], workspace["id"]
        root = await folders.create_folder(tid, wid, "Drafts")
        doc = await documents.create_document(tid, wid, "Memo", content="hi", parent_id=root["id"])

        renamed = await folders.rename_folder(tid, root["id"], "Final")

        assert renamed["path"] == "/final"
        assert (await documents.get_document(tid, doc["id"]))["path"] == "/final/memo"

    @pytest.mark.asyncio
    async def test_move_updates_depth_and_rejects_cycles(self, folders, tenant, workspace) -> None:
        tid, wid = tenant["id"], workspace["id"]
        a = await folders.create_folder(tid, wid, "A")
        b = await folders.create_folder(tid, wid, "B", parent_id=a["id"])
        c = await folders.create_folder(tid, wid, "C")

        moved = await folders.move_folder(tid, a["id"], c["id"])

        assert moved["path"] == "/c/a"
        assert (await folders.get_folder(tid, b["id"]))["depth"] == 2
        with pytest.raises(ValueError):
            await folders.move_folder(tid, c["id"], b["id"])
        with pytest.raises(ValueError):
            await folders.move_folder(tid, a["id"], a["id"])

    @pytest.mark.asyncio
    async def test_move_into_folder_with_same_slug_conflicts(self, folders, tenant, workspace) -> None:
        tid, wid = tenant["id"], workspace["id"]
        target = await folders.create_folder(tid, wid, "Target")
        await folders.create_folder(tid, wid, "Notes", parent_id=target["id"])
        notes = await folders.create_folder(tid, wid, "Notes")

        with pytest.raises(ConflictError):
            await folders.move_folder(tid, notes["id"], target["id"])

    @pytest.mark.asyncio
    async def test_archive_hides_subtree_from_tree(self, folders, documents, tenant, workspace) -> None:
        tid, wid = tenant["id"], workspace["id"]
        archive = await folders.create_folder(tid, wid, "Old")
        await documents.create_document(tid, wid, "Letter", parent_id=archive["id"])
        await folders.create_folder(tid, wid, "Current")

        await folders.set_archived(tid, archive["id"], True)
        visible = await folders.get_tree(tid, wid)
        everything = await folders.get_tree(tid, wid, include_archived=True)

        assert [n["title"] for n in visible] == ["Current"]
        old = next(n for n in everything if n["title"] == "Old")
        assert [c["title"] for c in old["children"]] == ["Letter"]

    @pytest.mark.asyncio
    async def test_delete_removes_subtree(self, folders, documents, tenant, workspace) -> None:
        tid, wid = tenant["id"], workspace["id"]
        root = await folders.create_folder(tid, wid, "Trash")
        await folders.create_folder(tid, wid, "Inner", parent_id=root["id"])
        await documents.create_document(tid, wid, "Note", parent_id=root["id"])

        removed = await folders.delete_folder(tid, root["id"])

        assert removed == 3
        assert await folders.list_children(tid, wid) == []

    @pytest.mark.asyncio
    async def test_document_cannot_be_parent(self, folders, documents, tenant, workspace) -> None:
        doc = await documents.create_document(tenant["id"], workspace["id"], "Memo")

        with pytest.raises(ValueError, match="folder"):
            await folders.create_folder(tenant["id"], workspace["id"], "Child", parent_id=doc["id"])

    @pytest.mark.asyncio
    async def test_folder_lookup_is_typed(self, folders, documents, tenant, workspace) -> None:
        doc = await documents.create_document(tenant["id"], workspace["id"], "Memo")

        with pytest.raises(NotFoundError):
            await folders.get_folder(tenant["id"], doc["id"])


class TestDocumentService:
    """Test suite for DocumentService revisions and metadata."""

    @pytest.mark.asyncio
    async def test_create_document_has_first_revision(self, documents, tenant, workspace, member) -> None:
        doc = await documents.create_document(
            tenant["id"], workspace["id"], "Engagement Letter", content="# Terms", user_id=member.id, tags=["contract"]
        )

        assert doc["slug"] == "engagement-letter"
        assert doc["revision_count"] == 1
        assert doc["latest_revision"]["content"] == "# Terms"
        assert doc["latest_revision"]["size_bytes"] == 7
        assert doc["tags"] == ["contract"]

    @pytest.mark.asyncio
    async def test_update_appends_revision_and_keeps_content(self, documents, tenant, workspace) -> None:
        tid = tenant["id"]
        doc = await documents.create_document(tid, workspace["id"], "Brief", content="v1")

        retitled = await documents.update_document(tid, doc["id"], title="Reply Brief")
        edited = await documents.update_document(tid, doc["id"], content="v3", summary="Edits")
        revisions = await documents.list_revisions(tid, doc["id"])

        assert retitled["slug"] == "reply-brief"
        assert retitled["latest_revision"]["content"] == "v1"
        assert edited["revision_count"] == 3
        assert [r["revision_number"] for r in revisions] == [3, 2, 1]
        assert "content" not in revisions[0]
        assert (await documents.get_revision(tid, doc["id"], 1))["title"] == "Brief"

    @pytest.mark.asyncio
    async def test_missing_revision(self, documents, tenant, workspace) -> None:
        doc = await documents.create_document(tenant["id"], workspace["id"], "Brief")

        with pytest.raises(NotFoundError):
            await documents.get_revision(tenant["id"], doc["id"], 9)

    @pytest.mark.asyncio
    async def test_metadata_update(self, documents, tenant, workspace) -> None:
        doc = await documents.create_document(tenant["id"], workspace["id"], "Brief")

        updated = await documents.update_metadata(
            tenant["id"], doc["id"], metadata={"court": "Tokyo"}, is_favorited=True
        )

        assert updated["metadata"] == {"court": "Tokyo"}
        assert updated["is_favorited"] is True
        assert updated["is_published"] is False

    @pytest.mark.asyncio
    async def test_move_document_to_folder(self, folders, documents, tenant, workspace) -> None:
        tid, wid = tenant["id"], workspace["id"]
        folder = await folders.create_folder(tid, wid, "Clients")
        doc = await documents.create_document(tid, wid, "Intake")

        moved = await documents.move_document(tid, doc["id"], folder["id"])
        archived = await documents.set_archived(tid, doc["id"], True)

        assert moved["path"] == "/clients/intake"
        assert moved["depth"] == 1
        assert archived["is_archived"] is True

    @pytest.mark.asyncio
    async def test_delete_document(self, documents, tenant, workspace) -> None:
        doc = await documents.create_document(tenant["id"], workspace["id"], "Scratch")

        await documents.delete_document(tenant["id"], doc["id"])

        with pytest.raises(NotFoundError):
            await documents.get_document(tenant["id"], doc["id"])

    @pytest.mark.asyncio
    async def test_other_workspace_parent_is_rejected(self, folders, documents, tenant, workspace) -> None:
        other = await WorkspaceService(documents.db).create_workspace(tenant["id"], "Other")
        folder = await folders.create_folder(tenant["id"], other["id"], "Elsewhere")

        with pytest.raises(ValueError):
            await documents.create_document(tenant["id"], workspace["id"], "Memo", parent_id=folder["id"])

    @pytest.mark.asyncio
    async def test_unknown_document(self, documents, tenant) -> None:
        with pytest.raises(NotFoundError):
            await documents.get_document(tenant["id"], uuid.uuid4())
