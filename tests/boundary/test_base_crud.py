"""
Test suite for BaseCRUD generic database operations.

Runs against the in-memory sqlite session with the tag model as a
representative tenant-owned table.

System role: Verification of generic database layer foundation
"""

import uuid

import pytest

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.models.tag_model import TagModel, TagScope


@pytest.fixture
def base_crud() -> BaseCRUD:
    return BaseCRUD(TagModel)


def _fields(tenant_id: uuid.UUID, name: str) -> dict:
    return {
        "tenant_id": tenant_id,
        "name": name,
        "name_normalized": name.lower(),
        "color": "#2196F3",
        "scope": TagScope.TENANT,
        "usage_count": 0,
    }


class TestBaseCRUDCreate:
    """Test suite for BaseCRUD.create()."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamps(self, base_crud, test_async_db, tenant_id) -> None:
        # Act
        tag = await base_crud.create(test_async_db, **_fields(tenant_id, "Urgent"))

        # Assert
        assert isinstance(tag.id, uuid.UUID)
        assert tag.created_at is not None
        assert await base_crud.exists(test_async_db, tag.id)


class TestBaseCRUDTenantScope:
    """Tenant-scoped reads never return another tenant's rows."""

    @pytest.mark.asyncio
    async def test_get_for_tenant(self, base_crud, test_async_db, tenant_id) -> None:
        # Arrange
        other_tenant = uuid.uuid4()
        tag = await base_crud.create(test_async_db, **_fields(tenant_id, "Urgent"))

        # Act
        own = await base_crud.get_for_tenant(test_async_db, tenant_id, tag.id)
        foreign = await base_crud.get_for_tenant(test_async_db, other_tenant, tag.id)

        # Assert
        assert own is tag
        assert foreign is None

    @pytest.mark.asyncio
    async def test_count_for_tenant_with_criteria(self, base_crud, test_async_db, tenant_id) -> None:
        # Arrange
        for name in ("A", "B", "C"):
            await base_crud.create(test_async_db, **_fields(tenant_id, name))
        await base_crud.create(test_async_db, **_fields(uuid.uuid4(), "D"))

        # Act
        total = await base_crud.count_for_tenant(test_async_db, tenant_id)
        named_a = await base_crud.count_for_tenant(test_async_db, tenant_id, TagModel.name == "A")

        # Assert
        assert total == 3
        assert named_a == 1


class TestBaseCRUDReadWriteDelete:
    """get_all, update_by_id and delete_by_id."""

    @pytest.mark.asyncio
    async def test_get_all_paginates(self, base_crud, test_async_db, tenant_id) -> None:
        for name in ("A", "B", "C"):
            await base_crud.create(test_async_db, **_fields(tenant_id, name))

        assert len(await base_crud.get_all(test_async_db)) == 3
        assert len(await base_crud.get_all(test_async_db, limit=2, offset=2)) == 1

    @pytest.mark.asyncio
    async def test_update_by_id(self, base_crud, test_async_db, tenant_id) -> None:
        tag = await base_crud.create(test_async_db, **_fields(tenant_id, "Draft"))

        updated = await base_crud.update_by_id(test_async_db, tag.id, color="#000000")
        missing = await base_crud.update_by_id(test_async_db, uuid.uuid4(), color="#000000")

        assert updated.color == "#000000"
        assert missing is None

    @pytest.mark.asyncio
    async def test_delete_by_id(self, base_crud, test_async_db, tenant_id) -> None:
        tag = await base_crud.create(test_async_db, **_fields(tenant_id, "Draft"))

        assert await base_crud.delete_by_id(test_async_db, tag.id) is True
        assert await base_crud.delete_by_id(test_async_db, tag.id) is False
        assert await base_crud.get_by_id(test_async_db, tag.id) is None
