"""
Test suite for flexible tables, records and the property type catalog.

System role: Verification of schema evolution and record operations
"""

import uuid

import pytest

from astar_backend.application.services.property_type_service import PropertyTypeService
from astar_backend.application.services.record_service import RecordService
from astar_backend.application.services.table_service import TableService
from astar_backend.core.exceptions import (
    BusinessRuleError,
    DuplicateError,
    NotFoundError,
    OptimisticLockError,
    ValidationError,
)
from astar_backend.core.table_schema import MAX_TABLES_PER_WORKSPACE

CASE_PROPERTIES = {
    "title": {"type_id": "text", "display_name": "Title", "required": True},
    "fee": {"type_id": "number", "display_name": "Fee"},
    "status": {
        "type_id": "select",
        "display_name": "Status",
        "config": {"options": [{"value": "open", "label": "Open"}, {"value": "closed", "label": "Closed"}]},
    },
}


@pytest.fixture
async def cases_table(test_async_db, tenant, workspace, catalog, member) -> dict:
    return await TableService(test_async_db).create_table(
        tenant["id"],
        workspace["id"],
        "Cases",
        properties=CASE_PROPERTIES,
        property_order=["title", "status", "fee"],
        created_by=member.id,
    )


class TestPropertyTypeService:
    """Test suite for the property type catalog."""

    @pytest.mark.asyncio
    async def test_seeding_is_idempotent(self, test_async_db, catalog) -> None:
        service = PropertyTypeService(test_async_db)

        assert catalog > 0
        assert await service.seed_builtin_types() == 0

    @pytest.mark.asyncio
    async def test_system_types_cannot_be_deactivated(self, test_async_db, catalog) -> None:
        with pytest.raises(BusinessRuleError):
            await PropertyTypeService(test_async_db).set_active("text", False)

    @pytest.mark.asyncio
    async def test_custom_type_lifecycle(self, test_async_db, catalog) -> None:
        service = PropertyTypeService(test_async_db)

        created = await service.create_custom_type("case_number", "advanced", description="Court case no.")
        patched = await service.patch_type("case_number", icon="hash")
        summary = await service.summary()

        assert created["is_custom"] is True
        assert patched["icon"] == "hash"
        assert summary["custom"] == 1
        with pytest.raises(DuplicateError):
            await service.create_custom_type("case_number", "advanced")

        await service.delete_type("case_number")
        with pytest.raises(NotFoundError):
            await service.get_type("case_number")

    @pytest.mark.asyncio
    async def test_invalid_custom_type_id(self, test_async_db, catalog) -> None:
        with pytest.raises(ValueError):
            await PropertyTypeService(test_async_db).create_custom_type("Case-No", "advanced")


class TestTableService:
    """Test suite for TableService."""

    @pytest.mark.asyncio
    async def test_create_table_keeps_order(self, cases_table) -> None:
        assert cases_table["property_order"] == ["title", "status", "fee"]
        assert cases_table["version"] == 1

    @pytest.mark.asyncio
    async def test_duplicate_table_name(self, test_async_db, tenant, workspace, cases_table) -> None:
        with pytest.raises(DuplicateError):
            await TableService(test_async_db).create_table(tenant["id"], workspace["id"], "Cases")

    @pytest.mark.asyncio
    async def test_table_limit_per_workspace(self, test_async_db, tenant, workspace, catalog) -> None:
        service = TableService(test_async_db)
        for i in range(MAX_TABLES_PER_WORKSPACE):
            await service.create_table(tenant["id"], workspace["id"], f"Table {i}")

        with pytest.raises(BusinessRuleError) as exc_info:
            await service.create_table(tenant["id"], workspace["id"], "One too many")

        assert exc_info.value.details == {"limit": MAX_TABLES_PER_WORKSPACE}

    @pytest.mark.asyncio
    async def test_unknown_workspace(self, test_async_db, tenant, catalog) -> None:
        with pytest.raises(NotFoundError):
            await TableService(test_async_db).create_table(tenant["id"], uuid.uuid4(), "Orphans")

    @pytest.mark.asyncio
    async def test_schema_changes_bump_version(self, test_async_db, tenant, cases_table) -> None:
        service = TableService(test_async_db)

        updated = await service.add_property(
            tenant["id"], cases_table["id"], "court", {"type_id": "text", "display_name": "Court"}, expected_version=1
        )

        assert updated["version"] == 2
        assert updated["property_order"][-1] == "court"

    @pytest.mark.asyncio
    async def test_stale_version_is_rejected(self, test_async_db, tenant, cases_table) -> None:
        service = TableService(test_async_db)
        await service.rename_table(tenant["id"], cases_table["id"], "Matters")

        with pytest.raises(OptimisticLockError):
            await service.remove_property(tenant["id"], cases_table["id"], "fee", expected_version=1)

    @pytest.mark.asyncio
    async def test_remove_property_strips_record_values(self, test_async_db, tenant, cases_table) -> None:
        records = RecordService(test_async_db)
        record = await records.create_record(tenant["id"], cases_table["id"], {"title": "A", "fee": 100})

        await TableService(test_async_db).remove_property(tenant["id"], cases_table["id"], "fee")

        assert (await records.get_record(tenant["id"], record["id"]))["data"] == {"title": "A"}

    @pytest.mark.asyncio
    async def test_template(self, test_async_db, tenant, workspace, catalog) -> None:
        table = await TableService(test_async_db).create_from_template(tenant["id"], workspace["id"], "task")

        assert table["name"] == "Task"
        assert table["property_order"] == ["title", "status", "assignee", "due_date"]

    @pytest.mark.asyncio
    async def test_unknown_template(self, test_async_db, tenant, workspace, catalog) -> None:
        with pytest.raises(ValueError, match="Unknown template"):
            await TableService(test_async_db).create_from_template(tenant["id"], workspace["id"], "rocket")

    @pytest.mark.asyncio
    async def test_duplicate_with_records(self, test_async_db, tenant, cases_table) -> None:
        await RecordService(test_async_db).create_record(tenant["id"], cases_table["id"], {"title": "A"})
        service = TableService(test_async_db)

        copy = await service.duplicate_table(tenant["id"], cases_table["id"], include_records=True)
        stats = await service.get_statistics(tenant["id"], copy["id"])

        assert copy["name"] == "Cases (copy)"
        assert copy["properties"] == cases_table["properties"]
        assert stats["record_count"] == 1

    @pytest.mark.asyncio
    async def test_csv_export_and_import(self, test_async_db, tenant, cases_table) -> None:
        # Arrange
        service = TableService(test_async_db)
        csv_text = "Title,Fee,Status,Unknown\nSmith v. Jones,1500,open,x\n,20,open,y\nDoe,abc,closed,z\n"

        # Act
        result = await service.import_csv(tenant["id"], cases_table["id"], csv_text)
        exported = await service.export_csv(tenant["id"], cases_table["id"])

        # Assert
        assert result["imported"] == 1
        assert result["skipped"] == 2
        assert [e["row"] for e in result["errors"]] == [3, 4]
        lines = exported.strip().splitlines()
        assert lines[0] == "Title,Status,Fee"
        assert lines[1] == "Smith v. Jones,open,1500"

    @pytest.mark.asyncio
    async def test_csv_header_must_match(self, test_async_db, tenant, cases_table) -> None:
        with pytest.raises(ValueError):
            await TableService(test_async_db).import_csv(tenant["id"], cases_table["id"], "a,b\n1,2\n")


class TestRecordService:
    """Test suite for RecordService."""

    @pytest.mark.asyncio
    async def test_invalid_data_is_rejected(self, test_async_db, tenant, cases_table) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await RecordService(test_async_db).create_record(
                tenant["id"], cases_table["id"], {"title": "A", "status": "pending"}
            )

        assert exc_info.value.details["errors"] == ["status: Value 'pending' is not one of the configured options"]

    @pytest.mark.asyncio
    async def test_batch_is_all_or_nothing(self, test_async_db, tenant, cases_table) -> None:
        service = RecordService(test_async_db)

        with pytest.raises(ValidationError):
            await service.batch_create(tenant["id"], cases_table["id"], [{"title": "A"}, {"fee": 1}])

        assert await service.count_records(tenant["id"], cases_table["id"]) == 0

    @pytest.mark.asyncio
    async def test_positions_and_moves(self, test_async_db, tenant, cases_table) -> None:
        # Arrange
        service = RecordService(test_async_db)
        a, b, c = await service.batch_create(
            tenant["id"], cases_table["id"], [{"title": "A"}, {"title": "B"}, {"title": "C"}]
        )

        # Act
        await service.move_record(tenant["id"], c["id"], after_record_id=a["id"])
        page = await service.list_records(tenant["id"], cases_table["id"])

        # Assert
        assert a["position"] < b["position"] < c["position"]
        assert [r["data"]["title"] for r in page["items"]] == ["A", "C", "B"]

    @pytest.mark.asyncio
    async def test_move_to_top(self, test_async_db, tenant, cases_table) -> None:
        service = RecordService(test_async_db)
        a, b = await service.batch_create(tenant["id"], cases_table["id"], [{"title": "A"}, {"title": "B"}])

        await service.move_record(tenant["id"], b["id"])
        page = await service.list_records(tenant["id"], cases_table["id"])

        assert [r["data"]["title"] for r in page["items"]] == ["B", "A"]

    @pytest.mark.asyncio
    async def test_copy_lands_below_original(self, test_async_db, tenant, cases_table) -> None:
        service = RecordService(test_async_db)
        a, b = await service.batch_create(tenant["id"], cases_table["id"], [{"title": "A"}, {"title": "B"}])

        copy = await service.copy_record(tenant["id"], a["id"])

        assert a["position"] < copy["position"] < b["position"]
        assert copy["data"] == {"title": "A"}

    @pytest.mark.asyncio
    async def test_listing_pages_sorts_and_searches(self, test_async_db, tenant, cases_table) -> None:
        service = RecordService(test_async_db)
        await service.batch_create(
            tenant["id"],
            cases_table["id"],
            [{"title": "Alpha", "fee": 30}, {"title": "Beta", "fee": 10}, {"title": "Gamma", "fee": 20}],
        )

        by_fee = await service.list_records(tenant["id"], cases_table["id"], sort_by="fee", size=2)
        found = await service.list_records(tenant["id"], cases_table["id"], search="gam")

        assert [r["data"]["title"] for r in by_fee["items"]] == ["Beta", "Gamma"]
        assert by_fee["total"] == 3
        assert by_fee["has_next"] is True
        assert [r["data"]["title"] for r in found["items"]] == ["Gamma"]

    @pytest.mark.asyncio
    async def test_list_unknown_sort_key(self, test_async_db, tenant, cases_table) -> None:
        with pytest.raises(ValueError):
            await RecordService(test_async_db).list_records(tenant["id"], cases_table["id"], sort_by="ghost")

    @pytest.mark.asyncio
    async def test_update_merges_and_field_update(self, test_async_db, tenant, cases_table) -> None:
        service = RecordService(test_async_db)
        record = await service.create_record(tenant["id"], cases_table["id"], {"title": "A", "fee": 1})

        merged = await service.update_record(tenant["id"], record["id"], {"status": "open"})
        field = await service.update_field(tenant["id"], record["id"], "fee", 99)

        assert merged["data"] == {"title": "A", "fee": 1, "status": "open"}
        assert field["data"]["fee"] == 99
        with pytest.raises(ValueError):
            await service.update_field(tenant["id"], record["id"], "ghost", 1)

    @pytest.mark.asyncio
    async def test_bulk_update_and_batch_delete(self, test_async_db, tenant, cases_table) -> None:
        service = RecordService(test_async_db)
        a, b = await service.batch_create(tenant["id"], cases_table["id"], [{"title": "A"}, {"title": "B"}])

        updated = await service.bulk_update_field(
            tenant["id"], cases_table["id"], [a["id"], b["id"]], "status", "closed"
        )
        deleted = await service.batch_delete(tenant["id"], cases_table["id"], [a["id"]])

        assert updated == 2
        assert deleted == 1
        assert await service.count_records(tenant["id"], cases_table["id"]) == 1

    @pytest.mark.asyncio
    async def test_clear_requires_confirmation(self, test_async_db, tenant, cases_table) -> None:
        service = RecordService(test_async_db)
        await service.create_record(tenant["id"], cases_table["id"], {"title": "A"})

        with pytest.raises(ValueError):
            await service.clear_table(tenant["id"], cases_table["id"])
        assert await service.clear_table(tenant["id"], cases_table["id"], confirm=True) == 1

    @pytest.mark.asyncio
    async def test_other_tenant_cannot_read_record(self, test_async_db, tenant, cases_table) -> None:
        record = await RecordService(test_async_db).create_record(tenant["id"], cases_table["id"], {"title": "A"})

        with pytest.raises(NotFoundError):
            await RecordService(test_async_db).get_record(uuid.uuid4(), record["id"])

    @pytest.mark.asyncio
    async def test_validate_data_reports_without_writing(self, test_async_db, tenant, cases_table) -> None:
        errors = await RecordService(test_async_db).validate_data(tenant["id"], cases_table["id"], {"fee": "x"})

        assert "title: Required property is missing" in errors
        assert "fee: Value must be a number" in errors
