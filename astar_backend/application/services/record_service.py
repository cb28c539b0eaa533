"""
Record service orchestrator.

Rows of flexible tables: validated writes, fractional positions, batch
operations, paging with sort, filter and search.

Dependencies: astar_backend.boundary.db.CRUD, astar_backend.core.records, astar_backend.core.positions
System role: Flexible record use case orchestration
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.application.services.table_service import TableService
from astar_backend.boundary.db.CRUD.table_crud import record_crud
from astar_backend.boundary.db.models.table_model import RecordModel, TableModel
from astar_backend.core import positions
from astar_backend.core.exceptions import NotFoundError, ValidationError
from astar_backend.core.records import (
    DEFAULT_PAGE_SIZE,
    MAX_BATCH_SIZE,
    MAX_PAGE_SIZE,
    matches_filters,
    matches_search,
    sort_key,
    validate_record_data,
)

logger = logging.getLogger(__name__)


def record_to_dict(record: RecordModel) -> dict:
    return {
        "id": record.id,
        "table_id": record.table_id,
        "data": record.data or {},
        "position": record.position,
        "created_by": record.created_by,
        "updated_by": record.updated_by,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


class RecordService:
    """Record service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.tables = TableService(db)

    async def _get_record(self, tenant_id: UUID, record_id: UUID) -> RecordModel:
        record = await record_crud.get_for_tenant(self.db, tenant_id, record_id)
        if record is None:
            raise NotFoundError("Record", record_id)
        return record

    async def _validate(self, table: TableModel, data: dict, partial: bool = False) -> None:
        errors = validate_record_data(
            table.properties or {},
            data,
            await self.tables.type_schemas(),
            partial=partial,
        )
        if errors:
            raise ValidationError(
                "Record data is invalid",
                field="data",
                details={"errors": errors},
            )

    @staticmethod
    def _check_batch(size: int) -> None:
        if size > MAX_BATCH_SIZE:
            raise ValidationError(
                f"Batch size cannot exceed {MAX_BATCH_SIZE}",
                details={"size": size, "limit": MAX_BATCH_SIZE},
            )

    async def create_record(
        self,
        tenant_id: UUID,
        table_id: UUID,
        data: dict[str, Any],
        position: float | None = None,
        user_id: UUID | None = None,
    ) -> dict:
        """
        Create a record.

        Args:
            tenant_id: Caller's tenant
            table_id: Target table
            data: Values keyed by property key
            position: Explicit position (appended at the end when None)
            user_id: Author

        Returns:
            dict: Created record

        Raises:
            NotFoundError: Table missing
            ValidationError: Data does not match the schema
            ValueError: Non-positive position
        """
        table = await self.tables.get_model(tenant_id, table_id)
        await self._validate(table, data)
        if position is None:
            position = positions.next_position(await record_crud.max_position(self.db, table.id))
        else:
            position = positions.validate_position(position)

        record = await record_crud.create(
            self.db,
            tenant_id=tenant_id,
            table_id=table.id,
            data=data,
            position=position,
            created_by=user_id,
            updated_by=user_id,
        )
        logger.debug("Record created", extra={"table_id": str(table_id), "record_id": str(record.id)})
        return record_to_dict(record)

    async def batch_create(
        self,
        tenant_id: UUID,
        table_id: UUID,
        items: list[dict[str, Any]],
        user_id: UUID | None = None,
    ) -> list[dict]:
        """Create many records; nothing is written when any item is invalid."""
        self._check_batch(len(items))
        table = await self.tables.get_model(tenant_id, table_id)
        schemas = await self.tables.type_schemas()

        failures = []
        for index, data in enumerate(items):
            errors = validate_record_data(table.properties or {}, data, schemas)
            if errors:
                failures.append({"index": index, "errors": errors})
        if failures:
            raise ValidationError("Batch contains invalid records", details={"failures": failures})

        position = await record_crud.max_position(self.db, table.id)
        created = []
        for data in items:
            position = positions.next_position(position)
            record = await record_crud.create(
                self.db,
                tenant_id=tenant_id,
                table_id=table.id,
                data=data,
                position=position,
                created_by=user_id,
                updated_by=user_id,
            )
            created.append(record_to_dict(record))
        logger.info("Records batch created", extra={"table_id": str(table_id), "count": len(created)})
        return created

    async def get_record(self, tenant_id: UUID, record_id: UUID) -> dict:
        return record_to_dict(await self._get_record(tenant_id, record_id))

    async def update_record(
        self,
        tenant_id: UUID,
        record_id: UUID,
        data: dict[str, Any],
        merge: bool = True,
        user_id: UUID | None = None,
    ) -> dict:
        """Merge `data` into the record (merge=True) or replace it."""
        record = await self._get_record(tenant_id, record_id)
        table = await self.tables.get_model(tenant_id, record.table_id)
        new_data = {**(record.data or {}), **data} if merge else dict(data)
        await self._validate(table, new_data)
        record.data = new_data
        record.updated_by = user_id
        await self.db.flush()
        return record_to_dict(record)

    async def update_field(
        self,
        tenant_id: UUID,
        record_id: UUID,
        key: str,
        value: Any,
        user_id: UUID | None = None,
    ) -> dict:
        record = await self._get_record(tenant_id, record_id)
        table = await self.tables.get_model(tenant_id, record.table_id)
        if key not in (table.properties or {}):
            raise ValueError(f"Property with key '{key}' does not exist")
        await self._validate(table, {key: value}, partial=True)
        record.data = {**(record.data or {}), key: value}
        record.updated_by = user_id
        await self.db.flush()
        return record_to_dict(record)

    async def delete_record(self, tenant_id: UUID, record_id: UUID) -> None:
        record = await self._get_record(tenant_id, record_id)
        await record_crud.delete_by_id(self.db, record.id)

    async def batch_delete(self, tenant_id: UUID, table_id: UUID, record_ids: list[UUID]) -> int:
        self._check_batch(len(record_ids))
        table = await self.tables.get_model(tenant_id, table_id)
        deleted = await record_crud.delete_many(self.db, table.id, record_ids)
        logger.info("Records batch deleted", extra={"table_id": str(table_id), "count": deleted})
        return deleted

    async def move_record(
        self,
        tenant_id: UUID,
        record_id: UUID,
        after_record_id: UUID | None = None,
    ) -> dict:
        """
        Move a record directly after another one, or to the top when None.

        Raises:
            NotFoundError: Record or anchor missing
            ValueError: Anchor is in another table or is the record itself
        """
        record = await self._get_record(tenant_id, record_id)
        if after_record_id is None:
            first = await record_crud.min_position(self.db, record.table_id)
            if first is None or record.position == first:
                return record_to_dict(record)
            record.position = positions.position_between(None, first)
        else:
            if after_record_id == record.id:
                raise ValueError("A record cannot be moved after itself")
            anchor = await self._get_record(tenant_id, after_record_id)
            if anchor.table_id != record.table_id:
                raise ValueError("Records belong to different tables")
            following = await record_crud.next_position_after(self.db, record.table_id, anchor.position)
            if following == record.position:
                following = await record_crud.next_position_after(self.db, record.table_id, record.position)
            if positions.needs_rebalance(anchor.position, following):
                await self._rebalance(record.table_id)
                await self.db.refresh(anchor)
                following = await record_crud.next_position_after(self.db, record.table_id, anchor.position)
            record.position = positions.position_between(anchor.position, following)
        await self.db.flush()
        return record_to_dict(record)

    async def _rebalance(self, table_id: UUID) -> None:
        records = await record_crud.list_by_table(self.db, table_id)
        for record, position in zip(records, positions.spaced_positions(len(records))):
            record.position = position
        await self.db.flush()

    async def reorder_records(self, tenant_id: UUID, table_id: UUID, record_ids: list[UUID]) -> list[dict]:
        """Give the listed records evenly spaced positions in the given order."""
        self._check_batch(len(record_ids))
        table = await self.tables.get_model(tenant_id, table_id)
        records = {r.id: r for r in await record_crud.get_many(self.db, table.id, record_ids)}
        missing = [str(rid) for rid in record_ids if rid not in records]
        if missing:
            raise NotFoundError("Record", ", ".join(missing))
        for record_id, position in zip(record_ids, positions.spaced_positions(len(record_ids))):
            records[record_id].position = position
        await self.db.flush()
        return [record_to_dict(records[rid]) for rid in record_ids]

    async def copy_record(self, tenant_id: UUID, record_id: UUID, user_id: UUID | None = None) -> dict:
        """Duplicate a record directly below the original."""
        source = await self._get_record(tenant_id, record_id)
        following = await record_crud.next_position_after(self.db, source.table_id, source.position)
        record = await record_crud.create(
            self.db,
            tenant_id=tenant_id,
            table_id=source.table_id,
            data=dict(source.data or {}),
            position=positions.position_between(source.position, following),
            created_by=user_id,
            updated_by=user_id,
        )
        return record_to_dict(record)

    async def list_records(
        self,
        tenant_id: UUID,
        table_id: UUID,
        page: int = 0,
        size: int = DEFAULT_PAGE_SIZE,
        sort_by: str = "position",
        descending: bool = False,
        filters: dict[str, Any] | None = None,
        search: str | None = None,
    ) -> dict:
        """
        Page through records.

        Sorting by a property key and filtering operate on the JSON values
        of the table's records.

        Args:
            tenant_id: Caller's tenant
            table_id: Table UUID
            page: Zero-based page index
            size: Page size (1..1000)
            sort_by: "position" or a property key
            descending: Sort direction
            filters: Equality filters per property key
            search: Substring matched against string values

        Returns:
            dict: items, total, page, size, has_next
        """
        if page < 0:
            raise ValueError("Page must not be negative")
        if size < 1 or size > MAX_PAGE_SIZE:
            raise ValueError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
        table = await self.tables.get_model(tenant_id, table_id)
        if sort_by != "position" and sort_by not in (table.properties or {}):
            raise ValueError(f"Property with key '{sort_by}' does not exist")

        records = [
            r
            for r in await record_crud.list_by_table(self.db, table.id)
            if matches_filters(r.data or {}, filters) and matches_search(r.data or {}, search)
        ]
        if sort_by == "position":
            records.sort(key=lambda r: r.position, reverse=descending)
        else:
            records.sort(key=lambda r: sort_key(r.data or {}, sort_by), reverse=descending)

        start = page * size
        items = records[start:start + size]
        return {
            "items": [record_to_dict(r) for r in items],
            "total": len(records),
            "page": page,
            "size": size,
            "has_next": start + size < len(records),
        }

    async def count_records(self, tenant_id: UUID, table_id: UUID) -> int:
        table = await self.tables.get_model(tenant_id, table_id)
        return await record_crud.count_by_table(self.db, table.id)

    async def clear_table(self, tenant_id: UUID, table_id: UUID, confirm: bool = False) -> int:
        if not confirm:
            raise ValueError("Clearing a table requires confirm=true")
        table = await self.tables.get_model(tenant_id, table_id)
        deleted = await record_crud.delete_by_table(self.db, table.id)
        logger.warning("Table cleared", extra={"table_id": str(table_id), "records": deleted})
        return deleted

    async def bulk_update_field(
        self,
        tenant_id: UUID,
        table_id: UUID,
        record_ids: list[UUID],
        key: str,
        value: Any,
        user_id: UUID | None = None,
    ) -> int:
        """Set one property on many records of a table."""
        self._check_batch(len(record_ids))
        table = await self.tables.get_model(tenant_id, table_id)
        if key not in (table.properties or {}):
            raise ValueError(f"Property with key '{key}' does not exist")
        await self._validate(table, {key: value}, partial=True)
        records = await record_crud.get_many(self.db, table.id, record_ids)
        for record in records:
            record.data = {**(record.data or {}), key: value}
            record.updated_by = user_id
        await self.db.flush()
        return len(records)

    async def validate_data(
        self,
        tenant_id: UUID,
        table_id: UUID,
        data: dict[str, Any],
        partial: bool = False,
    ) -> list[str]:
        table = await self.tables.get_model(tenant_id, table_id)
        return validate_record_data(
            table.properties or {}, data, await self.tables.type_schemas(), partial=partial
        )
