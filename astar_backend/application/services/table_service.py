"""
Flexible table service orchestrator.

Table lifecycle and schema editing, template instantiation, duplication,
statistics and CSV import/export. Every schema change bumps the table
version; callers that pass `expected_version` get optimistic locking.

Dependencies: astar_backend.boundary.db.CRUD, astar_backend.core.table_schema
System role: Flexible table use case orchestration
"""

import csv
import io
import logging
from collections import Counter
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.application.services.property_type_service import PropertyTypeService
from astar_backend.application.services.workspace_service import WorkspaceService
from astar_backend.boundary.db.CRUD.table_crud import record_crud, table_crud
from astar_backend.boundary.db.models.table_model import TableModel
from astar_backend.core import table_schema
from astar_backend.core.exceptions import (
    BusinessRuleError,
    DuplicateError,
    NotFoundError,
    OptimisticLockError,
)
from astar_backend.core.positions import next_position
from astar_backend.core.property_types import BUILTIN_TYPE_IDS, coerce_csv_value, format_csv_value
from astar_backend.core.records import MAX_BATCH_SIZE, validate_record_data
from astar_backend.core.table_schema import PropertyDefinition

logger = logging.getLogger(__name__)


def table_to_dict(table: TableModel) -> dict:
    return {
        "id": table.id,
        "workspace_id": table.workspace_id,
        "name": table.name,
        "description": table.description,
        "properties": table.properties or {},
        "property_order": table_schema.ordered_keys(table.properties or {}, table.property_order),
        "version": table.version,
        "created_by": table.created_by,
        "created_at": table.created_at,
        "updated_at": table.updated_at,
    }


class TableService:
    """Flexible table service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize table service with async database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db
        self.workspaces = WorkspaceService(db)
        self.property_types = PropertyTypeService(db)

    async def get_model(self, tenant_id: UUID, table_id: UUID) -> TableModel:
        table = await table_crud.get_for_tenant(self.db, tenant_id, table_id)
        if table is None:
            raise NotFoundError("Table", table_id)
        return table

    async def known_type_ids(self) -> set[str] | frozenset[str]:
        """Active catalog ids, or the built-ins while the catalog is empty."""
        active = await self.property_types.active_type_ids()
        return active or BUILTIN_TYPE_IDS

    async def type_schemas(self) -> dict[str, dict]:
        types = await self.property_types.get_active_types()
        return {type_id: entry.validation_schema or {} for type_id, entry in types.items()}

    def _check_version(self, table: TableModel, expected_version: int | None) -> None:
        if expected_version is not None and expected_version != table.version:
            raise OptimisticLockError("Table", table.id, expected_version, table.version)

    async def _save_schema(
        self,
        table: TableModel,
        properties: dict[str, dict],
        order: list[str],
        user_id: UUID | None,
    ) -> dict:
        table.properties = properties
        table.property_order = order
        table.version += 1
        table.updated_by = user_id
        await self.db.flush()
        return table_to_dict(table)

    async def _ensure_unique_name(self, workspace_id: UUID, name: str, exclude_id: UUID | None = None) -> None:
        existing = await table_crud.get_by_name(self.db, workspace_id, name)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateError(
                f"Table with name '{name}' already exists in this workspace",
                {"name": name},
            )

    async def create_table(
        self,
        tenant_id: UUID,
        workspace_id: UUID,
        name: str,
        description: str | None = None,
        properties: dict[str, dict] | None = None,
        property_order: list[str] | None = None,
        created_by: UUID | None = None,
    ) -> dict:
        """
        Create a table, optionally with an initial schema.

        Args:
            tenant_id: Caller's tenant
            workspace_id: Target workspace (must belong to the tenant)
            name: Unique within the workspace
            description: Optional description
            properties: Initial property definitions keyed by property key
            property_order: Initial display order
            created_by: Creator

        Returns:
            dict: Created table

        Raises:
            NotFoundError: Workspace missing
            ValueError: Invalid name or property definitions
            DuplicateError: Name taken in the workspace
            BusinessRuleError: Workspace table limit reached
        """
        await self.workspaces.get_model(tenant_id, workspace_id)
        name = table_schema.validate_table_name(name)
        await self._ensure_unique_name(workspace_id, name)
        if await table_crud.count_in_workspace(self.db, workspace_id) >= table_schema.MAX_TABLES_PER_WORKSPACE:
            raise BusinessRuleError(
                f"Workspace cannot have more than {table_schema.MAX_TABLES_PER_WORKSPACE} tables",
                {"limit": table_schema.MAX_TABLES_PER_WORKSPACE},
            )

        known = await self.known_type_ids()
        schema: dict[str, dict] = {}
        order: list[str] = []
        for key, raw in (properties or {}).items():
            schema, order = table_schema.add_property(
                schema, order, key, PropertyDefinition.from_dict(raw), known
            )
        if property_order:
            order = table_schema.reorder_properties(schema, property_order)

        table = await table_crud.create(
            self.db,
            tenant_id=tenant_id,
            workspace_id=workspace_id,
            name=name,
            description=description,
            properties=schema,
            property_order=order,
            version=1,
            created_by=created_by,
            updated_by=created_by,
        )
        logger.info(
            "Table created",
            extra={
                "tenant_id": str(tenant_id),
                "table_id": str(table.id),
                "property_count": len(schema),
            },
        )
        return table_to_dict(table)

    async def create_from_template(
        self,
        tenant_id: UUID,
        workspace_id: UUID,
        template: str,
        name: str | None = None,
        created_by: UUID | None = None,
    ) -> dict:
        definition = table_schema.TABLE_TEMPLATES.get(template)
        if definition is None:
            raise ValueError(
                f"Unknown template: {template} (available: {', '.join(sorted(table_schema.TABLE_TEMPLATES))})"
            )
        return await self.create_table(
            tenant_id,
            workspace_id,
            name or template.replace("_", " ").title(),
            description=definition["description"],
            properties=definition["properties"],
            property_order=definition["order"],
            created_by=created_by,
        )

    async def list_templates(self) -> list[dict]:
        return [
            {
                "name": template,
                "description": definition["description"],
                "properties": definition["order"],
            }
            for template, definition in table_schema.TABLE_TEMPLATES.items()
        ]

    async def get_table(self, tenant_id: UUID, table_id: UUID) -> dict:
        return table_to_dict(await self.get_model(tenant_id, table_id))

    async def list_tables(self, tenant_id: UUID, workspace_id: UUID) -> list[dict]:
        await self.workspaces.get_model(tenant_id, workspace_id)
        tables = await table_crud.list_by_workspace(self.db, tenant_id, workspace_id)
        return [table_to_dict(t) for t in tables]

    async def rename_table(
        self,
        tenant_id: UUID,
        table_id: UUID,
        name: str,
        expected_version: int | None = None,
        user_id: UUID | None = None,
    ) -> dict:
        table = await self.get_model(tenant_id, table_id)
        self._check_version(table, expected_version)
        name = table_schema.validate_table_name(name)
        await self._ensure_unique_name(table.workspace_id, name, exclude_id=table.id)
        table.name = name
        table.version += 1
        table.updated_by = user_id
        await self.db.flush()
        return table_to_dict(table)

    async def update_description(
        self,
        tenant_id: UUID,
        table_id: UUID,
        description: str | None,
        user_id: UUID | None = None,
    ) -> dict:
        table = await self.get_model(tenant_id, table_id)
        table.description = description
        table.updated_by = user_id
        await self.db.flush()
        return table_to_dict(table)

    async def add_property(
        self,
        tenant_id: UUID,
        table_id: UUID,
        key: str,
        definition: dict[str, Any],
        expected_version: int | None = None,
        user_id: UUID | None = None,
    ) -> dict:
        table = await self.get_model(tenant_id, table_id)
        self._check_version(table, expected_version)
        properties, order = table_schema.add_property(
            table.properties or {},
            table.property_order or [],
            key,
            PropertyDefinition.from_dict(definition),
            await self.known_type_ids(),
        )
        logger.info("Property added", extra={"table_id": str(table_id), "property_key": key})
        return await self._save_schema(table, properties, order, user_id)

    async def update_property(
        self,
        tenant_id: UUID,
        table_id: UUID,
        key: str,
        definition: dict[str, Any],
        expected_version: int | None = None,
        user_id: UUID | None = None,
    ) -> dict:
        table = await self.get_model(tenant_id, table_id)
        self._check_version(table, expected_version)
        properties = table_schema.update_property(
            table.properties or {},
            key,
            PropertyDefinition.from_dict(definition),
            await self.known_type_ids(),
        )
        return await self._save_schema(table, properties, list(table.property_order or []), user_id)

    async def remove_property(
        self,
        tenant_id: UUID,
        table_id: UUID,
        key: str,
        expected_version: int | None = None,
        user_id: UUID | None = None,
    ) -> dict:
        """Drop a property from the schema and its value from every record."""
        table = await self.get_model(tenant_id, table_id)
        self._check_version(table, expected_version)
        properties, order = table_schema.remove_property(
            table.properties or {}, table.property_order or [], key
        )
        for record in await record_crud.list_by_table(self.db, table.id):
            if key in (record.data or {}):
                record.data = {k: v for k, v in record.data.items() if k != key}
        logger.info("Property removed", extra={"table_id": str(table_id), "property_key": key})
        return await self._save_schema(table, properties, order, user_id)

    async def reorder_properties(
        self,
        tenant_id: UUID,
        table_id: UUID,
        new_order: list[str],
        expected_version: int | None = None,
        user_id: UUID | None = None,
    ) -> dict:
        table = await self.get_model(tenant_id, table_id)
        self._check_version(table, expected_version)
        order = table_schema.reorder_properties(table.properties or {}, new_order)
        return await self._save_schema(table, dict(table.properties or {}), order, user_id)

    async def get_schema(self, tenant_id: UUID, table_id: UUID) -> list[dict]:
        """Property definitions in display order, each with its key."""
        table = await self.get_model(tenant_id, table_id)
        return [
            {"key": key, **definition}
            for key, definition in table_schema.ordered_properties(table.properties or {}, table.property_order)
        ]

    async def duplicate_table(
        self,
        tenant_id: UUID,
        table_id: UUID,
        new_name: str | None = None,
        include_records: bool = False,
        user_id: UUID | None = None,
    ) -> dict:
        source = await self.get_model(tenant_id, table_id)
        name = new_name or f"{source.name} (copy)"
        created = await self.create_table(
            tenant_id,
            source.workspace_id,
            name,
            description=source.description,
            created_by=user_id,
        )
        copy = await self.get_model(tenant_id, created["id"])
        copy.properties = dict(source.properties or {})
        copy.property_order = list(source.property_order or [])

        copied = 0
        if include_records:
            for record in await record_crud.list_by_table(self.db, source.id):
                await record_crud.create(
                    self.db,
                    tenant_id=tenant_id,
                    table_id=copy.id,
                    data=dict(record.data or {}),
                    position=record.position,
                    created_by=user_id,
                    updated_by=user_id,
                )
                copied += 1
        await self.db.flush()
        logger.info(
            "Table duplicated",
            extra={"source_id": str(table_id), "table_id": str(copy.id), "records": copied},
        )
        return table_to_dict(copy)

    async def delete_table(self, tenant_id: UUID, table_id: UUID) -> None:
        table = await self.get_model(tenant_id, table_id)
        removed = await record_crud.delete_by_table(self.db, table.id)
        await table_crud.delete_by_id(self.db, table.id)
        logger.info("Table deleted", extra={"table_id": str(table_id), "records": removed})

    async def get_statistics(self, tenant_id: UUID, table_id: UUID) -> dict:
        table = await self.get_model(tenant_id, table_id)
        properties = table.properties or {}
        type_counts = Counter(d.get("type_id") for d in properties.values())
        return {
            "table_id": table.id,
            "record_count": await record_crud.count_by_table(self.db, table.id),
            "property_count": len(properties),
            "property_types": dict(type_counts),
            "version": table.version,
        }

    async def export_csv(self, tenant_id: UUID, table_id: UUID) -> str:
        """
        Export records as CSV with display names as header.

        Args:
            tenant_id: Caller's tenant
            table_id: Table UUID

        Returns:
            str: CSV text (header row plus one row per record in position order)
        """
        table = await self.get_model(tenant_id, table_id)
        ordered = table_schema.ordered_properties(table.properties or {}, table.property_order)

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow([definition.get("display_name", key) for key, definition in ordered])
        for record in await record_crud.list_by_table(self.db, table.id):
            data = record.data or {}
            writer.writerow([format_csv_value(data.get(key)) for key, _ in ordered])
        return buffer.getvalue()

    async def import_csv(
        self,
        tenant_id: UUID,
        table_id: UUID,
        content: str,
        user_id: UUID | None = None,
    ) -> dict:
        """
        Import CSV rows as new records.

        Header cells are matched to display names first, then keys. Columns
        that match nothing are ignored. Rows failing validation are skipped
        and reported.

        Returns:
            dict: {"imported": count, "skipped": count, "errors": [{"row", "errors"}]}
        """
        table = await self.get_model(tenant_id, table_id)
        properties = table.properties or {}
        by_display = {d.get("display_name"): key for key, d in properties.items()}

        reader = csv.reader(io.StringIO(content))
        header = next(reader, None)
        if header is None:
            raise ValueError("CSV content is empty")

        columns: list[str | None] = []
        for cell in header:
            cell = cell.strip()
            columns.append(by_display.get(cell) or (cell if cell in properties else None))
        if not any(columns):
            raise ValueError("CSV header does not match any property of this table")

        schemas = await self.type_schemas()
        position = await record_crud.max_position(self.db, table.id)
        imported, errors = 0, []
        for row_number, row in enumerate(reader, start=2):
            if not any(cell.strip() for cell in row):
                continue
            if imported >= MAX_BATCH_SIZE:
                errors.append({"row": row_number, "errors": [f"Import limited to {MAX_BATCH_SIZE} rows"]})
                break
            data = {}
            for key, cell in zip(columns, row):
                if key is None:
                    continue
                value = coerce_csv_value(properties[key].get("type_id", ""), cell)
                if value is not None:
                    data[key] = value
            row_errors = validate_record_data(properties, data, schemas)
            if row_errors:
                errors.append({"row": row_number, "errors": row_errors})
                continue
            position = next_position(position)
            await record_crud.create(
                self.db,
                tenant_id=tenant_id,
                table_id=table.id,
                data=data,
                position=position,
                created_by=user_id,
                updated_by=user_id,
            )
            imported += 1

        logger.info(
            "CSV imported",
            extra={"table_id": str(table_id), "imported": imported, "skipped": len(errors)},
        )
        return {"imported": imported, "skipped": len(errors), "errors": errors}
