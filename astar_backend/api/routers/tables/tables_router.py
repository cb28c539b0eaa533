"""
Flexible table API endpoints.

Routes:
- GET /tables?workspace_id= - List tables of a workspace
- POST /tables - Create table
- GET /tables/templates - Available templates
- POST /tables/from-template - Create table from template
- GET /tables/{table_id} - Get table
- PUT /tables/{table_id} - Rename / describe table
- DELETE /tables/{table_id} - Delete table and its records
- POST /tables/{table_id}/duplicate - Copy table
- GET /tables/{table_id}/schema - Ordered property definitions
- GET /tables/{table_id}/statistics - Record and property counts
- POST /tables/{table_id}/properties - Add property
- PUT /tables/{table_id}/properties/{key} - Replace property definition
- DELETE /tables/{table_id}/properties/{key} - Remove property
- PUT /tables/{table_id}/properties-order - Reorder properties
- GET /tables/{table_id}/export - CSV export
- POST /tables/{table_id}/import - CSV import

Dependencies: astar_backend.application.services.table_service
System role: Flexible table HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from astar_backend.api.deps.dependencies import get_table_service, require_permission
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.table_service import TableService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.table import (
    AddPropertyRequest,
    CreateFromTemplateRequest,
    CreateTableRequest,
    CsvImportRequest,
    CsvImportResponse,
    DuplicateTableRequest,
    ReorderPropertiesRequest,
    SchemaPropertyResponse,
    TableResponse,
    TableStatisticsResponse,
    TemplateResponse,
    UpdatePropertyRequest,
    UpdateTableRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tables", tags=["tables"])


@router.get("", response_model=list[TableResponse])
@handle_domain_errors
async def list_tables(
    workspace_id: UUID = Query(..., description="Workspace to list tables of"),
    user: AuthenticatedUser = Depends(require_permission("table.view.all")),
    table_service: TableService = Depends(get_table_service),
) -> list[TableResponse]:
    tables = await table_service.list_tables(user.tenant_id, workspace_id)
    return [TableResponse(**t) for t in tables]


@router.post("", response_model=TableResponse, status_code=201)
@handle_domain_errors
async def create_table(
    request: CreateTableRequest,
    user: AuthenticatedUser = Depends(require_permission("table.create.all")),
    table_service: TableService = Depends(get_table_service),
) -> TableResponse:
    """
    Create a table in a workspace.

    Raises:
        HTTPException(400): Invalid name or property definitions
        HTTPException(404): Workspace not found
        HTTPException(409): Name taken in the workspace
        HTTPException(422): Table limit reached
    """
    logger.info(
        "Creating table",
        extra={"workspace_id": str(request.workspace_id), "table_name": request.name},
    )
    table = await table_service.create_table(
        user.tenant_id,
        request.workspace_id,
        request.name,
        description=request.description,
        properties={k: v.model_dump() for k, v in request.properties.items()},
        property_order=request.property_order,
        created_by=user.user_id,
    )
    logger.info("Table created successfully", extra={"table_id": str(table["id"])})
    return TableResponse(**table)


@router.get("/templates", response_model=list[TemplateResponse])
@handle_domain_errors
async def list_templates(
    user: AuthenticatedUser = Depends(require_permission("table.view.all")),
    table_service: TableService = Depends(get_table_service),
) -> list[TemplateResponse]:
    return [TemplateResponse(**t) for t in await table_service.list_templates()]


@router.post("/from-template", response_model=TableResponse, status_code=201)
@handle_domain_errors
async def create_from_template(
    request: CreateFromTemplateRequest,
    user: AuthenticatedUser = Depends(require_permission("table.create.all")),
    table_service: TableService = Depends(get_table_service),
) -> TableResponse:
    table = await table_service.create_from_template(
        user.tenant_id,
        request.workspace_id,
        request.template,
        name=request.name,
        created_by=user.user_id,
    )
    return TableResponse(**table)


@router.get("/{table_id}", response_model=TableResponse)
@handle_domain_errors
async def get_table(
    table_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("table.view.all")),
    table_service: TableService = Depends(get_table_service),
) -> TableResponse:
    return TableResponse(**await table_service.get_table(user.tenant_id, table_id))


@router.put("/{table_id}", response_model=TableResponse)
@handle_domain_errors
async def update_table(
    table_id: UUID,
    request: UpdateTableRequest,
    user: AuthenticatedUser = Depends(require_permission("table.edit.all")),
    table_service: TableService = Depends(get_table_service),
) -> TableResponse:
    """
    Rename a table and/or change its description.

    Raises:
        HTTPException(409): Stale `expected_version` or name taken
    """
    table = await table_service.get_table(user.tenant_id, table_id)
    if request.name is not None:
        table = await table_service.rename_table(
            user.tenant_id,
            table_id,
            request.name,
            expected_version=request.expected_version,
            user_id=user.user_id,
        )
    if request.description is not None:
        table = await table_service.update_description(
            user.tenant_id, table_id, request.description, user_id=user.user_id
        )
    return TableResponse(**table)


@router.delete("/{table_id}", status_code=204)
@handle_domain_errors
async def delete_table(
    table_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("table.delete.all")),
    table_service: TableService = Depends(get_table_service),
) -> None:
    await table_service.delete_table(user.tenant_id, table_id)


@router.post("/{table_id}/duplicate", response_model=TableResponse, status_code=201)
@handle_domain_errors
async def duplicate_table(
    table_id: UUID,
    request: DuplicateTableRequest | None = None,
    user: AuthenticatedUser = Depends(require_permission("table.create.all")),
    table_service: TableService = Depends(get_table_service),
) -> TableResponse:
    request = request or DuplicateTableRequest()
    table = await table_service.duplicate_table(
        user.tenant_id,
        table_id,
        new_name=request.new_name,
        include_records=request.include_records,
        user_id=user.user_id,
    )
    return TableResponse(**table)


@router.get("/{table_id}/schema", response_model=list[SchemaPropertyResponse])
@handle_domain_errors
async def get_table_schema(
    table_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("table.view.all")),
    table_service: TableService = Depends(get_table_service),
) -> list[SchemaPropertyResponse]:
    schema = await table_service.get_schema(user.tenant_id, table_id)
    return [SchemaPropertyResponse(**p) for p in schema]


@router.get("/{table_id}/statistics", response_model=TableStatisticsResponse)
@handle_domain_errors
async def get_table_statistics(
    table_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("table.view.all")),
    table_service: TableService = Depends(get_table_service),
) -> TableStatisticsResponse:
    return TableStatisticsResponse(**await table_service.get_statistics(user.tenant_id, table_id))


@router.post("/{table_id}/properties", response_model=TableResponse, status_code=201)
@handle_domain_errors
async def add_property(
    table_id: UUID,
    request: AddPropertyRequest,
    user: AuthenticatedUser = Depends(require_permission("table.edit.all")),
    table_service: TableService = Depends(get_table_service),
) -> TableResponse:
    table = await table_service.add_property(
        user.tenant_id,
        table_id,
        request.key,
        request.definition.model_dump(),
        expected_version=request.expected_version,
        user_id=user.user_id,
    )
    return TableResponse(**table)


@router.put("/{table_id}/properties/{key}", response_model=TableResponse)
@handle_domain_errors
async def update_property(
    table_id: UUID,
    key: str,
    request: UpdatePropertyRequest,
    user: AuthenticatedUser = Depends(require_permission("table.edit.all")),
    table_service: TableService = Depends(get_table_service),
) -> TableResponse:
    table = await table_service.update_property(
        user.tenant_id,
        table_id,
        key,
        request.definition.model_dump(),
        expected_version=request.expected_version,
        user_id=user.user_id,
    )
    return TableResponse(**table)


@router.delete("/{table_id}/properties/{key}", response_model=TableResponse)
@handle_domain_errors
async def remove_property(
    table_id: UUID,
    key: str,
    expected_version: int | None = None,
    user: AuthenticatedUser = Depends(require_permission("table.edit.all")),
    table_service: TableService = Depends(get_table_service),
) -> TableResponse:
    """Remove a property; its values are stripped from every record."""
    table = await table_service.remove_property(
        user.tenant_id,
        table_id,
        key,
        expected_version=expected_version,
        user_id=user.user_id,
    )
    return TableResponse(**table)


@router.put("/{table_id}/properties-order", response_model=TableResponse)
@handle_domain_errors
async def reorder_properties(
    table_id: UUID,
    request: ReorderPropertiesRequest,
    user: AuthenticatedUser = Depends(require_permission("table.edit.all")),
    table_service: TableService = Depends(get_table_service),
) -> TableResponse:
    table = await table_service.reorder_properties(
        user.tenant_id,
        table_id,
        request.order,
        expected_version=request.expected_version,
        user_id=user.user_id,
    )
    return TableResponse(**table)


@router.get("/{table_id}/export")
@handle_domain_errors
async def export_table_csv(
    table_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("table.export.all")),
    table_service: TableService = Depends(get_table_service),
) -> Response:
    content = await table_service.export_csv(user.tenant_id, table_id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="table-{table_id}.csv"'},
    )


@router.post("/{table_id}/import", response_model=CsvImportResponse)
@handle_domain_errors
async def import_table_csv(
    table_id: UUID,
    request: CsvImportRequest,
    user: AuthenticatedUser = Depends(require_permission("table.import.all")),
    table_service: TableService = Depends(get_table_service),
) -> CsvImportResponse:
    """
    Import CSV rows as records.

    Header cells are matched against property keys first, then display
    names. Rows that fail validation are reported and skipped.
    """
    result = await table_service.import_csv(
        user.tenant_id, table_id, request.content, user_id=user.user_id
    )
    logger.info(
        "Table import finished",
        extra={"table_id": str(table_id), "imported": result["imported"], "skipped": result["skipped"]},
    )
    return CsvImportResponse(**result)
