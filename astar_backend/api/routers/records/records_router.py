"""
Record API endpoints.

Routes under /tables/{table_id}/records:
- GET - Page of records (query params)
- POST - Create record
- POST /batch - Create many records
- POST /query - Page of records (body filters)
- GET /count - Record count
- DELETE - Clear table (requires confirm=true)
- POST /batch-delete - Delete many records
- POST /validate - Validate data without saving
- PATCH /bulk-field - Set one property on many records
- PUT /order - Reorder records

Routes under /records/{record_id}:
- GET, PUT, DELETE - Single record
- PATCH /fields/{key} - Set one property
- POST /move - Move after another record
- POST /copy - Duplicate record

Dependencies: astar_backend.application.services.record_service
System role: Flexible record HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from astar_backend.api.deps.dependencies import get_record_service, require_permission
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.record_service import RecordService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.core.records import DEFAULT_PAGE_SIZE
from astar_backend.models.common import CountResponse
from astar_backend.models.record import (
    BatchCreateRecordsRequest,
    BatchDeleteRecordsRequest,
    BulkUpdateFieldRequest,
    CreateRecordRequest,
    MoveRecordRequest,
    RecordPageResponse,
    RecordQueryRequest,
    RecordResponse,
    ReorderRecordsRequest,
    UpdateFieldRequest,
    UpdateRecordRequest,
    ValidateRecordRequest,
    ValidationResultResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["records"])


@router.get("/tables/{table_id}/records", response_model=RecordPageResponse)
@handle_domain_errors
async def list_records(
    table_id: UUID,
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=1000),
    sort_by: str = "position",
    descending: bool = False,
    search: str | None = None,
    user: AuthenticatedUser = Depends(require_permission("record.view.all")),
    record_service: RecordService = Depends(get_record_service),
) -> RecordPageResponse:
    result = await record_service.list_records(
        user.tenant_id,
        table_id,
        page=page,
        size=size,
        sort_by=sort_by,
        descending=descending,
        search=search,
    )
    return RecordPageResponse(**result)


@router.post("/tables/{table_id}/records/query", response_model=RecordPageResponse)
@handle_domain_errors
async def query_records(
    table_id: UUID,
    request: RecordQueryRequest,
    user: AuthenticatedUser = Depends(require_permission("record.view.all")),
    record_service: RecordService = Depends(get_record_service),
) -> RecordPageResponse:
    """Page of records matching exact-value `filters` and a free-text `search`."""
    result = await record_service.list_records(
        user.tenant_id,
        table_id,
        page=request.page,
        size=request.size,
        sort_by=request.sort_by,
        descending=request.descending,
        filters=request.filters,
        search=request.search,
    )
    return RecordPageResponse(**result)


@router.post("/tables/{table_id}/records", response_model=RecordResponse, status_code=201)
@handle_domain_errors
async def create_record(
    table_id: UUID,
    request: CreateRecordRequest,
    user: AuthenticatedUser = Depends(require_permission("record.create.all")),
    record_service: RecordService = Depends(get_record_service),
) -> RecordResponse:
    """
    Create a record in a table.

    Raises:
        HTTPException(400): Data does not match the table schema
        HTTPException(404): Table not found
    """
    record = await record_service.create_record(
        user.tenant_id,
        table_id,
        request.data,
        position=request.position,
        user_id=user.user_id,
    )
    return RecordResponse(**record)


@router.post("/tables/{table_id}/records/batch", response_model=list[RecordResponse], status_code=201)
@handle_domain_errors
async def batch_create_records(
    table_id: UUID,
    request: BatchCreateRecordsRequest,
    user: AuthenticatedUser = Depends(require_permission("record.create.all")),
    record_service: RecordService = Depends(get_record_service),
) -> list[RecordResponse]:
    logger.info("Creating records batch", extra={"table_id": str(table_id), "count": len(request.records)})
    records = await record_service.batch_create(
        user.tenant_id, table_id, request.records, user_id=user.user_id
    )
    return [RecordResponse(**r) for r in records]


@router.get("/tables/{table_id}/records/count", response_model=CountResponse)
@handle_domain_errors
async def count_records(
    table_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("record.view.all")),
    record_service: RecordService = Depends(get_record_service),
) -> CountResponse:
    return CountResponse(count=await record_service.count_records(user.tenant_id, table_id))


@router.delete("/tables/{table_id}/records", response_model=CountResponse)
@handle_domain_errors
async def clear_table(
    table_id: UUID,
    confirm: bool = False,
    user: AuthenticatedUser = Depends(require_permission("record.delete.all")),
    record_service: RecordService = Depends(get_record_service),
) -> CountResponse:
    deleted = await record_service.clear_table(user.tenant_id, table_id, confirm=confirm)
    return CountResponse(count=deleted)


@router.post("/tables/{table_id}/records/batch-delete", response_model=CountResponse)
@handle_domain_errors
async def batch_delete_records(
    table_id: UUID,
    request: BatchDeleteRecordsRequest,
    user: AuthenticatedUser = Depends(require_permission("record.delete.all")),
    record_service: RecordService = Depends(get_record_service),
) -> CountResponse:
    deleted = await record_service.batch_delete(user.tenant_id, table_id, request.record_ids)
    return CountResponse(count=deleted)


@router.post("/tables/{table_id}/records/validate", response_model=ValidationResultResponse)
@handle_domain_errors
async def validate_record(
    table_id: UUID,
    request: ValidateRecordRequest,
    user: AuthenticatedUser = Depends(require_permission("record.view.all")),
    record_service: RecordService = Depends(get_record_service),
) -> ValidationResultResponse:
    errors = await record_service.validate_data(
        user.tenant_id, table_id, request.data, partial=request.partial
    )
    return ValidationResultResponse(valid=not errors, errors=errors)


@router.patch("/tables/{table_id}/records/bulk-field", response_model=CountResponse)
@handle_domain_errors
async def bulk_update_field(
    table_id: UUID,
    request: BulkUpdateFieldRequest,
    user: AuthenticatedUser = Depends(require_permission("record.edit.all")),
    record_service: RecordService = Depends(get_record_service),
) -> CountResponse:
    updated = await record_service.bulk_update_field(
        user.tenant_id,
        table_id,
        request.record_ids,
        request.key,
        request.value,
        user_id=user.user_id,
    )
    return CountResponse(count=updated)


@router.put("/tables/{table_id}/records/order", response_model=list[RecordResponse])
@handle_domain_errors
async def reorder_records(
    table_id: UUID,
    request: ReorderRecordsRequest,
    user: AuthenticatedUser = Depends(require_permission("record.edit.all")),
    record_service: RecordService = Depends(get_record_service),
) -> list[RecordResponse]:
    records = await record_service.reorder_records(user.tenant_id, table_id, request.record_ids)
    return [RecordResponse(**r) for r in records]


@router.get("/records/{record_id}", response_model=RecordResponse)
@handle_domain_errors
async def get_record(
    record_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("record.view.all")),
    record_service: RecordService = Depends(get_record_service),
) -> RecordResponse:
    return RecordResponse(**await record_service.get_record(user.tenant_id, record_id))


@router.put("/records/{record_id}", response_model=RecordResponse)
@handle_domain_errors
async def update_record(
    record_id: UUID,
    request: UpdateRecordRequest,
    user: AuthenticatedUser = Depends(require_permission("record.edit.all")),
    record_service: RecordService = Depends(get_record_service),
) -> RecordResponse:
    record = await record_service.update_record(
        user.tenant_id,
        record_id,
        request.data,
        merge=request.merge,
        user_id=user.user_id,
    )
    return RecordResponse(**record)


@router.patch("/records/{record_id}/fields/{key}", response_model=RecordResponse)
@handle_domain_errors
async def update_record_field(
    record_id: UUID,
    key: str,
    request: UpdateFieldRequest,
    user: AuthenticatedUser = Depends(require_permission("record.edit.all")),
    record_service: RecordService = Depends(get_record_service),
) -> RecordResponse:
    record = await record_service.update_field(
        user.tenant_id, record_id, key, request.value, user_id=user.user_id
    )
    return RecordResponse(**record)


@router.delete("/records/{record_id}", status_code=204)
@handle_domain_errors
async def delete_record(
    record_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("record.delete.all")),
    record_service: RecordService = Depends(get_record_service),
) -> None:
    await record_service.delete_record(user.tenant_id, record_id)


@router.post("/records/{record_id}/move", response_model=RecordResponse)
@handle_domain_errors
async def move_record(
    record_id: UUID,
    request: MoveRecordRequest,
    user: AuthenticatedUser = Depends(require_permission("record.edit.all")),
    record_service: RecordService = Depends(get_record_service),
) -> RecordResponse:
    record = await record_service.move_record(
        user.tenant_id, record_id, after_record_id=request.after_record_id
    )
    return RecordResponse(**record)


@router.post("/records/{record_id}/copy", response_model=RecordResponse, status_code=201)
@handle_domain_errors
async def copy_record(
    record_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("record.create.all")),
    record_service: RecordService = Depends(get_record_service),
) -> RecordResponse:
    record = await record_service.copy_record(user.tenant_id, record_id, user_id=user.user_id)
    return RecordResponse(**record)
