"""
Expense ledger API endpoints.

Routes:
- GET /expenses - Filtered page of expenses
- POST /expenses - Create expense
- POST /expenses/bulk - Create many expenses (all or nothing)
- POST /expenses/recalculate-balances - Recompute every running balance
- GET /expenses/{expense_id} - Get expense
- PUT /expenses/{expense_id} - Update expense (optimistic lock)
- DELETE /expenses/{expense_id} - Soft delete
- POST /expenses/{expense_id}/restore - Undo soft delete

Dependencies: astar_backend.application.services.expense_service
System role: Expense ledger HTTP API
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from astar_backend.api.deps.dependencies import get_current_user, get_expense_service
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.expense_service import ExpenseService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.core.records import DEFAULT_PAGE_SIZE
from astar_backend.models.common import CountResponse
from astar_backend.models.expense import (
    BulkCreateExpensesRequest,
    CreateExpenseRequest,
    ExpensePageResponse,
    ExpenseResponse,
    UpdateExpenseRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("", response_model=ExpensePageResponse)
@handle_domain_errors
async def list_expenses(
    start_date: date | None = None,
    end_date: date | None = None,
    category: str | None = None,
    case_id: UUID | None = None,
    tag_ids: list[UUID] | None = Query(None),
    search: str | None = None,
    page: int = 0,
    size: int = DEFAULT_PAGE_SIZE,
    user: AuthenticatedUser = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
) -> ExpensePageResponse:
    result = await expense_service.list_expenses(
        user.tenant_id,
        start_date=start_date,
        end_date=end_date,
        category=category,
        case_id=case_id,
        tag_ids=tag_ids,
        search=search,
        page=page,
        size=size,
    )
    return ExpensePageResponse(**result)


@router.post("", response_model=ExpenseResponse, status_code=201)
@handle_domain_errors
async def create_expense(
    request: CreateExpenseRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
) -> ExpenseResponse:
    """
    Record an income or expense entry.

    Balances of the entry and every later entry are recalculated.

    Raises:
        HTTPException(400): No amount set or a blank field
        HTTPException(404): Unknown tag or attachment
    """
    logger.info("Creating expense", extra={"category": request.category})
    expense = await expense_service.create_expense(user.tenant_id, user.user_id, request.model_dump())
    logger.info("Expense created successfully", extra={"expense_id": str(expense["id"])})
    return ExpenseResponse(**expense)


@router.post("/bulk", response_model=list[ExpenseResponse], status_code=201)
@handle_domain_errors
async def bulk_create_expenses(
    request: BulkCreateExpensesRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
) -> list[ExpenseResponse]:
    expenses = await expense_service.bulk_create(
        user.tenant_id, user.user_id, [item.model_dump() for item in request.expenses]
    )
    return [ExpenseResponse(**e) for e in expenses]


@router.post("/recalculate-balances", response_model=CountResponse)
@handle_domain_errors
async def recalculate_balances(
    user: AuthenticatedUser = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
) -> CountResponse:
    return CountResponse(count=await expense_service.recalculate_balances(user.tenant_id))


@router.get("/{expense_id}", response_model=ExpenseResponse)
@handle_domain_errors
async def get_expense(
    expense_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
) -> ExpenseResponse:
    return ExpenseResponse(**await expense_service.get_expense(user.tenant_id, expense_id))


@router.put("/{expense_id}", response_model=ExpenseResponse)
@handle_domain_errors
async def update_expense(
    expense_id: UUID,
    request: UpdateExpenseRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
) -> ExpenseResponse:
    """
    Update an expense.

    Raises:
        HTTPException(409): `version` does not match the stored version
    """
    changes = request.model_dump(exclude_unset=True, exclude={"version"})
    expense = await expense_service.update_expense(
        user.tenant_id, user.user_id, expense_id, request.version, changes
    )
    return ExpenseResponse(**expense)


@router.delete("/{expense_id}", status_code=204)
@handle_domain_errors
async def delete_expense(
    expense_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
) -> None:
    await expense_service.delete_expense(user.tenant_id, user.user_id, expense_id)


@router.post("/{expense_id}/restore", response_model=ExpenseResponse)
@handle_domain_errors
async def restore_expense(
    expense_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    expense_service: ExpenseService = Depends(get_expense_service),
) -> ExpenseResponse:
    return ExpenseResponse(**await expense_service.restore_expense(user.tenant_id, user.user_id, expense_id))
