"""
Expense schemas.

Dependencies: pydantic
System role: Expense ledger API contracts
"""

import uuid
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CreateExpenseRequest(BaseModel):
    """Request schema for creating an expense."""

    date: date_type
    category: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=500)
    income_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    expense_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    case_id: uuid.UUID | None = None
    memo: str | None = Field(None, max_length=1000)
    tag_ids: list[uuid.UUID] = Field(default_factory=list)
    attachment_ids: list[uuid.UUID] = Field(default_factory=list)


class UpdateExpenseRequest(BaseModel):
    """Partial update; `version` must match the stored version."""

    version: int
    date: date_type | None = None
    category: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = Field(None, min_length=1, max_length=500)
    income_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    expense_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    case_id: uuid.UUID | None = None
    memo: str | None = Field(None, max_length=1000)
    tag_ids: list[uuid.UUID] | None = None
    attachment_ids: list[uuid.UUID] | None = None


class BulkCreateExpensesRequest(BaseModel):
    expenses: list[CreateExpenseRequest]


class ExpenseTagResponse(BaseModel):
    id: uuid.UUID
    name: str
    color: str


class ExpenseResponse(BaseModel):
    id: uuid.UUID
    date: date_type
    category: str
    description: str
    income_amount: Decimal
    expense_amount: Decimal
    balance: Decimal
    case_id: uuid.UUID | None = None
    memo: str | None = None
    version: int
    tags: list[ExpenseTagResponse] = Field(default_factory=list)
    attachment_ids: list[uuid.UUID] = Field(default_factory=list)
    created_by: uuid.UUID | None = None
    updated_by: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


class ExpensePageResponse(BaseModel):
    items: list[ExpenseResponse]
    total: int
    page: int
    size: int
    has_next: bool
