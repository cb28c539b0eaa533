"""
Report schemas.

Dependencies: pydantic
System role: Reporting API contracts
"""

import uuid
from datetime import date as date_type
from decimal import Decimal

from pydantic import BaseModel


class SummaryResponse(BaseModel):
    start_date: date_type | None = None
    end_date: date_type | None = None
    total_income: Decimal
    total_expense: Decimal
    net: Decimal
    count: int
    closing_balance: Decimal


class _Totals(BaseModel):
    count: int
    income: Decimal
    expense: Decimal
    net: Decimal


class CategoryBreakdown(_Totals):
    category: str


class MonthBreakdown(_Totals):
    month: str


class TagBreakdown(_Totals):
    tag_id: uuid.UUID
    tag_name: str


class CaseBreakdown(_Totals):
    case_id: uuid.UUID | None = None
