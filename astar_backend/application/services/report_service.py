"""
Report service.

Aggregates the tenant's live expenses over a date range. Totals are summed
in Python from the filtered ledger so the same code runs on PostgreSQL and
sqlite.

Dependencies: astar_backend.boundary.db.CRUD.expense_crud, csv (stdlib)
System role: Accounting reports and CSV export
"""

import csv
import io
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.expense_crud import expense_crud
from astar_backend.boundary.db.models.expense_model import ExpenseModel
from astar_backend.core.exceptions import ValidationError
from astar_backend.core.ledger import quantize

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
EXPORT_COLUMNS = ["date", "category", "description", "income", "expense", "balance", "case", "memo", "tags"]


def _totals(entries: Iterable[ExpenseModel]) -> dict:
    income = ZERO
    expense = ZERO
    count = 0
    for entry in entries:
        income += quantize(entry.income_amount)
        expense += quantize(entry.expense_amount)
        count += 1
    return {"count": count, "income": income, "expense": expense, "net": income - expense}


def _group(entries: list[ExpenseModel], key: Callable[[ExpenseModel], object]) -> dict:
    groups: dict = defaultdict(list)
    for entry in entries:
        groups[key(entry)].append(entry)
    return groups


class ReportService:
    """Expense reports for one tenant."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _entries(
        self,
        tenant_id: UUID,
        start_date: date | None,
        end_date: date | None,
        category: str | None = None,
        case_id: UUID | None = None,
        tag_ids: list[UUID] | None = None,
    ) -> list[ExpenseModel]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must not be after end date", field="start_date")
        stmt = expense_crud.filtered(
            tenant_id,
            start_date=start_date,
            end_date=end_date,
            category=category,
            case_id=case_id,
            tag_ids=tag_ids,
        )
        return list(await expense_crud.list_ordered(self.db, stmt))

    async def summary(self, tenant_id: UUID, start_date: date | None = None, end_date: date | None = None) -> dict:
        """
        Totals over a date range.

        Returns:
            dict: total_income, total_expense, net, count and closing_balance
                (balance after the last entry in range, or the balance carried
                in from before the range when it is empty)
        """
        entries = await self._entries(tenant_id, start_date, end_date)
        totals = _totals(entries)
        if entries:
            closing = entries[-1].balance
        elif start_date is not None:
            previous = await expense_crud.find_previous_balance(self.db, tenant_id, start_date)
            closing = previous.balance if previous is not None else ZERO
        else:
            closing = ZERO
        return {
            "start_date": start_date,
            "end_date": end_date,
            "total_income": totals["income"],
            "total_expense": totals["expense"],
            "net": totals["net"],
            "count": totals["count"],
            "closing_balance": quantize(closing),
        }

    async def by_category(self, tenant_id: UUID, start_date: date | None = None, end_date: date | None = None) -> list[dict]:
        entries = await self._entries(tenant_id, start_date, end_date)
        groups = _group(entries, lambda e: e.category)
        return [{"category": name, **_totals(items)} for name, items in sorted(groups.items())]

    async def by_month(self, tenant_id: UUID, start_date: date | None = None, end_date: date | None = None) -> list[dict]:
        entries = await self._entries(tenant_id, start_date, end_date)
        groups = _group(entries, lambda e: e.date.strftime("%Y-%m"))
        return [{"month": month, **_totals(items)} for month, items in sorted(groups.items())]

    async def by_tag(self, tenant_id: UUID, start_date: date | None = None, end_date: date | None = None) -> list[dict]:
        """Totals per tag; an expense with several tags counts towards each."""
        entries = await self._entries(tenant_id, start_date, end_date)
        groups: dict[UUID, list[ExpenseModel]] = defaultdict(list)
        names: dict[UUID, str] = {}
        for entry in entries:
            for tag in entry.tags:
                if tag.deleted_at is not None:
                    continue
                groups[tag.id].append(entry)
                names[tag.id] = tag.name
        rows = [{"tag_id": tag_id, "tag_name": names[tag_id], **_totals(items)} for tag_id, items in groups.items()]
        return sorted(rows, key=lambda r: (-r["count"], r["tag_name"]))

    async def by_case(self, tenant_id: UUID, start_date: date | None = None, end_date: date | None = None) -> list[dict]:
        entries = await self._entries(tenant_id, start_date, end_date)
        groups = _group(entries, lambda e: e.case_id)
        rows = [{"case_id": case_id, **_totals(items)} for case_id, items in groups.items()]
        # unassigned entries last
        return sorted(rows, key=lambda r: (r["case_id"] is None, str(r["case_id"])))

    async def export_csv(
        self,
        tenant_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        category: str | None = None,
        case_id: UUID | None = None,
        tag_ids: list[UUID] | None = None,
    ) -> str:
        entries = await self._entries(tenant_id, start_date, end_date, category, case_id, tag_ids)
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(EXPORT_COLUMNS)
        for entry in entries:
            writer.writerow(
                [
                    entry.date.isoformat(),
                    entry.category,
                    entry.description,
                    f"{quantize(entry.income_amount)}",
                    f"{quantize(entry.expense_amount)}",
                    f"{quantize(entry.balance)}",
                    str(entry.case_id) if entry.case_id else "",
                    entry.memo or "",
                    ";".join(sorted(t.name for t in entry.tags if t.deleted_at is None)),
                ]
            )
        logger.info("Expenses exported", extra={"tenant_id": str(tenant_id), "rows": len(entries)})
        return buffer.getvalue()
