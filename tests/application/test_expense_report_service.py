"""
Test suite for the expense ledger and its reports.

Entries are created out of date order on purpose; running balances must
follow the date, not the insertion order.

System role: Verification of ledger balances and accounting reports
"""

from datetime import date
from decimal import Decimal

import pytest

from astar_backend.application.services.expense_service import ExpenseService
from astar_backend.application.services.report_service import EXPORT_COLUMNS, ReportService
from astar_backend.application.services.tag_service import TagService
from astar_backend.core.exceptions import (
    BusinessRuleError,
    NotFoundError,
    OptimisticLockError,
    ValidationError,
)


def _data(day: date, category: str, description: str, income: str = "0", expense: str = "0", **extra) -> dict:
    return {
        "date": day,
        "category": category,
        "description": description,
        "income_amount": income,
        "expense_amount": expense,
        **extra,
    }


@pytest.fixture
def expenses(test_async_db) -> ExpenseService:
    return ExpenseService(test_async_db)


@pytest.fixture
async def ledger(expenses, tenant, member) -> dict:
    """Retainer received on April 1st, a court fee on the 5th and a copy fee on the 3rd."""
    retainer = await expenses.create_expense(
        tenant["id"], member.id, _data(date(2024, 4, 1), "Retainer", "Smith retainer", income="10000")
    )
    court = await expenses.create_expense(
        tenant["id"], member.id, _data(date(2024, 4, 5), "Fees", "Court fee", expense="3000")
    )
    copy = await expenses.create_expense(
        tenant["id"], member.id, _data(date(2024, 4, 3), "Office", "Copies", expense="2000", memo="200 pages")
    )
    return {"retainer": retainer, "court": court, "copy": copy}


async def _balances(expenses: ExpenseService, tenant_id, ledger: dict) -> dict:
    return {name: (await expenses.get_expense(tenant_id, e["id"]))["balance"] for name, e in ledger.items()}


class TestExpenseService:
    """Test suite for ExpenseService."""

    @pytest.mark.asyncio
    async def test_balances_follow_date_order(self, expenses, tenant, ledger) -> None:
        balances = await _balances(expenses, tenant["id"], ledger)

        assert balances == {
            "retainer": Decimal("10000.00"),
            "copy": Decimal("8000.00"),
            "court": Decimal("5000.00"),
        }

    @pytest.mark.asyncio
    async def test_validation_errors(self, expenses, tenant, member) -> None:
        with pytest.raises(ValidationError):
            await expenses.create_expense(tenant["id"], member.id, _data(date(2024, 4, 1), "Fees", "Nothing"))
        with pytest.raises(ValidationError):
            await expenses.create_expense(
                tenant["id"], member.id, _data(date(2024, 4, 1), "Fees", "Cents", expense="1.005")
            )
        with pytest.raises(ValidationError):
            await expenses.create_expense(tenant["id"], member.id, _data(date(2024, 4, 1), " ", "No category", expense="1"))

    @pytest.mark.asyncio
    async def test_bulk_create_is_all_or_nothing(self, expenses, tenant, member) -> None:
        items = [
            _data(date(2024, 5, 1), "Fees", "Filing", expense="100"),
            _data(date(2024, 5, 2), "Fees", "", expense="100"),
        ]

        with pytest.raises(ValidationError) as exc_info:
            await expenses.bulk_create(tenant["id"], member.id, items)

        assert exc_info.value.details["errors"] == [{"index": 1, "error": "Description must not be blank"}]
        assert (await expenses.list_expenses(tenant["id"]))["total"] == 0

    @pytest.mark.asyncio
    async def test_update_moves_entry_and_recalculates(self, expenses, tenant, member, ledger) -> None:
        court = ledger["court"]

        updated = await expenses.update_expense(
            tenant["id"], member.id, court["id"], court["version"], {"date": date(2024, 3, 30)}
        )

        assert updated["version"] == court["version"] + 1
        assert await _balances(expenses, tenant["id"], ledger) == {
            "court": Decimal("-3000.00"),
            "retainer": Decimal("7000.00"),
            "copy": Decimal("5000.00"),
        }

    @pytest.mark.asyncio
    async def test_stale_version_is_rejected(self, expenses, tenant, member, ledger) -> None:
        copy = ledger["copy"]
        await expenses.update_expense(tenant["id"], member.id, copy["id"], copy["version"], {"memo": "250 pages"})

        with pytest.raises(OptimisticLockError):
            await expenses.update_expense(tenant["id"], member.id, copy["id"], copy["version"], {"memo": "300 pages"})

    @pytest.mark.asyncio
    async def test_delete_and_restore(self, expenses, tenant, member, ledger) -> None:
        retainer_id = ledger["retainer"]["id"]

        await expenses.delete_expense(tenant["id"], member.id, retainer_id)

        with pytest.raises(NotFoundError):
            await expenses.get_expense(tenant["id"], retainer_id)
        remaining = {k: v for k, v in ledger.items() if k != "retainer"}
        assert await _balances(expenses, tenant["id"], remaining) == {
            "court": Decimal("-5000.00"),
            "copy": Decimal("-2000.00"),
        }

        restored = await expenses.restore_expense(tenant["id"], member.id, retainer_id)

        assert restored["deleted_at"] is None
        assert (await _balances(expenses, tenant["id"], ledger))["court"] == Decimal("5000.00")
        with pytest.raises(BusinessRuleError):
            await expenses.restore_expense(tenant["id"], member.id, retainer_id)

    @pytest.mark.asyncio
    async def test_list_filters_and_paging(self, expenses, tenant, member, ledger) -> None:
        page = await expenses.list_expenses(tenant["id"], size=2)
        fees = await expenses.list_expenses(tenant["id"], category="Fees")
        searched = await expenses.list_expenses(tenant["id"], search="pages")

        assert [e["description"] for e in page["items"]] == ["Court fee", "Copies"]
        assert page["total"] == 3
        assert page["has_next"] is True
        assert [e["description"] for e in fees["items"]] == ["Court fee"]
        assert [e["description"] for e in searched["items"]] == ["Copies"]
        with pytest.raises(ValidationError):
            await expenses.list_expenses(tenant["id"], start_date=date(2024, 5, 1), end_date=date(2024, 4, 1))

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, expenses, tenant, member, ledger) -> None:
        await expenses.create_expense(
            tenant["id"], member.id, _data(date(2024, 4, 6), "Fees", "Success fee 10%", expense="100")
        )

        percent = await expenses.list_expenses(tenant["id"], search="%")
        underscore = await expenses.list_expenses(tenant["id"], search="_")
        mixed_case = await expenses.list_expenses(tenant["id"], search="COURT")

        assert [e["description"] for e in percent["items"]] == ["Success fee 10%"]
        assert underscore["items"] == []
        assert [e["description"] for e in mixed_case["items"]] == ["Court fee"]

    @pytest.mark.asyncio
    async def test_tags_are_applied_and_counted(self, expenses, test_async_db, tenant, member) -> None:
        tags = TagService(test_async_db)
        billable = await tags.create_tag(tenant["id"], member.id, "Billable", color="#4CAF50")

        tagged = await expenses.create_expense(
            tenant["id"],
            member.id,
            _data(date(2024, 4, 2), "Fees", "Expert witness", expense="500", tag_ids=[billable["id"]]),
        )
        await expenses.create_expense(tenant["id"], member.id, _data(date(2024, 4, 2), "Fees", "Parking", expense="5"))
        filtered = await expenses.list_expenses(tenant["id"], tag_ids=[billable["id"]])

        assert tagged["tags"] == [{"id": billable["id"], "name": "Billable", "color": "#4CAF50"}]
        assert [e["description"] for e in filtered["items"]] == ["Expert witness"]
        assert (await tags.get_tag(tenant["id"], member.id, billable["id"]))["usage_count"] == 1


class TestReportService:
    """Test suite for ReportService."""

    @pytest.mark.asyncio
    async def test_summary(self, test_async_db, tenant, ledger) -> None:
        reports = ReportService(test_async_db)

        april = await reports.summary(tenant["id"], date(2024, 4, 1), date(2024, 4, 3))
        empty = await reports.summary(tenant["id"], date(2024, 6, 1), date(2024, 6, 30))

        assert april["total_income"] == Decimal("10000.00")
        assert april["total_expense"] == Decimal("2000.00")
        assert april["net"] == Decimal("8000.00")
        assert april["count"] == 2
        assert april["closing_balance"] == Decimal("8000.00")
        assert empty["count"] == 0
        assert empty["closing_balance"] == Decimal("5000.00")

    @pytest.mark.asyncio
    async def test_by_category_and_month(self, test_async_db, tenant, ledger) -> None:
        reports = ReportService(test_async_db)

        categories = await reports.by_category(tenant["id"])
        months = await reports.by_month(tenant["id"])

        assert [c["category"] for c in categories] == ["Fees", "Office", "Retainer"]
        assert months == [
            {
                "month": "2024-04",
                "count": 3,
                "income": Decimal("10000.00"),
                "expense": Decimal("5000.00"),
                "net": Decimal("5000.00"),
            }
        ]

    @pytest.mark.asyncio
    async def test_by_tag(self, expenses, test_async_db, tenant, member, ledger) -> None:
        tags = TagService(test_async_db)
        billable = await tags.create_tag(tenant["id"], member.id, "Billable")
        travel = await tags.create_tag(tenant["id"], member.id, "Travel")
        archived = await tags.create_tag(tenant["id"], member.id, "Archived")
        await expenses.create_expense(
            tenant["id"],
            member.id,
            _data(date(2024, 4, 2), "Fees", "Expert witness", expense="500", tag_ids=[billable["id"], travel["id"]]),
        )
        await expenses.create_expense(
            tenant["id"],
            member.id,
            _data(date(2024, 4, 4), "Fees", "Deposition", expense="300", tag_ids=[billable["id"], archived["id"]]),
        )
        await tags.delete_tag(tenant["id"], member.id, archived["id"])

        rows = await ReportService(test_async_db).by_tag(tenant["id"])

        assert [(r["tag_name"], r["count"]) for r in rows] == [("Billable", 2), ("Travel", 1)]
        assert rows[0]["expense"] == Decimal("800.00")
        assert rows[0]["net"] == Decimal("-800.00")
        assert rows[1]["tag_id"] == travel["id"]

    @pytest.mark.asyncio
    async def test_inverted_range_is_rejected(self, test_async_db, tenant) -> None:
        with pytest.raises(ValidationError):
            await ReportService(test_async_db).by_case(tenant["id"], date(2024, 5, 1), date(2024, 4, 1))

    @pytest.mark.asyncio
    async def test_export_csv(self, test_async_db, tenant, ledger) -> None:
        lines = (await ReportService(test_async_db).export_csv(tenant["id"])).splitlines()

        assert lines[0] == ",".join(EXPORT_COLUMNS)
        assert lines[1] == "2024-04-01,Retainer,Smith retainer,10000.00,0.00,10000.00,,,"
        assert lines[2] == "2024-04-03,Office,Copies,0.00,2000.00,8000.00,,200 pages,"
        assert len(lines) == 4
