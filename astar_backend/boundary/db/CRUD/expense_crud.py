"""
Expense CRUD operations and ledger queries.

Dependencies: sqlalchemy, astar_backend.boundary.db.models
System role: Expense persistence operations
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.models.expense_model import ExpenseModel, expense_tags

LEDGER_ORDER = (ExpenseModel.date, ExpenseModel.created_at, ExpenseModel.id)


class ExpenseCRUD(BaseCRUD[ExpenseModel]):
    """CRUD operations for ExpenseModel."""

    def __init__(self) -> None:
        super().__init__(ExpenseModel)

    def filtered(
        self,
        tenant_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        category: str | None = None,
        case_id: UUID | None = None,
        tag_ids: list[UUID] | None = None,
        search: str | None = None,
        include_deleted: bool = False,
    ) -> Select:
        """
        Build a select over the tenant's expenses with the given filters.

        Args:
            tenant_id: Caller's tenant
            start_date: Inclusive lower date bound
            end_date: Inclusive upper date bound
            category: Exact category
            case_id: Legal case
            tag_ids: Expenses carrying any of these tags
            search: Case-insensitive substring of description or memo
            include_deleted: Include soft-deleted rows

        Returns:
            Select: Unordered statement selecting ExpenseModel
        """
        stmt = select(ExpenseModel).where(ExpenseModel.tenant_id == tenant_id)
        if not include_deleted:
            stmt = stmt.where(ExpenseModel.deleted_at.is_(None))
        if start_date is not None:
            stmt = stmt.where(ExpenseModel.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(ExpenseModel.date <= end_date)
        if category:
            stmt = stmt.where(ExpenseModel.category == category)
        if case_id is not None:
            stmt = stmt.where(ExpenseModel.case_id == case_id)
        if tag_ids:
            tagged = select(expense_tags.c.expense_id).where(expense_tags.c.tag_id.in_(tag_ids))
            stmt = stmt.where(ExpenseModel.id.in_(tagged))
        if search:
            term = search.strip()
            stmt = stmt.where(
                or_(
                    ExpenseModel.description.icontains(term, autoescape=True),
                    ExpenseModel.memo.icontains(term, autoescape=True),
                )
            )
        return stmt

    async def search(
        self,
        session: AsyncSession,
        stmt: Select,
        offset: int,
        limit: int,
    ) -> tuple[Sequence[ExpenseModel], int]:
        """Run a filtered statement newest first, returning (page, total)."""
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = int((await session.execute(count_stmt)).scalar_one())
        page_stmt = stmt.order_by(
            ExpenseModel.date.desc(), ExpenseModel.created_at.desc(), ExpenseModel.id.desc()
        ).offset(offset).limit(limit)
        result = await session.execute(page_stmt)
        return result.scalars().all(), total

    async def list_ordered(self, session: AsyncSession, stmt: Select) -> Sequence[ExpenseModel]:
        result = await session.execute(stmt.order_by(*LEDGER_ORDER))
        return result.scalars().all()

    async def get_live(self, session: AsyncSession, tenant_id: UUID, expense_id: UUID) -> ExpenseModel | None:
        stmt = select(ExpenseModel).where(
            ExpenseModel.id == expense_id,
            ExpenseModel.tenant_id == tenant_id,
            ExpenseModel.deleted_at.is_(None),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_ledger_from(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        from_date: date | None,
    ) -> Sequence[ExpenseModel]:
        """Live entries dated on or after `from_date` (all when None) in ledger order."""
        stmt = select(ExpenseModel).where(
            ExpenseModel.tenant_id == tenant_id,
            ExpenseModel.deleted_at.is_(None),
        )
        if from_date is not None:
            stmt = stmt.where(ExpenseModel.date >= from_date)
        result = await session.execute(stmt.order_by(*LEDGER_ORDER))
        return result.scalars().all()

    async def find_previous_balance(
        self,
        session: AsyncSession,
        tenant_id: UUID,
        before_date: date,
        exclude_id: UUID | None = None,
    ) -> ExpenseModel | None:
        """
        Last live entry dated strictly before `before_date`.

        Args:
            session: Async database session
            tenant_id: Caller's tenant
            before_date: Position boundary
            exclude_id: Entry to ignore

        Returns:
            ExpenseModel or None when the ledger has no earlier entry
        """
        stmt = select(ExpenseModel).where(
            ExpenseModel.tenant_id == tenant_id,
            ExpenseModel.deleted_at.is_(None),
            ExpenseModel.date < before_date,
        )
        if exclude_id is not None:
            stmt = stmt.where(ExpenseModel.id != exclude_id)
        stmt = stmt.order_by(
            ExpenseModel.date.desc(), ExpenseModel.created_at.desc(), ExpenseModel.id.desc()
        ).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


expense_crud = ExpenseCRUD()
