"""
Expense service orchestrator.

Owns the ledger invariant: every live expense of a tenant carries the
running balance of `income - expense` in (date, created_at, id) order.
Writes recalculate balances from the earliest affected date onward.

Dependencies: astar_backend.boundary.db.CRUD, astar_backend.core.expenses, astar_backend.core.ledger
System role: Expense ledger orchestration
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.base import utcnow
from astar_backend.boundary.db.CRUD.attachment_crud import attachment_crud
from astar_backend.boundary.db.CRUD.expense_crud import expense_crud
from astar_backend.boundary.db.CRUD.tag_crud import tag_crud
from astar_backend.boundary.db.models.attachment_model import AttachmentStatus
from astar_backend.boundary.db.models.expense_model import ExpenseModel
from astar_backend.boundary.db.models.tag_model import TagModel, TagScope
from astar_backend.core.exceptions import (
    BusinessRuleError,
    NotFoundError,
    OptimisticLockError,
    ValidationError,
)
from astar_backend.core.expenses import validate_expense_fields
from astar_backend.core.ledger import apply_running_balance
from astar_backend.core.records import DEFAULT_PAGE_SIZE, MAX_BATCH_SIZE, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)


def expense_to_dict(expense: ExpenseModel, attachment_ids: list[UUID] | None = None) -> dict:
    return {
        "id": expense.id,
        "date": expense.date,
        "category": expense.category,
        "description": expense.description,
        "income_amount": expense.income_amount,
        "expense_amount": expense.expense_amount,
        "balance": expense.balance,
        "case_id": expense.case_id,
        "memo": expense.memo,
        "version": expense.version,
        "tags": [
            {"id": t.id, "name": t.name, "color": t.color}
            for t in sorted(expense.tags, key=lambda t: t.name_normalized)
        ],
        "attachment_ids": list(attachment_ids or []),
        "created_by": expense.created_by,
        "updated_by": expense.updated_by,
        "created_at": expense.created_at,
        "updated_at": expense.updated_at,
        "deleted_at": expense.deleted_at,
    }


class ExpenseService:
    """Expense service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_model(self, tenant_id: UUID, expense_id: UUID) -> ExpenseModel:
        expense = await expense_crud.get_live(self.db, tenant_id, expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        return expense

    async def _resolve_tags(self, tenant_id: UUID, user_id: UUID, tag_ids: list[UUID] | None) -> list[TagModel]:
        if not tag_ids:
            return []
        wanted = list(dict.fromkeys(tag_ids))
        tags = await tag_crud.get_many(self.db, tenant_id, wanted)
        usable = {
            t.id: t
            for t in tags
            if t.scope is TagScope.TENANT or t.owner_id == user_id
        }
        for tag_id in wanted:
            if tag_id not in usable:
                raise NotFoundError("Tag", tag_id)
        return [usable[t] for t in wanted]

    async def _bump_usage(self, tags: list[TagModel]) -> None:
        now = utcnow()
        for tag in tags:
            tag.usage_count = (tag.usage_count or 0) + 1
            tag.last_used_at = now

    async def _link_attachments(
        self,
        tenant_id: UUID,
        expense_id: UUID,
        attachment_ids: list[UUID] | None,
    ) -> None:
        if not attachment_ids:
            return
        attachments = await attachment_crud.get_many(self.db, tenant_id, attachment_ids)
        found = {a.id: a for a in attachments}
        now = utcnow()
        for attachment_id in attachment_ids:
            attachment = found.get(attachment_id)
            if attachment is None:
                raise NotFoundError("Attachment", attachment_id)
            if attachment.status is AttachmentStatus.LINKED and attachment.expense_id != expense_id:
                raise BusinessRuleError(
                    "Attachment is already linked to another expense",
                    {"attachment_id": str(attachment_id)},
                )
            attachment.status = AttachmentStatus.LINKED
            attachment.expense_id = expense_id
            attachment.linked_at = now
            attachment.expires_at = None

    async def _attachment_ids(self, tenant_id: UUID, expense_id: UUID) -> list[UUID]:
        return [a.id for a in await attachment_crud.list_by_expense(self.db, tenant_id, expense_id)]

    async def _recalculate_from(self, tenant_id: UUID, from_date: date | None) -> int:
        """
        Rewrite balances of every live entry dated on or after `from_date`.

        Args:
            tenant_id: Tenant whose ledger changed
            from_date: Earliest affected date (whole ledger when None)

        Returns:
            int: Number of entries rewritten
        """
        await self.db.flush()
        opening = Decimal("0")
        if from_date is not None:
            previous = await expense_crud.find_previous_balance(self.db, tenant_id, from_date)
            if previous is not None:
                opening = previous.balance
        entries = await expense_crud.list_ledger_from(self.db, tenant_id, from_date)
        apply_running_balance(entries, opening)
        await self.db.flush()
        return len(entries)

    async def find_previous_balance(
        self,
        tenant_id: UUID,
        before_date: date,
        exclude_id: UUID | None = None,
    ) -> Decimal:
        """Balance of the last live entry strictly before `before_date`, 0 when none."""
        previous = await expense_crud.find_previous_balance(self.db, tenant_id, before_date, exclude_id)
        return previous.balance if previous is not None else Decimal("0")

    @staticmethod
    def _validated(data: dict[str, Any]) -> tuple[Decimal, Decimal]:
        try:
            return validate_expense_fields(
                data.get("category"),
                data.get("description"),
                data.get("income_amount"),
                data.get("expense_amount"),
                data.get("memo"),
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e

    async def _insert(self, tenant_id: UUID, user_id: UUID, data: dict[str, Any]) -> ExpenseModel:
        income, expense_amount = self._validated(data)
        tags = await self._resolve_tags(tenant_id, user_id, data.get("tag_ids"))
        expense = await expense_crud.create(
            self.db,
            tenant_id=tenant_id,
            date=data["date"],
            category=data["category"].strip(),
            description=data["description"].strip(),
            income_amount=income,
            expense_amount=expense_amount,
            balance=Decimal("0"),
            case_id=data.get("case_id"),
            memo=data.get("memo"),
            version=1,
            tags=tags,
            created_by=user_id,
            updated_by=user_id,
        )
        await self._bump_usage(tags)
        await self._link_attachments(tenant_id, expense.id, data.get("attachment_ids"))
        return expense

    async def create_expense(self, tenant_id: UUID, user_id: UUID, data: dict[str, Any]) -> dict:
        """
        Create an expense and update the ledger.

        Args:
            tenant_id: Caller's tenant
            user_id: Author
            data: date, category, description, income_amount, expense_amount,
                case_id, memo, tag_ids, attachment_ids

        Returns:
            dict: Created expense with its running balance

        Raises:
            ValidationError: Field rules violated
            NotFoundError: Unknown tag or attachment id
        """
        expense = await self._insert(tenant_id, user_id, data)
        await self._recalculate_from(tenant_id, expense.date)
        logger.info(
            "Expense created",
            extra={"tenant_id": str(tenant_id), "expense_id": str(expense.id)},
        )
        return expense_to_dict(expense, await self._attachment_ids(tenant_id, expense.id))

    async def bulk_create(self, tenant_id: UUID, user_id: UUID, items: list[dict[str, Any]]) -> list[dict]:
        """Create several expenses; nothing is written unless every item is valid."""
        if not items:
            return []
        if len(items) > MAX_BATCH_SIZE:
            raise ValidationError(
                f"Batch size cannot exceed {MAX_BATCH_SIZE}",
                details={"size": len(items), "limit": MAX_BATCH_SIZE},
            )
        errors = []
        for index, item in enumerate(items):
            try:
                validate_expense_fields(
                    item.get("category"),
                    item.get("description"),
                    item.get("income_amount"),
                    item.get("expense_amount"),
                    item.get("memo"),
                )
            except ValueError as e:
                errors.append({"index": index, "error": str(e)})
        if errors:
            raise ValidationError("One or more expenses are invalid", details={"errors": errors})

        created = [await self._insert(tenant_id, user_id, item) for item in items]
        await self._recalculate_from(tenant_id, min(e.date for e in created))
        logger.info("Expenses bulk created", extra={"tenant_id": str(tenant_id), "count": len(created)})
        return [expense_to_dict(e) for e in created]

    async def get_expense(self, tenant_id: UUID, expense_id: UUID) -> dict:
        expense = await self.get_model(tenant_id, expense_id)
        return expense_to_dict(expense, await self._attachment_ids(tenant_id, expense.id))

    async def list_expenses(
        self,
        tenant_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        category: str | None = None,
        case_id: UUID | None = None,
        tag_ids: list[UUID] | None = None,
        search: str | None = None,
        page: int = 0,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> dict:
        """Filtered page of expenses, newest first."""
        if page < 0:
            raise ValidationError("Page must not be negative", field="page")
        if size < 1 or size > MAX_PAGE_SIZE:
            raise ValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}", field="size")
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must not be after end date", field="start_date")

        stmt = expense_crud.filtered(
            tenant_id,
            start_date=start_date,
            end_date=end_date,
            category=category,
            case_id=case_id,
            tag_ids=tag_ids,
            search=search,
        )
        rows, total = await expense_crud.search(self.db, stmt, page * size, size)
        return {
            "items": [expense_to_dict(e) for e in rows],
            "total": total,
            "page": page,
            "size": size,
            "has_next": (page + 1) * size < total,
        }

    async def update_expense(
        self,
        tenant_id: UUID,
        user_id: UUID,
        expense_id: UUID,
        version: int,
        changes: dict[str, Any],
    ) -> dict:
        """
        Apply changes guarded by the optimistic lock.

        Args:
            tenant_id: Caller's tenant
            user_id: Editor
            expense_id: Target expense
            version: Version the caller last read
            changes: Subset of the create fields; `tag_ids` replaces the tag set

        Raises:
            OptimisticLockError: `version` is stale
        """
        expense = await self.get_model(tenant_id, expense_id)
        if expense.version != version:
            raise OptimisticLockError("Expense", expense_id, version, expense.version)

        merged = {
            "category": changes.get("category", expense.category),
            "description": changes.get("description", expense.description),
            "income_amount": changes.get("income_amount", expense.income_amount),
            "expense_amount": changes.get("expense_amount", expense.expense_amount),
            "memo": changes.get("memo", expense.memo),
        }
        income, expense_amount = self._validated(merged)
        old_date = expense.date

        if "date" in changes and changes["date"] is not None:
            expense.date = changes["date"]
        expense.category = merged["category"].strip()
        expense.description = merged["description"].strip()
        expense.income_amount = income
        expense.expense_amount = expense_amount
        expense.memo = merged["memo"]
        if "case_id" in changes:
            expense.case_id = changes["case_id"]

        if "tag_ids" in changes and changes["tag_ids"] is not None:
            tags = await self._resolve_tags(tenant_id, user_id, changes["tag_ids"])
            previous = {t.id for t in expense.tags}
            await self._bump_usage([t for t in tags if t.id not in previous])
            expense.tags = tags
        if changes.get("attachment_ids"):
            await self._link_attachments(tenant_id, expense.id, changes["attachment_ids"])

        expense.version += 1
        expense.updated_by = user_id
        await self._recalculate_from(tenant_id, min(old_date, expense.date))
        logger.info("Expense updated", extra={"expense_id": str(expense_id), "version": expense.version})
        return expense_to_dict(expense, await self._attachment_ids(tenant_id, expense.id))

    async def delete_expense(self, tenant_id: UUID, user_id: UUID, expense_id: UUID) -> None:
        expense = await self.get_model(tenant_id, expense_id)
        expense.deleted_at = utcnow()
        expense.deleted_by = user_id
        expense.version += 1
        await self._recalculate_from(tenant_id, expense.date)
        logger.info("Expense deleted", extra={"expense_id": str(expense_id)})

    async def restore_expense(self, tenant_id: UUID, user_id: UUID, expense_id: UUID) -> dict:
        expense = await expense_crud.get_for_tenant(self.db, tenant_id, expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        if expense.deleted_at is None:
            raise BusinessRuleError("Expense is not deleted", {"expense_id": str(expense_id)})
        expense.deleted_at = None
        expense.deleted_by = None
        expense.version += 1
        expense.updated_by = user_id
        await self._recalculate_from(tenant_id, expense.date)
        return expense_to_dict(expense, await self._attachment_ids(tenant_id, expense.id))

    async def recalculate_balances(self, tenant_id: UUID) -> int:
        count = await self._recalculate_from(tenant_id, None)
        logger.info("Balances recalculated", extra={"tenant_id": str(tenant_id), "count": count})
        return count
