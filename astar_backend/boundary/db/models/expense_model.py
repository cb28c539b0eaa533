"""
Expense ORM model.

Ledger entry with income/expense amounts and a stored running balance.
Tags are attached through the `expense_tags` association table.

Dependencies: sqlalchemy, astar_backend.boundary.db.base
System role: Expense ledger persistence
"""

import uuid
from datetime import date as date_type
from decimal import Decimal

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, Numeric, String, Table
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from astar_backend.boundary.db.base import (
    AuditMixin,
    Base,
    SoftDeleteMixin,
    TenantMixin,
    TimestampMixin,
    UUIDMixin,
)

expense_tags = Table(
    "expense_tags",
    Base.metadata,
    Column(
        "expense_id",
        UUID(as_uuid=True),
        ForeignKey("expenses.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        UUID(as_uuid=True),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class ExpenseModel(Base, UUIDMixin, TimestampMixin, TenantMixin, AuditMixin, SoftDeleteMixin):
    """
    Expense ORM model.

    Attributes:
        date: Transaction date
        category: Free-text category (e.g. "交通費", "Travel")
        description: What the entry is for
        income_amount: Money received (>= 0)
        expense_amount: Money spent (>= 0)
        balance: Running balance after this entry
        case_id: Legal case the entry belongs to
        memo: Free-form note
        version: Optimistic locking counter
        tags: Tags applied to the entry

    Relationships:
        tags: Many-to-many with TagModel through expense_tags
    """

    __tablename__ = "expenses"
    __table_args__ = (Index("ix_expenses_tenant_date", "tenant_id", "date"),)

    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    income_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    expense_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    case_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    memo: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    tags = relationship("TagModel", secondary=expense_tags, lazy="selectin")
