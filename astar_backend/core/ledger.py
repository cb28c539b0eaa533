"""
Running balance arithmetic for the expense ledger.

The balance of an entry is the prefix sum of `income - expense` over the
tenant's non-deleted entries ordered by (date, created_at, id).

Dependencies: decimal (stdlib)
System role: Balance calculation
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Protocol

CENT = Decimal("0.01")


class LedgerEntry(Protocol):
    income_amount: Decimal
    expense_amount: Decimal
    balance: Decimal


def quantize(amount) -> Decimal:
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def net_amount(income: Decimal, expense: Decimal) -> Decimal:
    return quantize(income) - quantize(expense)


def apply_running_balance(entries: Iterable[LedgerEntry], opening: Decimal = Decimal("0")) -> Decimal:
    """
    Assign running balances in place.

    Args:
        entries: Entries in ledger order
        opening: Balance carried in from before the first entry

    Returns:
        Decimal: Closing balance
    """
    running = quantize(opening)
    for entry in entries:
        running += net_amount(entry.income_amount, entry.expense_amount)
        entry.balance = running
    return running
