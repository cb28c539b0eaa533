"""
Expense field rules.

Dependencies: astar_backend.core.ledger
System role: Expense validation
"""

from decimal import Decimal, InvalidOperation

from astar_backend.core.ledger import CENT

MAX_DESCRIPTION_LENGTH = 500
MAX_CATEGORY_LENGTH = 50
MAX_MEMO_LENGTH = 1000


def validate_amount(value, field_name: str) -> Decimal:
    """
    Parse a money amount.

    Raises:
        ValueError: Negative amounts or more than two decimal places
    """
    try:
        amount = Decimal(str(value if value is not None else "0"))
    except (InvalidOperation, ValueError):
        raise ValueError(f"{field_name} must be a number") from None
    if amount < 0:
        raise ValueError(f"{field_name} must not be negative")
    if amount != amount.quantize(CENT):
        raise ValueError(f"{field_name} must have at most 2 decimal places")
    return amount.quantize(CENT)


def validate_expense_fields(
    category: str,
    description: str,
    income_amount,
    expense_amount,
    memo: str | None = None,
) -> tuple[Decimal, Decimal]:
    """
    Validate the user-editable fields of an expense.

    Returns:
        tuple: (income, expense) as 2-place decimals

    Raises:
        ValueError: On the first violated rule
    """
    if description is None or not description.strip():
        raise ValueError("Description must not be blank")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValueError("Description must not exceed 500 characters")
    if category is None or not category.strip():
        raise ValueError("Category must not be blank")
    if len(category) > MAX_CATEGORY_LENGTH:
        raise ValueError("Category must not exceed 50 characters")
    if memo is not None and len(memo) > MAX_MEMO_LENGTH:
        raise ValueError("Memo must not exceed 1000 characters")

    income = validate_amount(income_amount, "Income amount")
    expense = validate_amount(expense_amount, "Expense amount")
    if income == 0 and expense == 0:
        raise ValueError("Either income amount or expense amount must be greater than zero")
    return income, expense
