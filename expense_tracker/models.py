"""Expense record and input validation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional, Union

try:
    from .categories import resolve_category_id
except ImportError:
    from categories import resolve_category_id

CENTS = Decimal("0.01")
DATE_FORMAT = "%Y-%m-%d"

AmountLike = Union[str, int, float, Decimal]
DateLike = Union[str, date, datetime]


class ExpenseValidationError(ValueError):
    """Raised when form input cannot become an expense."""


class ExpenseNotFoundError(KeyError):
    """Raised when an expense id is not in the collection."""


@dataclass
class Expense:
    """A single recorded expense."""
    id: str
    title: str
    amount: Decimal         # quantized to cents, always > 0
    category: str
    date: date

    def to_dict(self) -> Dict[str, str]:
        return {
            'id': self.id,
            'title': self.title,
            'amount': f"{self.amount:.2f}",
            'category': self.category,
            'date': self.date.strftime(DATE_FORMAT),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Expense':
        """Build an expense from its stored form, validating every field."""
        if not isinstance(data, dict):
            raise ExpenseValidationError(f"Expected a mapping, got {type(data).__name__}")
        expense_id = data.get('id')
        if expense_id is None or str(expense_id) == '':
            raise ExpenseValidationError("Expense is missing an id")
        return cls(
            id=str(expense_id),
            title=validate_title(data.get('title')),
            amount=parse_amount(data.get('amount')),
            category=resolve_category_id(data.get('category')),
            date=parse_date(data.get('date')),
        )


def validate_title(title: Optional[str]) -> str:
    if title is None or not str(title).strip():
        raise ExpenseValidationError("Title must not be empty")
    return str(title).strip()


def parse_amount(value: Optional[AmountLike]) -> Decimal:
    """Parse a positive amount and round it to two decimal places.

    Floats go through ``str`` first so ``0.1`` becomes ``Decimal('0.10')``
    rather than its binary expansion.
    """
    if value is None or isinstance(value, bool):
        raise ExpenseValidationError("Amount is required")
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ExpenseValidationError(f"Amount is not a number: {value!r}") from None
    if not amount.is_finite():
        raise ExpenseValidationError(f"Amount is not a number: {value!r}")
    try:
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ExpenseValidationError(f"Amount is too large: {value!r}") from None
    if amount <= 0:
        raise ExpenseValidationError("Amount must be greater than zero")
    return amount


def parse_date(value: Optional[DateLike]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise ExpenseValidationError("Date is required")
    text = str(value).strip()
    try:
        # Accept ISO timestamps too; only the calendar date is kept
        return datetime.strptime(text[:10], DATE_FORMAT).date()
    except ValueError:
        raise ExpenseValidationError(f"Invalid date: {text!r}") from None
