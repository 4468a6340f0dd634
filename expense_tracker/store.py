"""Session-owned expense collection."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Iterator, List, Optional

try:
    from .categories import resolve_category_id, suggest_category
    from .models import (
        AmountLike,
        DateLike,
        Expense,
        ExpenseNotFoundError,
        parse_amount,
        parse_date,
        validate_title,
    )
    from .storage import ExpenseStorage
except ImportError:
    from categories import resolve_category_id, suggest_category
    from models import (
        AmountLike,
        DateLike,
        Expense,
        ExpenseNotFoundError,
        parse_amount,
        parse_date,
        validate_title,
    )
    from storage import ExpenseStorage

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('title', 'amount', 'category', 'date')


def new_expense_id() -> str:
    return uuid.uuid4().hex


class ExpenseStore:
    """Single owner of the in-memory expense list.

    The list keeps insertion order, which is what "most recent" means for
    recommendations.  Every change is mirrored to ``storage`` when one is
    attached; a failed write leaves the in-memory state authoritative.
    """

    def __init__(self, storage: Optional[ExpenseStorage] = None, expenses: Optional[List[Expense]] = None):
        self.storage = storage
        self._expenses: List[Expense] = list(expenses) if expenses is not None else []

    @classmethod
    def from_storage(cls, storage: ExpenseStorage) -> 'ExpenseStore':
        return cls(storage=storage, expenses=storage.load())

    @property
    def expenses(self) -> List[Expense]:
        return list(self._expenses)

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(list(self._expenses))

    def get(self, expense_id: str) -> Expense:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        raise ExpenseNotFoundError(expense_id)

    def add(
        self,
        title: str,
        amount: AmountLike,
        category: Optional[str] = None,
        expense_date: Optional[DateLike] = None,
    ) -> Expense:
        """Validate form input and append a new expense.

        A missing or catch-all category is inferred from the title; a
        missing date means today.

        Raises:
            ExpenseValidationError: when any field is invalid.  Nothing is
                added in that case.
        """
        clean_title = validate_title(title)
        expense = Expense(
            id=new_expense_id(),
            title=clean_title,
            amount=parse_amount(amount),
            category=suggest_category(clean_title, category),
            date=parse_date(expense_date) if expense_date else date.today(),
        )
        self._expenses.append(expense)
        self._persist()
        return expense

    def update(self, expense_id: str, **changes) -> Expense:
        """Apply a partial update; the id never changes."""
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise TypeError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        expense = self.get(expense_id)

        # Validate everything before touching the record
        values = {}
        if 'title' in changes:
            values['title'] = validate_title(changes['title'])
        if 'amount' in changes:
            values['amount'] = parse_amount(changes['amount'])
        if 'category' in changes:
            values['category'] = resolve_category_id(changes['category'])
        if 'date' in changes:
            values['date'] = parse_date(changes['date'])

        for name, value in values.items():
            setattr(expense, name, value)
        self._persist()
        return expense

    def delete(self, expense_id: str) -> Expense:
        expense = self.get(expense_id)
        self._expenses = [item for item in self._expenses if item.id != expense_id]
        self._persist()
        return expense

    def _persist(self) -> None:
        if self.storage is None:
            return
        if not self.storage.save(self._expenses):
            logger.warning("Expense changes kept in memory only")
