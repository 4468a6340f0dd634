"""Spending aggregation for charts and recommendations.

Every function here is a pure computation over a sequence of
:class:`~expense_tracker.models.Expense` records.  Sums are accumulated
as :class:`decimal.Decimal` so two-decimal inputs add up exactly; the
values are only converted to ``float`` at the plotting boundary.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

try:
    from .categories import Category, catalog_position, get_category_by_id
    from .models import Expense
except ImportError:
    from categories import Category, catalog_position, get_category_by_id
    from models import Expense

TOP_CATEGORY_LIMIT = 6
MONTH_LABEL_FORMAT = "%b %Y"
FRAME_COLUMNS = ['id', 'Date', 'Title', 'Category', 'Amount']

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class CategoryTotal:
    category: Category
    total: Decimal


@dataclass(frozen=True)
class MonthlyTotal:
    label: str          # e.g. 'Jan 2024'
    year: int
    month: int
    total: Decimal


@dataclass(frozen=True)
class AggregationResult:
    """Derived view of the collection; recomputed on every read."""
    category_totals: Dict[str, Decimal]
    monthly_totals: List[MonthlyTotal]
    top_categories: List[CategoryTotal]
    total: Decimal
    count: int


def total_spent(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), ZERO)


def category_totals(expenses: Iterable[Expense]) -> Dict[str, Decimal]:
    """Sum amounts per category id.

    Keys are returned in catalog order so callers that iterate the mapping
    see a stable order independent of insertion order.
    """
    totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        totals[expense.category] += expense.amount
    return {key: totals[key] for key in sorted(totals, key=catalog_position)}


def top_categories(expenses: Iterable[Expense], n: int = TOP_CATEGORY_LIMIT) -> List[CategoryTotal]:
    """Rank categories by total, highest first, keeping at most ``n``.

    ``sorted`` is stable and the totals arrive in catalog order, so equal
    totals keep their catalog order.
    """
    if n <= 0:
        return []
    ranked = sorted(category_totals(expenses).items(), key=lambda item: item[1], reverse=True)
    return [
        CategoryTotal(category=get_category_by_id(category_id), total=total)
        for category_id, total in ranked[:n]
    ]


def monthly_totals(expenses: Iterable[Expense]) -> List[MonthlyTotal]:
    """Bucket spending by calendar month, oldest month first."""
    buckets: Dict[Tuple[int, int], Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        buckets[(expense.date.year, expense.date.month)] += expense.amount
    result = []
    for year, month in sorted(buckets):
        label = pd.Timestamp(year=year, month=month, day=1).strftime(MONTH_LABEL_FORMAT)
        result.append(MonthlyTotal(label=label, year=year, month=month, total=buckets[(year, month)]))
    return result


def aggregate(expenses: Sequence[Expense], top_n: int = TOP_CATEGORY_LIMIT) -> Optional[AggregationResult]:
    """Compute every aggregate at once.

    Returns ``None`` for an empty collection so the charts can tell "no
    data" apart from data that sums to zero.
    """
    if not expenses:
        return None
    return AggregationResult(
        category_totals=category_totals(expenses),
        monthly_totals=monthly_totals(expenses),
        top_categories=top_categories(expenses, top_n),
        total=total_spent(expenses),
        count=len(expenses),
    )


def expenses_to_frame(expenses: Iterable[Expense]) -> pd.DataFrame:
    """Tabular view of the collection for display, newest first."""
    rows = [
        {
            'id': expense.id,
            'Date': pd.Timestamp(expense.date),
            'Title': expense.title,
            'Category': get_category_by_id(expense.category).display_name,
            'Amount': float(expense.amount),
        }
        for expense in expenses
    ]
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    return df.sort_values('Date', ascending=False, kind='stable').reset_index(drop=True)
