"""Category catalog and keyword-based categorization.

The catalog is static and ordered.  ``classify`` scans ``KEYWORD_RULES``
in declaration order and returns the first category whose keyword list
matches the title, so categories sharing a keyword resolve to whichever
is declared first: "netflix" is both an entertainment and a subscription
keyword and always classifies as ``entertainment``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

DEFAULT_CATEGORY_ID = 'other'


@dataclass(frozen=True)
class Category:
    """A spending category shown in the form, list and charts."""
    id: str
    label: str
    icon: str
    color: str

    @property
    def display_name(self) -> str:
        return f"{self.icon} {self.label}"


CATEGORIES: Tuple[Category, ...] = (
    Category('food', 'Food', '🍔', '#FF6B6B'),
    Category('transport', 'Transport', '🚗', '#4ECDC4'),
    Category('entertainment', 'Entertainment', '🎬', '#45B7D1'),
    Category('shopping', 'Shopping', '🛍️', '#FFA07A'),
    Category('bills', 'Bills & Utilities', '💡', '#98D8C8'),
    Category('subscriptions', 'Subscriptions', '📱', '#F7DC6F'),
    Category('health', 'Health', '💊', '#BB8FCE'),
    Category('education', 'Education', '📚', '#85C1E2'),
    Category('travel', 'Travel', '✈️', '#F8C471'),
    Category(DEFAULT_CATEGORY_ID, 'Other', '📦', '#AAB7B8'),
)

_CATEGORIES_BY_ID = {category.id: category for category in CATEGORIES}
_CATALOG_POSITION = {category.id: index for index, category in enumerate(CATEGORIES)}

# Order is the tie-break: first match wins.
KEYWORD_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('food', ('food', 'lunch', 'dinner', 'breakfast', 'restaurant', 'cafe',
              'groceries', 'grocery', 'uber eats', 'doordash', 'grubhub')),
    ('transport', ('uber', 'lyft', 'taxi', 'gas', 'fuel', 'parking', 'metro',
                   'subway', 'bus', 'train', 'flight', 'airline')),
    ('entertainment', ('movie', 'cinema', 'netflix', 'hulu', 'spotify', 'concert',
                       'game', 'entertainment', 'amazon prime')),
    ('shopping', ('amazon', 'target', 'walmart', 'shop', 'purchase', 'buy')),
    ('bills', ('electric', 'water', 'internet', 'phone', 'utility', 'bill',
               'rent', 'mortgage')),
    ('subscriptions', ('netflix', 'spotify', 'hulu', 'disney', 'apple',
                       'subscription', 'monthly', 'yearly')),
    ('health', ('pharmacy', 'doctor', 'hospital', 'medicine', 'gym', 'fitness',
                'health')),
    ('education', ('book', 'course', 'school', 'tuition', 'education', 'learning')),
    ('travel', ('hotel', 'airbnb', 'vacation', 'trip', 'travel')),
)


def classify(title: Optional[str]) -> str:
    """Infer a category id from an expense title.

    Args:
        title: Free-text expense title.

    Returns:
        The id of the first category in ``KEYWORD_RULES`` with a keyword
        contained in the lowercased title, or ``'other'``.

    Example:
        >>> classify("Netflix March")
        'entertainment'
        >>> classify("Birthday gift")
        'other'
    """
    title_lower = (title or '').lower()
    for category_id, keywords in KEYWORD_RULES:
        if any(keyword in title_lower for keyword in keywords):
            return category_id
    return DEFAULT_CATEGORY_ID


def get_category_by_id(category_id: Optional[str]) -> Category:
    """Look up a category; unknown ids return the catch-all last entry."""
    if not isinstance(category_id, str):
        return CATEGORIES[-1]
    return _CATEGORIES_BY_ID.get(category_id, CATEGORIES[-1])


def resolve_category_id(category_id: Optional[str]) -> str:
    return get_category_by_id(category_id).id


def catalog_position(category_id: str) -> int:
    return _CATALOG_POSITION.get(category_id, len(CATEGORIES))


def category_options() -> List[str]:
    """Category ids in catalog order, for select widgets."""
    return [category.id for category in CATEGORIES]


def category_display_name(category_id: Optional[str]) -> str:
    return get_category_by_id(category_id).display_name


def suggest_category(title: Optional[str], current: Optional[str] = None) -> str:
    """Category to preselect while the user types a title.

    An explicit choice other than the catch-all is kept; otherwise the
    category is inferred from the title.
    """
    current_id = resolve_category_id(current)
    if current_id != DEFAULT_CATEGORY_ID:
        return current_id
    return classify(title)
