"""Formatting utilities for currency and percentage display."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

try:
    from .config import CURRENCY_PREFIX
except ImportError:
    from config import CURRENCY_PREFIX

Number = Union[Decimal, float, int]


def format_currency(amount: Number, include_prefix: bool = True) -> str:
    """Format an amount with thousands separators and two decimals.

    Example:
        >>> format_currency(Decimal('1234.5'))
        'Rs. 1,234.50'
        >>> format_currency(12, include_prefix=False)
        '12.00'
    """
    formatted = f"{amount:,.2f}"
    return f"{CURRENCY_PREFIX} {formatted}" if include_prefix else formatted


def format_percentage(value: Number) -> str:
    return f"{value:.1f}%"
