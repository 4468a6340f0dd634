from decimal import Decimal

from expense_tracker.formatting import format_currency, format_percentage


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "Rs. 1,234.50"
    assert format_currency(12, include_prefix=False) == "12.00"


def test_format_percentage():
    assert format_percentage(Decimal("33.3")) == "33.3%"
    assert format_percentage(0) == "0.0%"
