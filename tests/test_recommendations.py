from datetime import date
from decimal import Decimal

import pytest

from expense_tracker import recommendations as rec
from expense_tracker.advice_client import AdviceServiceError
from expense_tracker.models import Expense


def _expense(idx, amount, category='food', day='2024-01-01'):
    return Expense(
        id=str(idx),
        title=f"Expense {idx}",
        amount=Decimal(amount),
        category=category,
        date=date.fromisoformat(day),
    )


class FakeClient:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


def test_empty_collection_returns_onboarding_without_calling_service():
    client = FakeClient(text="💡 unused")
    result = rec.generate_recommendations([], client=client)
    assert result.recommendations == rec.ONBOARDING_MESSAGES
    assert result.error is None
    assert client.prompts == []


def test_missing_api_key_returns_informational_messages(monkeypatch):
    monkeypatch.setattr(rec.config, 'get_api_key', lambda: None)
    result = rec.generate_recommendations([_expense(1, "5.00")])
    assert result.recommendations == rec.MISSING_KEY_MESSAGES
    assert result.error == rec.MISSING_KEY_ERROR


def test_filter_keeps_only_marked_lines():
    text = "\n".join([
        "Here are some tips:",
        "💡 Cook at home twice a week",
        "- plain bullet",
        "",
        "🚨 Food is 60% of your spending",
        "Good luck!",
    ])
    assert rec.filter_recommendations(text) == [
        "💡 Cook at home twice a week",
        "🚨 Food is 60% of your spending",
    ]


def test_filter_caps_at_four_lines():
    text = "\n".join(f"🎯 Tip {i}" for i in range(7))
    assert rec.filter_recommendations(text) == [f"🎯 Tip {i}" for i in range(4)]


def test_generate_returns_filtered_service_lines():
    client = FakeClient(text="Intro\n💰 Save 10%\n⚡ Cancel unused apps\nOutro\nThanks")
    result = rec.generate_recommendations([_expense(1, "5.00")], client=client)
    assert result.recommendations == ["💰 Save 10%", "⚡ Cancel unused apps"]
    assert len(client.prompts) == 1


def test_generate_falls_back_to_aggregates_when_nothing_matches():
    client = FakeClient(text="No emoji here\nNor here")
    expenses = [_expense(1, "30.00"), _expense(2, "10.00", 'bills')]
    result = rec.generate_recommendations(expenses, client=client)
    assert result.error is None
    assert result.recommendations[0] == "💡 You've spent Rs. 40.00 recently. Keep tracking to see patterns!"
    assert result.recommendations[1] == "📊 Top category: Food at 75.0%"
    assert len(result.recommendations) == 3


def test_service_failure_reports_local_count_and_total():
    client = FakeClient(error=AdviceServiceError("Request failed: connection refused"))
    expenses = [_expense(1, "10.00"), _expense(2, "10.00"), _expense(3, "5.50")]
    result = rec.generate_recommendations(expenses, client=client)
    assert result.error == "Request failed: connection refused"
    assert "📊 You've tracked 3 expenses so far." in result.recommendations
    assert "💰 Recent total: Rs. 25.50" in result.recommendations


def test_summarize_uses_most_recent_window():
    expenses = [_expense(i, "1.00", 'travel' if i < 2 else 'food') for i in range(12)]
    summary = rec.summarize(expenses)
    assert [expense.id for expense in summary.expenses] == [str(i) for i in range(2, 12)]
    assert summary.collection_size == 12
    assert summary.total == Decimal("10.00")
    assert [share.category_id for share in summary.shares] == ['food']


def test_summarize_percentages_and_overspend_flag():
    expenses = [
        _expense(1, "40.00", 'food'),
        _expense(2, "30.00", 'bills'),
        _expense(3, "30.00", 'travel'),
    ]
    summary = rec.summarize(expenses)
    assert [(s.category_id, s.percentage) for s in summary.shares] == [
        ('food', Decimal("40.0")),
        ('bills', Decimal("30.0")),
        ('travel', Decimal("30.0")),
    ]
    # exactly 30% is not over the threshold
    assert [share.category_id for share in summary.overspending] == ['food']


def test_summarize_rounds_to_one_decimal():
    expenses = [_expense(1, "1.00", 'food'), _expense(2, "2.00", 'bills')]
    shares = rec.summarize(expenses).shares
    assert [share.percentage for share in shares] == [Decimal("66.7"), Decimal("33.3")]


def test_summarize_empty_is_none():
    assert rec.summarize([]) is None


def test_prompt_embeds_window_breakdown_and_flag():
    expenses = [_expense(1, "80.00", 'food', '2024-05-02'), _expense(2, "20.00", 'bills')]
    prompt = rec.build_prompt(rec.summarize(expenses))
    assert "1. Expense 1 - Rs. 80.00 (food) - 2024-05-02" in prompt
    assert "- food: 80.0% (Rs. 80.00)" in prompt
    assert "Total recent spending: Rs. 100.00" in prompt
    assert "Overspending flagged (over 30% of total): food" in prompt


@pytest.mark.parametrize("old_count,new_count,expected", [
    (0, 0, True),
    (0, 3, True),
    (5, 0, True),
    (3, 8, True),
    (3, 13, True),
    (3, 4, False),
    (5, 5, False),
    (8, 3, False),
    (3, 9, False),
])
def test_should_refresh(old_count, new_count, expected):
    assert rec.should_refresh(old_count, new_count) is expected


def test_tracker_drops_stale_results():
    tracker = rec.RecommendationTracker()
    first = tracker.begin(1)
    second = tracker.begin(2)
    assert tracker.complete(first, rec.RecommendationResult(["💡 old"])) is False
    assert tracker.recommendations == []
    assert tracker.complete(second, rec.RecommendationResult(["💡 new"])) is True
    assert tracker.recommendations == ["💡 new"]


def test_tracker_refreshes_on_first_load_and_every_five():
    calls = []

    def fake_generate(expenses):
        calls.append(len(expenses))
        return rec.RecommendationResult([f"💡 {len(expenses)} expenses"])

    tracker = rec.RecommendationTracker()
    expenses = [_expense(i, "1.00") for i in range(3)]
    assert tracker.refresh_if_needed(expenses, fake_generate) is True
    assert tracker.refresh_if_needed(expenses, fake_generate) is False
    expenses += [_expense(i, "1.00") for i in range(3, 7)]
    assert tracker.refresh_if_needed(expenses, fake_generate) is False
    expenses.append(_expense(7, "1.00"))
    assert tracker.refresh_if_needed(expenses, fake_generate) is True
    assert calls == [3, 8]
    assert tracker.recommendations == ["💡 8 expenses"]


def test_overspend_flag_uses_exact_share():
    # 30.04% displays as 30.0% but is still over the threshold
    expenses = [_expense(1, "30.04", 'food'), _expense(2, "69.96", 'bills')]
    summary = rec.summarize(expenses)
    food = [share for share in summary.shares if share.category_id == 'food'][0]
    assert food.percentage == Decimal("30.0")
    assert [share.category_id for share in summary.overspending] == ['bills', 'food']
