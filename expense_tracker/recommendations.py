"""Budgeting recommendations built from recent spending.

The summarizer looks at the most recent ``WINDOW_SIZE`` expenses, works
out each category's share of that window, and asks the advice service
for a handful of emoji-led tips.  Every path returns at least one line:
an empty collection gets onboarding text, a missing API key gets an
informational note, a failed request gets an apology with local totals,
and a response with no usable lines gets a summary built from the
aggregates.

Only response lines containing one of ``ALLOWED_MARKERS`` are shown.  If
the service stops leading its bullets with those emoji every line is
dropped and the aggregate fallback is used instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, List, Optional, Sequence

try:
    from . import config
    from .advice_client import AdviceClient, AdviceServiceError
    from .aggregation import category_totals, total_spent
    from .categories import get_category_by_id
    from .formatting import format_currency, format_percentage
    from .models import Expense
except ImportError:
    import config
    from advice_client import AdviceClient, AdviceServiceError
    from aggregation import category_totals, total_spent
    from categories import get_category_by_id
    from formatting import format_currency, format_percentage
    from models import Expense

logger = logging.getLogger(__name__)

WINDOW_SIZE = 10
OVERSPEND_THRESHOLD = Decimal("30")
MAX_RECOMMENDATIONS = 4
REFRESH_STEP = 5
ALLOWED_MARKERS = ('💡', '💰', '📊', '⚡', '🎯', '🚨')

ONBOARDING_MESSAGES = [
    "👋 Welcome! Start adding your expenses to get personalized AI recommendations.",
    "💰 Track your spending habits and get insights on where your money goes.",
]
MISSING_KEY_MESSAGES = [
    "💡 Tip: Add your OpenAI API key in the .env file to get AI-powered financial recommendations!",
    "📊 Your expense data is being tracked locally and is secure.",
]
MISSING_KEY_ERROR = "API key not configured"

_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class CategoryShare:
    category_id: str
    amount: Decimal
    percentage: Decimal     # one decimal place, 0-100, display only
    window_total: Decimal

    @property
    def label(self) -> str:
        return get_category_by_id(self.category_id).label

    @property
    def is_overspending(self) -> bool:
        # Exact share, not the rounded percentage
        return self.amount * 100 > OVERSPEND_THRESHOLD * self.window_total


@dataclass(frozen=True)
class WindowSummary:
    """Aggregates over the recommendation window."""
    expenses: List[Expense]
    shares: List[CategoryShare]     # highest amount first
    total: Decimal
    collection_size: int

    @property
    def overspending(self) -> List[CategoryShare]:
        return [share for share in self.shares if share.is_overspending]

    @property
    def top_share(self) -> Optional[CategoryShare]:
        return self.shares[0] if self.shares else None


@dataclass
class RecommendationResult:
    recommendations: List[str] = field(default_factory=list)
    error: Optional[str] = None


def _percentage(amount: Decimal, total: Decimal) -> Decimal:
    if total <= 0:
        return Decimal("0.0")
    return (amount / total * 100).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)


def summarize(expenses: Sequence[Expense], window: int = WINDOW_SIZE) -> Optional[WindowSummary]:
    """Summarize the most recently recorded ``window`` expenses.

    Recency follows insertion order, so the window is the tail of the
    collection.  Returns ``None`` when there is nothing to summarize.
    """
    if not expenses:
        return None
    recent = list(expenses[-window:])
    totals = category_totals(recent)
    total = total_spent(recent)
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    shares = [
        CategoryShare(
            category_id=category_id,
            amount=amount,
            percentage=_percentage(amount, total),
            window_total=total,
        )
        for category_id, amount in ranked
    ]
    return WindowSummary(expenses=recent, shares=shares, total=total, collection_size=len(expenses))


def build_prompt(summary: WindowSummary) -> str:
    expense_lines = "\n".join(
        f"{index}. {expense.title} - {format_currency(expense.amount)} "
        f"({expense.category}) - {expense.date.isoformat()}"
        for index, expense in enumerate(summary.expenses, start=1)
    )
    breakdown_lines = "\n".join(
        f"- {share.category_id}: {format_percentage(share.percentage)} ({format_currency(share.amount)})"
        for share in summary.shares
    )
    if summary.overspending:
        overspend_note = "Overspending flagged (over {}% of total): {}".format(
            OVERSPEND_THRESHOLD,
            ", ".join(share.category_id for share in summary.overspending),
        )
    else:
        overspend_note = f"Overspending flagged (over {OVERSPEND_THRESHOLD}% of total): none"

    return (
        f"You are a helpful financial advisor AI. Based on the user's last "
        f"{len(summary.expenses)} expenses:\n\n"
        f"{expense_lines}\n\n"
        f"Category Breakdown:\n{breakdown_lines}\n\n"
        f"Total recent spending: {format_currency(summary.total)}\n"
        f"{overspend_note}\n\n"
        "Provide 3-4 concise, actionable recommendations in a friendly, conversational tone. Focus on:\n"
        f"1. Highlighting overspending patterns (if any category is >{OVERSPEND_THRESHOLD}% of total)\n"
        "2. Suggesting budget limits for top spending categories\n"
        "3. Identifying unusual spending patterns\n"
        "4. General budgeting tips\n\n"
        "Format each recommendation as a short bullet point starting with an emoji. "
        "Keep each point under 100 characters."
    )


def filter_recommendations(text: Optional[str], limit: int = MAX_RECOMMENDATIONS) -> List[str]:
    """Keep the non-blank response lines that carry an allowed marker."""
    if not text:
        return []
    kept = [
        line for line in text.splitlines()
        if line.strip() and any(marker in line for marker in ALLOWED_MARKERS)
    ]
    return kept[:limit]


def fallback_recommendations(summary: WindowSummary) -> List[str]:
    top = summary.top_share
    top_name = top.label if top else 'None'
    top_pct = format_percentage(top.percentage) if top else format_percentage(0)
    return [
        f"💡 You've spent {format_currency(summary.total)} recently. Keep tracking to see patterns!",
        f"📊 Top category: {top_name} at {top_pct}",
        "🎯 Consider setting a monthly budget to better manage your expenses.",
    ]


def failure_recommendations(summary: WindowSummary) -> List[str]:
    return [
        "⚠️ Unable to fetch AI recommendations. Please check your API key.",
        f"📊 You've tracked {summary.collection_size} expenses so far.",
        f"💰 Recent total: {format_currency(summary.total)}",
    ]


def generate_recommendations(
    expenses: Sequence[Expense],
    client: Optional[AdviceClient] = None,
    api_key: Optional[str] = None,
) -> RecommendationResult:
    """Produce recommendation lines for the given collection.

    Never raises for service problems; see the module docstring for the
    fallback each failure maps to.
    """
    summary = summarize(expenses)
    if summary is None:
        return RecommendationResult(recommendations=list(ONBOARDING_MESSAGES))

    if client is None:
        key = api_key or config.get_api_key()
        if not key:
            return RecommendationResult(
                recommendations=list(MISSING_KEY_MESSAGES),
                error=MISSING_KEY_ERROR,
            )
        client = AdviceClient(key)

    try:
        text = client.complete(build_prompt(summary))
    except AdviceServiceError as exc:
        logger.warning("Advice service failed: %s", exc)
        return RecommendationResult(recommendations=failure_recommendations(summary), error=str(exc))

    lines = filter_recommendations(text)
    if not lines:
        logger.info("No advice lines matched the allowed markers; using aggregate summary")
        lines = fallback_recommendations(summary)
    return RecommendationResult(recommendations=lines)


def should_refresh(old_count: int, new_count: int) -> bool:
    """Decide whether a change in expense count warrants new advice.

    Refresh when the collection is empty, on first load (nothing counted
    yet), or when it has grown by a positive multiple of ``REFRESH_STEP``
    since the last refresh.
    """
    if new_count == 0 or old_count == 0:
        return True
    growth = new_count - old_count
    return growth > 0 and growth % REFRESH_STEP == 0


class RecommendationTracker:
    """Tracks when advice was last fetched and which request is current.

    Each fetch takes a token from :meth:`begin`; :meth:`complete` only
    accepts the result of the most recently issued token so a slow earlier
    request cannot overwrite a newer one.
    """

    def __init__(self):
        self.last_count = 0
        self.recommendations: List[str] = []
        self.error: Optional[str] = None
        self._sequence = 0
        self._loaded = False

    def needs_refresh(self, count: int) -> bool:
        if not self._loaded:
            return True
        return should_refresh(self.last_count, count)

    def begin(self, count: int) -> int:
        self._sequence += 1
        self.last_count = count
        self._loaded = True
        return self._sequence

    def complete(self, token: int, result: RecommendationResult) -> bool:
        if token != self._sequence:
            logger.debug("Dropping stale recommendations from request %d", token)
            return False
        self.recommendations = list(result.recommendations)
        self.error = result.error
        return True

    def refresh(
        self,
        expenses: Sequence[Expense],
        generate: Callable[[Sequence[Expense]], RecommendationResult] = generate_recommendations,
    ) -> List[str]:
        token = self.begin(len(expenses))
        self.complete(token, generate(expenses))
        return self.recommendations

    def refresh_if_needed(
        self,
        expenses: Sequence[Expense],
        generate: Callable[[Sequence[Expense]], RecommendationResult] = generate_recommendations,
    ) -> bool:
        if not self.needs_refresh(len(expenses)):
            return False
        self.refresh(expenses, generate)
        return True
