"""Plotly visualisation helpers for the expense tracker.

Each function accepts the :class:`~expense_tracker.aggregation.AggregationResult`
returned by :func:`~expense_tracker.aggregation.aggregate` and produces an
interactive Plotly figure that Streamlit renders via ``st.plotly_chart``.
A ``None`` result means there is no data; the functions then return
``None`` so the page can show its empty state instead of a blank chart.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

try:
    from .aggregation import AggregationResult
    from .config import CURRENCY_PREFIX
except ImportError:
    from aggregation import AggregationResult
    from config import CURRENCY_PREFIX

MONTHLY_BAR_COLOR = "rgba(37, 99, 235, 0.6)"
MONTHLY_BAR_LINE = "rgba(37, 99, 235, 1)"


def category_chart_frame(result: Optional[AggregationResult]) -> pd.DataFrame:
    """Top categories as a DataFrame with Category, Amount and Color columns."""
    if result is None:
        return pd.DataFrame(columns=["Category", "Amount", "Color"])
    return pd.DataFrame(
        [
            {
                "Category": entry.category.display_name,
                "Amount": float(entry.total),
                "Color": entry.category.color,
            }
            for entry in result.top_categories
        ],
        columns=["Category", "Amount", "Color"],
    )


def monthly_chart_frame(result: Optional[AggregationResult]) -> pd.DataFrame:
    """Monthly totals as a DataFrame in chronological order."""
    if result is None:
        return pd.DataFrame(columns=["Month", "Amount"])
    return pd.DataFrame(
        [{"Month": entry.label, "Amount": float(entry.total)} for entry in result.monthly_totals],
        columns=["Month", "Amount"],
    )


def create_category_pie_chart(result: Optional[AggregationResult], title: str | None = None) -> Optional[go.Figure]:
    """Generate a pie chart of the top spending categories.

    Parameters
    ----------
    result : AggregationResult or None
        Aggregates for the current collection.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure or None
        Pie chart coloured with each category's catalog colour, or
        ``None`` when there is no data.
    """
    df = category_chart_frame(result)
    if df.empty:
        return None
    fig = px.pie(df, names="Category", values="Amount")
    fig.update_traces(
        marker=dict(colors=list(df["Color"]), line=dict(width=2)),
        sort=False,
        hovertemplate=f"%{{label}}: {CURRENCY_PREFIX} %{{value:,.2f}} (%{{percent:.1%}})<extra></extra>",
    )
    fig.update_layout(
        title=title or "Category Breakdown",
        legend=dict(orientation="h", yanchor="top", y=-0.1),
    )
    return fig


def create_monthly_bar_chart(result: Optional[AggregationResult], title: str | None = None) -> Optional[go.Figure]:
    """Generate a bar chart of spending per month.

    Parameters
    ----------
    result : AggregationResult or None
        Aggregates for the current collection.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure or None
        Bar chart with months on the x axis in chronological order, or
        ``None`` when there is no data.
    """
    df = monthly_chart_frame(result)
    if df.empty:
        return None
    fig = px.bar(df, x="Month", y="Amount")
    fig.update_traces(
        marker_color=MONTHLY_BAR_COLOR,
        marker_line_color=MONTHLY_BAR_LINE,
        marker_line_width=2,
        hovertemplate=f"{CURRENCY_PREFIX} %{{y:,.2f}}<extra></extra>",
    )
    fig.update_layout(
        title=title or "Monthly Trends",
        xaxis_title=None,
        yaxis_title=f"Amount ({CURRENCY_PREFIX})",
        showlegend=False,
    )
    # Keep the chronological order from the aggregation, not alphabetical
    fig.update_xaxes(categoryorder="array", categoryarray=list(df["Month"]))
    fig.update_yaxes(rangemode="tozero")
    return fig


def has_monthly_trend(result: Optional[AggregationResult]) -> bool:
    """A trend needs at least two months of data."""
    return result is not None and len(result.monthly_totals) > 1
