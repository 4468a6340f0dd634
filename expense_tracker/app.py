"""Streamlit app for the expense tracker.

The page has four parts: an add-expense form, the expense list with
inline edit and delete, the spending charts, and the recommendations
panel.  The :class:`~expense_tracker.store.ExpenseStore` and the
:class:`~expense_tracker.recommendations.RecommendationTracker` are
created once per browser session and kept in ``st.session_state``;
every widget callback goes through them.

To run the app from the command line::

    streamlit run expense_tracker/app.py

or use ``run_expense_tracker.py`` in the project root.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date

import streamlit as st

# Conditional imports to support execution both as part of a package
# (e.g. ``python -m expense_tracker.app``) and as the script Streamlit
# runs directly (``streamlit run expense_tracker/app.py``).
if __package__:
    from . import config
    from . import visualization as viz
    from .aggregation import aggregate, expenses_to_frame, total_spent
    from .categories import category_display_name, category_options, suggest_category
    from .formatting import format_currency
    from .models import ExpenseNotFoundError, ExpenseValidationError
    from .recommendations import RecommendationTracker
    from .storage import ExpenseStorage
    from .store import ExpenseStore
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from expense_tracker import config  # type: ignore
    from expense_tracker import visualization as viz  # type: ignore
    from expense_tracker.aggregation import aggregate, expenses_to_frame, total_spent  # type: ignore
    from expense_tracker.categories import category_display_name, category_options, suggest_category  # type: ignore
    from expense_tracker.formatting import format_currency  # type: ignore
    from expense_tracker.models import ExpenseNotFoundError, ExpenseValidationError  # type: ignore
    from expense_tracker.recommendations import RecommendationTracker  # type: ignore
    from expense_tracker.storage import ExpenseStorage  # type: ignore
    from expense_tracker.store import ExpenseStore  # type: ignore

logger = logging.getLogger(__name__)

STORE_KEY = 'expense_store'
TRACKER_KEY = 'recommendation_tracker'
EDITING_KEY = 'editing_expense_id'
FORM_ERROR_KEY = 'form_error'
FORM_FIELDS = {
    'title': 'new_title',
    'amount': 'new_amount',
    'date': 'new_date',
    'category': 'new_category',
}


def _get_store() -> ExpenseStore:
    """Return the session's store, loading it from storage on first use."""
    if STORE_KEY not in st.session_state:
        config.ensure_data_directories()
        st.session_state[STORE_KEY] = ExpenseStore.from_storage(ExpenseStorage())
    return st.session_state[STORE_KEY]


def _get_tracker() -> RecommendationTracker:
    if TRACKER_KEY not in st.session_state:
        st.session_state[TRACKER_KEY] = RecommendationTracker()
    return st.session_state[TRACKER_KEY]


def _on_title_change() -> None:
    """Re-infer the category while it is still the catch-all."""
    state = st.session_state
    state[FORM_FIELDS['category']] = suggest_category(
        state.get(FORM_FIELDS['title'], ''),
        state.get(FORM_FIELDS['category']),
    )


def _reset_form() -> None:
    state = st.session_state
    state[FORM_FIELDS['title']] = ''
    state[FORM_FIELDS['amount']] = None
    state[FORM_FIELDS['date']] = date.today()
    state[FORM_FIELDS['category']] = 'other'


def _submit_new_expense() -> None:
    state = st.session_state
    try:
        _get_store().add(
            title=state.get(FORM_FIELDS['title'], ''),
            amount=state.get(FORM_FIELDS['amount']),
            category=state.get(FORM_FIELDS['category']),
            expense_date=state.get(FORM_FIELDS['date']),
        )
    except ExpenseValidationError as exc:
        state[FORM_ERROR_KEY] = f"Please fill in all fields with valid data: {exc}"
        return
    state[FORM_ERROR_KEY] = None
    _reset_form()


def _start_edit(expense_id: str) -> None:
    st.session_state[EDITING_KEY] = expense_id


def _cancel_edit() -> None:
    st.session_state[EDITING_KEY] = None


def _delete_expense(expense_id: str) -> None:
    try:
        _get_store().delete(expense_id)
    except ExpenseNotFoundError:
        logger.debug("Expense %s already deleted", expense_id)
    if st.session_state.get(EDITING_KEY) == expense_id:
        st.session_state[EDITING_KEY] = None


def _save_edit(expense_id: str) -> None:
    state = st.session_state
    try:
        _get_store().update(
            expense_id,
            title=state.get(f'edit_title_{expense_id}', ''),
            amount=state.get(f'edit_amount_{expense_id}'),
            category=state.get(f'edit_category_{expense_id}'),
            date=state.get(f'edit_date_{expense_id}'),
        )
    except (ExpenseValidationError, ExpenseNotFoundError) as exc:
        state[f'edit_error_{expense_id}'] = str(exc)
        return
    state[f'edit_error_{expense_id}'] = None
    state[EDITING_KEY] = None


def render_header(store: ExpenseStore) -> None:
    col1, col2, col3 = st.columns([2, 1, 1])
    with col1:
        st.title("💰 Expense Tracker")
        st.markdown("Track where your money goes and get budgeting suggestions.")
    with col2:
        st.metric(label="💸 Total Spent", value=format_currency(total_spent(store)))
    with col3:
        st.metric(label="🧾 Expenses", value=len(store))


def render_expense_form() -> None:
    """Render the add-expense inputs."""
    st.subheader("➕ Add Expense")
    if FORM_FIELDS['title'] not in st.session_state:
        _reset_form()

    st.text_input(
        "Title",
        key=FORM_FIELDS['title'],
        placeholder="e.g. Lunch at cafe",
        on_change=_on_title_change,
        help="The category is picked automatically from keywords in the title",
    )
    col1, col2, col3 = st.columns(3)
    with col1:
        st.number_input("Amount", key=FORM_FIELDS['amount'], min_value=0.0, step=0.01, format="%.2f")
    with col2:
        st.date_input("Date", key=FORM_FIELDS['date'])
    with col3:
        st.selectbox(
            "Category",
            options=category_options(),
            key=FORM_FIELDS['category'],
            format_func=category_display_name,
        )
    st.button("💾 Add Expense", type="primary", on_click=_submit_new_expense)

    error = st.session_state.get(FORM_ERROR_KEY)
    if error:
        st.error(error)


def _render_edit_row(expense) -> None:
    expense_id = expense.id
    with st.form(f"edit_form_{expense_id}"):
        st.text_input("Title", value=expense.title, key=f'edit_title_{expense_id}')
        col1, col2, col3 = st.columns(3)
        with col1:
            st.number_input(
                "Amount",
                value=float(expense.amount),
                min_value=0.0,
                step=0.01,
                format="%.2f",
                key=f'edit_amount_{expense_id}',
            )
        with col2:
            st.date_input("Date", value=expense.date, key=f'edit_date_{expense_id}')
        with col3:
            options = category_options()
            st.selectbox(
                "Category",
                options=options,
                index=options.index(expense.category),
                format_func=category_display_name,
                key=f'edit_category_{expense_id}',
            )
        save_col, cancel_col = st.columns(2)
        with save_col:
            st.form_submit_button("✅ Save", on_click=_save_edit, args=(expense_id,))
        with cancel_col:
            st.form_submit_button("✖️ Cancel", on_click=_cancel_edit)
    error = st.session_state.get(f'edit_error_{expense_id}')
    if error:
        st.error(error)


def render_expense_list(store: ExpenseStore) -> None:
    """Render expenses newest first with edit and delete controls."""
    st.subheader("📋 Expenses")
    if len(store) == 0:
        st.info("No expenses yet. Add your first one above!")
        return

    frame = expenses_to_frame(store)
    editing_id = st.session_state.get(EDITING_KEY)
    for row in frame.itertuples(index=False):
        expense = store.get(row.id)
        if expense.id == editing_id:
            _render_edit_row(expense)
            continue
        col1, col2, col3, col4 = st.columns([4, 2, 1, 1])
        with col1:
            st.markdown(f"**{expense.title}**  \n{row.Category} · {expense.date:%d %b %Y}")
        with col2:
            st.markdown(format_currency(expense.amount))
        with col3:
            st.button("✏️", key=f'edit_{expense.id}', help="Edit expense", on_click=_start_edit, args=(expense.id,))
        with col4:
            st.button("🗑️", key=f'delete_{expense.id}', help="Delete expense", on_click=_delete_expense, args=(expense.id,))


def render_charts(store: ExpenseStore) -> None:
    st.subheader("📊 Spending Analytics")
    result = aggregate(store.expenses)
    if result is None:
        st.info("Add expenses to see visualizations")
        return

    st.plotly_chart(viz.create_category_pie_chart(result), use_container_width=True)
    if viz.has_monthly_trend(result):
        st.plotly_chart(viz.create_monthly_bar_chart(result), use_container_width=True)


def render_recommendations(store: ExpenseStore) -> None:
    tracker = _get_tracker()
    header_col, button_col = st.columns([3, 1])
    with header_col:
        st.subheader("✨ Recommendations")
        st.caption("Personalized financial insights")
    with button_col:
        refresh_clicked = st.button("🔄 Refresh", help="Refresh recommendations")

    expenses = store.expenses
    if refresh_clicked or tracker.needs_refresh(len(expenses)):
        with st.spinner("Analyzing your expenses..."):
            tracker.refresh(expenses)

    if not tracker.recommendations:
        st.info("💭 No recommendations yet. Add more expenses!")
    for line in tracker.recommendations:
        st.markdown(f"> {line}")
    st.caption("💡 Recommendations update automatically every 5 new expenses")


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(
        page_title="Expense Tracker",
        page_icon="💰",
        layout="wide",
        initial_sidebar_state="collapsed",
    )
    config.configure_logging()
    store = _get_store()

    render_header(store)
    left, right = st.columns([2, 1])
    with left:
        render_expense_form()
        render_expense_list(store)
    with right:
        render_charts(store)
        render_recommendations(store)


if __name__ == "__main__":  # pragma: no cover
    main()
