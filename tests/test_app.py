import types
from datetime import date
from decimal import Decimal

import pytest

from expense_tracker import app
from expense_tracker.store import ExpenseStore


@pytest.fixture
def session(monkeypatch):
    state = {app.STORE_KEY: ExpenseStore()}
    monkeypatch.setattr(app, 'st', types.SimpleNamespace(session_state=state))
    return state


def test_title_change_infers_category(session):
    session[app.FORM_FIELDS['title']] = 'Netflix'
    session[app.FORM_FIELDS['category']] = 'other'
    app._on_title_change()
    assert session[app.FORM_FIELDS['category']] == 'entertainment'


def test_title_change_keeps_manual_category(session):
    session[app.FORM_FIELDS['title']] = 'Netflix'
    session[app.FORM_FIELDS['category']] = 'subscriptions'
    app._on_title_change()
    assert session[app.FORM_FIELDS['category']] == 'subscriptions'


def test_submit_adds_expense_and_resets_form(session):
    session.update({
        app.FORM_FIELDS['title']: 'Groceries',
        app.FORM_FIELDS['amount']: 23.4,
        app.FORM_FIELDS['date']: date(2024, 6, 1),
        app.FORM_FIELDS['category']: 'food',
    })
    app._submit_new_expense()
    store = session[app.STORE_KEY]
    assert len(store) == 1
    assert store.expenses[0].amount == Decimal("23.40")
    assert session[app.FORM_FIELDS['title']] == ''
    assert session[app.FORM_FIELDS['category']] == 'other'
    assert session[app.FORM_ERROR_KEY] is None


def test_submit_invalid_input_reports_error(session):
    session.update({
        app.FORM_FIELDS['title']: 'Groceries',
        app.FORM_FIELDS['amount']: None,
        app.FORM_FIELDS['date']: date(2024, 6, 1),
        app.FORM_FIELDS['category']: 'food',
    })
    app._submit_new_expense()
    assert len(session[app.STORE_KEY]) == 0
    assert session[app.FORM_ERROR_KEY].startswith("Please fill in all fields")
    assert session[app.FORM_FIELDS['title']] == 'Groceries'


def test_edit_save_and_delete(session):
    store = session[app.STORE_KEY]
    expense = store.add("Lunch", "10", expense_date="2024-01-01")
    app._start_edit(expense.id)
    assert session[app.EDITING_KEY] == expense.id

    session.update({
        f'edit_title_{expense.id}': 'Team lunch',
        f'edit_amount_{expense.id}': 18.0,
        f'edit_category_{expense.id}': 'food',
        f'edit_date_{expense.id}': date(2024, 1, 2),
    })
    app._save_edit(expense.id)
    assert store.get(expense.id).title == 'Team lunch'
    assert store.get(expense.id).amount == Decimal("18.00")
    assert session[app.EDITING_KEY] is None

    app._delete_expense(expense.id)
    app._delete_expense(expense.id)
    assert len(store) == 0


def test_invalid_edit_keeps_editor_open(session):
    store = session[app.STORE_KEY]
    expense = store.add("Lunch", "10")
    app._start_edit(expense.id)
    session.update({
        f'edit_title_{expense.id}': '',
        f'edit_amount_{expense.id}': 18.0,
        f'edit_category_{expense.id}': 'food',
        f'edit_date_{expense.id}': date(2024, 1, 2),
    })
    app._save_edit(expense.id)
    assert session[app.EDITING_KEY] == expense.id
    assert session[f'edit_error_{expense.id}']
    assert store.get(expense.id).title == 'Lunch'


def test_tracker_is_created_once(session):
    tracker = app._get_tracker()
    assert app._get_tracker() is tracker


def test_submit_oversized_amount_reports_error(session):
    session.update({
        app.FORM_FIELDS['title']: 'Lunch',
        app.FORM_FIELDS['amount']: 1e30,
        app.FORM_FIELDS['date']: date(2024, 6, 1),
        app.FORM_FIELDS['category']: 'food',
    })
    app._submit_new_expense()
    assert len(session[app.STORE_KEY]) == 0
    assert session[app.FORM_ERROR_KEY].startswith("Please fill in all fields")
