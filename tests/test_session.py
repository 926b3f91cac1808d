from unittest.mock import MagicMock

import pytest

from client.api_client import APIError
from client.session import ACTIVE, SETUP, SessionStateError, SetupError, TallySession


@pytest.fixture
def session():
    s = TallySession()
    s.setup("Ann", 500)
    return s


def test_setup_moves_to_active():
    s = TallySession()
    assert s.state == SETUP

    s.setup("Ann", "500")

    assert s.state == ACTIVE
    assert s.user_name == "Ann"
    assert s.monthly_budget == 500
    assert s.balance == 500


@pytest.mark.parametrize("name, budget", [
    ("", 100), ("   ", 100), ("Ann", 0), ("Ann", -5), ("Ann", "abc"),
    ("Ann", "nan"), ("Ann", float("nan")), ("Ann", "inf"),
])
def test_setup_requires_name_and_positive_budget(name, budget):
    s = TallySession()

    with pytest.raises(SetupError):
        s.setup(name, budget)
    assert s.state == SETUP


def test_no_way_back_to_setup(session):
    with pytest.raises(SessionStateError):
        session.setup("Bob", 100)


def test_operations_need_active_session():
    s = TallySession()

    with pytest.raises(SessionStateError):
        s.add_transaction(10)
    with pytest.raises(SessionStateError):
        s.set_allocation('Food', 10)


def test_balance_after_expense_and_income():
    s = TallySession()
    s.setup("Ann", 1000)

    s.add_transaction(50, 'expense')
    s.add_transaction(200, 'income')

    assert s.balance == 1150
    assert s.balance_class() == 'positive'


def test_amount_sign_follows_type(session):
    expense = session.add_transaction(-30, 'expense', 'Bills')
    income = session.add_transaction(-30, 'income', 'Gift')

    assert expense['amount'] == -30
    assert income['amount'] == 30


def test_category_defaults_per_type(session):
    assert session.add_transaction(1, 'expense')['category'] == 'Food'
    assert session.add_transaction(1, 'income')['category'] == 'Salary'


@pytest.mark.parametrize("kwargs", [
    {"amount": ""},
    {"amount": 0},
    {"amount": "ten"},
    {"amount": "nan"},
    {"amount": "inf"},
    {"amount": float("-inf")},
    {"amount": 5, "transaction_type": "transfer"},
    {"amount": 5, "transaction_type": "income", "category": "Food"},
])
def test_add_rejects_bad_input(session, kwargs):
    with pytest.raises(ValueError):
        session.add_transaction(**kwargs)
    assert len(session.transactions) == 0


def test_newest_first_and_delete(session):
    first = session.add_transaction(10)
    second = session.add_transaction(20)

    assert [t['id'] for t in session.transactions] == [second['id'], first['id']]
    assert first['id'] != second['id']

    session.delete_transaction(first['id'])

    assert [t['id'] for t in session.transactions] == [second['id']]
    assert session.balance == 480


def test_displayed_limits_to_five(session):
    for amount in range(1, 8):
        session.add_transaction(amount)

    assert len(session.transactions.displayed()) == 5
    assert len(session.transactions.displayed(show_all=True)) == 7


def test_balance_class_zero_and_negative(session):
    session.add_transaction(500)
    assert session.balance_class() == 'zero'

    session.add_transaction(1)
    assert session.balance_class() == 'negative'


def test_allocation_and_chart(session):
    assert session.set_allocation('Food', 50) is False
    assert session.set_allocation('Food', 0) is True

    assert len(session.pie_slices()) == 5
    assert session.legend()[1] == {'category': 'Transport', 'color': '#3b82f6', 'percentage': 15, 'amount': 75}
    assert session.render_chart().count('<path ') == 5


def test_write_through_create_uses_server_id():
    api = MagicMock()
    api.create.return_value = {
        "success": True,
        "id": "srv1",
        "transaction": {"id": "srv1", "amount": 40.0, "type": "expense", "category": "Food",
                        "description": "No description", "date": "2025-03-01",
                        "createdAt": "x", "updatedAt": "x"},
    }
    s = TallySession(api=api)
    s.setup("Ann", 100)

    transaction = s.add_transaction("40", 'expense', date="2025-03-01")

    api.create.assert_called_once_with({
        'amount': 40.0, 'type': 'expense', 'category': 'Food', 'description': '', 'date': '2025-03-01',
    })
    assert transaction['id'] == "srv1"
    assert transaction['amount'] == -40.0
    assert s.balance == 60


def test_write_through_delete_failure_keeps_cache():
    api = MagicMock()
    api.create.return_value = {"transaction": {"id": "srv1", "amount": 5, "type": "income"}}
    api.delete.side_effect = APIError("HTTP error! status: 500", status_code=500)
    s = TallySession(api=api)
    s.setup("Ann", 100)
    s.add_transaction(5, 'income')

    with pytest.raises(APIError):
        s.delete_transaction("srv1")

    assert "srv1" in s.transactions


def test_refresh_reads_newest_first():
    api = MagicMock()
    api.get_all.return_value = {
        "transactions": [
            {"id": "a", "amount": 10, "type": "expense", "createdAt": "2025-03-01T10:00:00.000000+00:00"},
            {"id": "b", "amount": 30, "type": "income", "createdAt": "2025-03-02T10:00:00.000000+00:00"},
        ],
    }
    s = TallySession(api=api)
    s.setup("Ann", 100)

    s.refresh()

    assert [t['id'] for t in s.transactions] == ["b", "a"]
    assert s.balance == 120


def test_refresh_needs_api(session):
    with pytest.raises(SessionStateError):
        session.refresh()


def test_balance_stays_finite_after_rejected_amounts(session):
    session.add_transaction(20)

    for amount in ("nan", "inf"):
        with pytest.raises(ValueError):
            session.add_transaction(amount)

    assert session.balance == 480


def test_is_active_follows_setup():
    s = TallySession()
    assert s.is_active is False

    s.setup("Ann", 10)

    assert s.is_active is True
