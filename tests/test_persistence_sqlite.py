from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from db.client import session_scope
from db.models.finance import FinancialTransaction

from conference_finance.api import build_report_data, monthly_map_for_period
from conference_finance.errors import InvalidAmount, InvalidCategory
from conference_finance.models import LedgerRow, TransactionKind
from conference_finance.persistence import (
    add_ledger_rows,
    add_member,
    add_transaction,
    conference_header,
    count_transactions,
    create_council,
    delete_transaction,
    list_transactions,
    load_map_inputs,
    member_statistics,
)
from tests.helpers.db import seed_conference, seed_members

D = Decimal


def _book(url: str, conference_id: str, when: date, line: int, value) -> str:
    with session_scope(database_url=url) as s:
        return add_transaction(
            s, conference_id=conference_id, date=when, category_id=line, value=value
        ).id


def test_add_transaction_derives_kind_and_rounds_to_cents(db_url):
    conf = seed_conference(database_url=db_url)
    with session_scope(database_url=db_url) as s:
        income = add_transaction(
            s, conference_id=conf, date=date(2024, 5, 2), category_id=2, value="10.005"
        )
        expense = add_transaction(
            s,
            conference_id=conf,
            date=date(2024, 5, 3),
            category_id=16,
            value=D("42.5"),
            description="  cestas  ",
        )
    assert income.kind is TransactionKind.INCOME
    assert income.value == D("10.01")
    assert expense.kind is TransactionKind.EXPENSE
    assert expense.description == "cestas"

    with session_scope(database_url=db_url) as s:
        row = s.get(FinancialTransaction, expense.id)
        assert row is not None
        assert row.kind == "expense"
        assert row.category_id == 16


@pytest.mark.parametrize("line", [6, 14, 24, 29, 31])
def test_add_transaction_refuses_non_entry_lines(db_url, line):
    conf = seed_conference(database_url=db_url)
    with pytest.raises(InvalidCategory):
        _book(db_url, conf, date(2024, 5, 2), line, "10")
    with session_scope(database_url=db_url) as s:
        assert count_transactions(s, conf) == 0


@pytest.mark.parametrize(
    "value", ["0", "-3", "0.004", "NaN", "10000000000.00", "123456789012345678.91"]
)
def test_add_transaction_refuses_bad_amounts(db_url, value):
    conf = seed_conference(database_url=db_url)
    with pytest.raises(InvalidAmount):
        _book(db_url, conf, date(2024, 5, 2), 1, value)


def test_add_transaction_requires_existing_conference(db_url):
    with pytest.raises(ValueError, match="Conference not found"):
        _book(db_url, "missing", date(2024, 5, 2), 1, "10")


def test_list_transactions_filters_by_month(db_url):
    conf = seed_conference(database_url=db_url)
    other = seed_conference(database_url=db_url, name="Outra", with_councils=False)
    _book(db_url, conf, date(2024, 4, 30), 1, "1")
    _book(db_url, conf, date(2024, 5, 31), 1, "2")
    _book(db_url, conf, date(2024, 5, 1), 16, "3")
    _book(db_url, conf, date(2024, 6, 1), 1, "4")
    _book(db_url, other, date(2024, 5, 10), 1, "5")

    with session_scope(database_url=db_url) as s:
        txs = list_transactions(s, conf, 5, 2024)
    assert [t.date for t in txs] == [date(2024, 5, 1), date(2024, 5, 31)]
    assert [t.value for t in txs] == [D("3"), D("2")]


def test_december_period_ends_at_new_year(db_url):
    conf = seed_conference(database_url=db_url)
    _book(db_url, conf, date(2023, 12, 31), 3, "7")
    _book(db_url, conf, date(2024, 1, 1), 3, "8")
    with session_scope(database_url=db_url) as s:
        txs = list_transactions(s, conf, 12, 2023)
    assert [t.value for t in txs] == [D("7")]


def test_delete_transaction(db_url):
    conf = seed_conference(database_url=db_url)
    tx_id = _book(db_url, conf, date(2024, 5, 2), 1, "10")
    with session_scope(database_url=db_url) as s:
        assert delete_transaction(s, tx_id) is True
    with session_scope(database_url=db_url) as s:
        assert delete_transaction(s, tx_id) is False
        assert count_transactions(s, conf) == 0


def test_add_ledger_rows_is_all_or_nothing(db_url):
    conf = seed_conference(database_url=db_url)
    rows = [
        LedgerRow(date="02/05/2024", category_id="1", value="10,00"),
        LedgerRow(date="03/05/2024", category_id="24", value="5,00"),
    ]
    with pytest.raises(InvalidCategory, match="row 2"):
        with session_scope(database_url=db_url) as s:
            add_ledger_rows(s, conference_id=conf, rows=rows)
    with session_scope(database_url=db_url) as s:
        assert count_transactions(s, conf) == 0


def test_monthly_map_from_stored_entries(db_url):
    conf = seed_conference(database_url=db_url)
    _book(db_url, conf, date(2024, 5, 2), 1, "500.00")
    _book(db_url, conf, date(2024, 5, 20), 16, "120.00")
    _book(db_url, conf, date(2024, 6, 1), 1, "999.00")

    result = monthly_map_for_period(
        conf, 5, 2024, opening_balance="1000.00", database_url=db_url
    )
    assert result.lines[15] == D("1500.00")
    assert result.lines[24] == D("50.00")
    assert result.lines[28] == D("170.00")
    assert result.closing_balance == D("1330.00")


def test_load_map_inputs_for_a_month_without_entries(db_url):
    conf = seed_conference(database_url=db_url)
    with session_scope(database_url=db_url) as s:
        inputs = load_map_inputs(s, conference_id=conf, month=2, year=2024)
    assert inputs.transactions == ()
    assert inputs.opening_balance == D("0")


def test_member_statistics_and_report_data(db_url):
    conf = seed_conference(database_url=db_url)
    seed_members(database_url=db_url, conference_id=conf)
    with session_scope(database_url=db_url) as s:
        stats = member_statistics(s, conf)
    assert stats == {
        "active_members": 3,
        "confrades_count": 2,
        "consocias_count": 1,
        "aspirantes_count": 1,
    }

    data = build_report_data(
        conf, 5, 2024, database_url=db_url, families_assisted_count=12, food_kg=D("35.5")
    )
    assert data.active_members == 3
    assert data.families_assisted_count == 12
    assert data.food_kg == D("35.5")


def test_add_member_rejects_unknown_type(db_url):
    conf = seed_conference(database_url=db_url)
    with session_scope(database_url=db_url) as s:
        with pytest.raises(ValueError, match="Member type"):
            add_member(s, conference_id=conf, name="X", type="Visitante")


def test_conference_header_names_the_council_chain(db_url):
    conf = seed_conference(database_url=db_url)
    with session_scope(database_url=db_url) as s:
        header = conference_header(s, conf)
    assert header["name"] == "Conferência São José"
    assert header["particular"] == "Particular Matriz"
    assert header["central"] == "Central Centro"
    assert header["metropolitan"] == "Metropolitano Sul"


def test_council_must_nest_under_the_right_type(db_url):
    with session_scope(database_url=db_url) as s:
        metro = create_council(s, type="Metropolitano", name="M")
        with pytest.raises(ValueError, match="must sit under"):
            create_council(s, type="Particular", name="P", parent_id=metro.id)
        with pytest.raises(ValueError, match="Unknown council type"):
            create_council(s, type="Regional", name="R")


def test_largest_storable_amount_round_trips(db_url):
    conf = seed_conference(database_url=db_url)
    _book(db_url, conf, date(2024, 5, 2), 1, "9999999999.99")
    with session_scope(database_url=db_url) as s:
        (tx,) = list_transactions(s, conf, 5, 2024)
    assert tx.value == D("9999999999.99")
