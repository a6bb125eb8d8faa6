# ruff: noqa: I001
"""Persistence integration for conference_finance.

Functions here read and write the shared database owned by ``libs/db``. They
rely on SQLAlchemy ORM models defined in ``db.models.finance`` and a session
provided by ``db.client``; callers own the transaction scope.

Scope:
- Ledger entries (``financial_transactions``): list by period, add, delete.
- Conference hierarchy rows needed to book entries and print a map header
  (councils, conferences, members).
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, TypedDict

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from db.models.finance import Conference, Council, FinancialTransaction, Member
from .aggregate import line_kind_for_entry, validate_transaction
from .errors import InvalidAmount, MapError
from .logging_setup import get_logger
from .models import LedgerRow, LedgerTransaction, MapInputs, TransactionKind

logger = get_logger("conference_finance.persistence")

_CENT = Decimal("0.01")
# financial_transactions.value is Numeric(12, 2)
MAX_AMOUNT = Decimal("9999999999.99")

# Councils nest Metropolitano > Central > Particular.
_PARENT_TYPE = {"Metropolitano": None, "Central": "Metropolitano", "Particular": "Central"}
MEMBER_TYPES = ("Confrade", "Consócia")


def _norm_str(v: Any) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


def _period_bounds(month: int, year: int) -> tuple[date, date]:
    """Return ``[first_day, first_day_of_next_month)`` for the period."""

    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    first = date(year, month, 1)
    last_day = calendar.monthrange(year, month)[1]
    return first, date(year, month, last_day) + timedelta(days=1)


def _to_ledger(row: FinancialTransaction) -> LedgerTransaction:
    return LedgerTransaction(
        id=row.id,
        conference_id=row.conference_id,
        date=row.date,
        category_id=row.category_id,
        description=row.description or "",
        value=Decimal(row.value),
        kind=TransactionKind(row.kind),
    )


# ---------------------------
# Hierarchy
# ---------------------------


def create_council(
    session: Session,
    *,
    type: str,
    name: str,
    parent_id: str | None = None,
    **details: Any,
) -> Council:
    """Insert a council after checking it nests under the right parent type."""

    name_n = _norm_str(name)
    if not name_n:
        raise ValueError("Council name cannot be empty")
    if type not in _PARENT_TYPE:
        raise ValueError(f"Unknown council type: {type!r}")

    expected_parent = _PARENT_TYPE[type]
    if parent_id is not None:
        parent = session.get(Council, parent_id)
        if parent is None:
            raise ValueError(f"Parent council not found: {parent_id!r}")
        if parent.type != expected_parent:
            raise ValueError(
                f"A {type} council must sit under a {expected_parent or 'no'} council, "
                f"got {parent.type}"
            )
    elif expected_parent is not None:
        logger.info("council %r (%s) created without a parent", name_n, type)

    row = Council(type=type, name=name_n, parent_id=parent_id, **details)
    session.add(row)
    session.flush()
    return row


def create_conference(session: Session, *, name: str, **details: Any) -> Conference:
    name_n = _norm_str(name)
    if not name_n:
        raise ValueError("Conference name cannot be empty")
    row = Conference(name=name_n, **details)
    session.add(row)
    session.flush()
    return row


def add_member(
    session: Session,
    *,
    conference_id: str,
    name: str,
    type: str,
    role: str | None = None,
    active: bool = True,
    admission_date: date | None = None,
) -> Member:
    if type not in MEMBER_TYPES:
        raise ValueError(f"Member type must be one of {MEMBER_TYPES}, got {type!r}")
    _require_conference(session, conference_id)
    row = Member(
        conference_id=conference_id,
        name=name.strip(),
        type=type,
        role=_norm_str(role),
        active=active,
        admission_date=admission_date,
    )
    session.add(row)
    session.flush()
    return row


def _require_conference(session: Session, conference_id: str) -> Conference:
    conf = session.get(Conference, conference_id)
    if conf is None:
        raise ValueError(f"Conference not found: {conference_id!r}")
    return conf


class ConferenceHeader(TypedDict):
    name: str
    foundation_date: date | None
    metropolitan: str | None
    central: str | None
    particular: str | None


def conference_header(session: Session, conference_id: str) -> ConferenceHeader:
    """Names printed at the top of the map (conference and its councils)."""

    conf = _require_conference(session, conference_id)

    def _council_name(cid: str | None) -> str | None:
        if cid is None:
            return None
        c = session.get(Council, cid)
        return c.name if c is not None else None

    return {
        "name": conf.name,
        "foundation_date": conf.foundation_date,
        "metropolitan": _council_name(conf.metropolitan_council_id),
        "central": _council_name(conf.central_council_id),
        "particular": _council_name(conf.particular_council_id),
    }


class MemberStatistics(TypedDict):
    active_members: int
    confrades_count: int
    consocias_count: int
    aspirantes_count: int


def member_statistics(session: Session, conference_id: str) -> MemberStatistics:
    """Headcounts of active members for the map header.

    Aspirants are members whose role is "Aspirante".
    """

    rows = (
        session.execute(
            select(Member.type, Member.role).where(
                (Member.conference_id == conference_id) & Member.active.is_(True)
            )
        )
        .all()
    )
    return {
        "active_members": len(rows),
        "confrades_count": sum(1 for t, _ in rows if t == "Confrade"),
        "consocias_count": sum(1 for t, _ in rows if t == "Consócia"),
        "aspirantes_count": sum(1 for _, r in rows if (r or "").strip().lower() == "aspirante"),
    }


# ---------------------------
# Ledger
# ---------------------------


def list_transactions(
    session: Session, conference_id: str, month: int, year: int
) -> tuple[LedgerTransaction, ...]:
    """Entries of ``conference_id`` dated within ``month``/``year``.

    Ordered by date, then creation time, then id for a stable listing.
    """

    start, end = _period_bounds(month, year)
    rows = (
        session.execute(
            select(FinancialTransaction)
            .where(
                (FinancialTransaction.conference_id == conference_id)
                & (FinancialTransaction.date >= start)
                & (FinancialTransaction.date < end)
            )
            .order_by(
                FinancialTransaction.date,
                FinancialTransaction.created_at,
                FinancialTransaction.id,
            )
        )
        .scalars()
        .all()
    )
    return tuple(_to_ledger(r) for r in rows)


def add_transaction(
    session: Session,
    *,
    conference_id: str,
    date: date,
    category_id: int,
    value: Decimal | float | int | str,
    description: str = "",
) -> LedgerTransaction:
    """Book a new entry against a summable map line.

    The entry kind is derived from the line, as the entry form does. The same
    rules as the aggregator apply, so a stored entry can never make a later
    map computation fail.
    """

    _require_conference(session, conference_id)
    kind = line_kind_for_entry(category_id)
    candidate = LedgerTransaction(
        id="(new)",
        conference_id=conference_id,
        date=date,
        category_id=category_id,
        description=(description or "").strip(),
        value=value,  # type: ignore[arg-type]  # validated below
        kind=kind,
    )
    amount = validate_transaction(candidate).quantize(_CENT, rounding=ROUND_HALF_UP)
    if amount <= 0:
        # Sub-cent values would be stored as zero.
        raise InvalidAmount(f"value rounds to zero: {value!r}")
    if amount > MAX_AMOUNT:
        raise InvalidAmount(f"value exceeds {MAX_AMOUNT}: {value!r}")

    row = FinancialTransaction(
        conference_id=conference_id,
        date=date,
        kind=kind.value,
        category_id=category_id,
        description=candidate.description,
        value=amount,
    )
    session.add(row)
    session.flush()
    logger.debug(
        "booked %s %s on line %d for conference=%s", kind.value, amount, category_id, conference_id
    )
    return _to_ledger(row)


def add_ledger_rows(
    session: Session, *, conference_id: str, rows: Iterable[LedgerRow]
) -> list[LedgerTransaction]:
    """Book several imported rows; the first invalid row aborts the batch.

    Callers should run this inside ``session_scope`` so that a failure rolls
    back rows booked earlier in the same batch.
    """

    booked: list[LedgerTransaction] = []
    for n, r in enumerate(rows, start=1):
        try:
            booked.append(
                add_transaction(
                    session,
                    conference_id=conference_id,
                    date=r.date,
                    category_id=r.category_id,
                    value=r.value,
                    description=r.description,
                )
            )
        except MapError as e:
            raise type(e)(f"row {n}: {e}", transaction_id=e.transaction_id) from e
    return booked


def delete_transaction(session: Session, transaction_id: str) -> bool:
    res = session.execute(
        delete(FinancialTransaction).where(FinancialTransaction.id == transaction_id)
    )
    return bool(res.rowcount)


def count_transactions(session: Session, conference_id: str) -> int:
    return int(
        session.execute(
            select(func.count())
            .select_from(FinancialTransaction)
            .where(FinancialTransaction.conference_id == conference_id)
        ).scalar_one()
    )


def load_map_inputs(
    session: Session,
    *,
    conference_id: str,
    month: int,
    year: int,
    opening_balance: Decimal | float | int | str = Decimal("0"),
) -> MapInputs:
    """Snapshot the period's ledger into :class:`MapInputs`."""

    _require_conference(session, conference_id)
    return MapInputs(
        conference_id=conference_id,
        month=month,
        year=year,
        transactions=list_transactions(session, conference_id, month, year),
        opening_balance=opening_balance,
    )


__all__ = [
    "MEMBER_TYPES",
    "MAX_AMOUNT",
    "create_council",
    "create_conference",
    "add_member",
    "conference_header",
    "member_statistics",
    "list_transactions",
    "add_transaction",
    "add_ledger_rows",
    "delete_transaction",
    "count_transactions",
    "load_map_inputs",
    "ConferenceHeader",
    "MemberStatistics",
]
