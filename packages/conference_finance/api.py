"""Public API for the ``conference_finance`` package.

The map computation itself lives in ``conference_finance.aggregate`` and is
re-exported here. The DB-backed helpers below fetch a period's ledger through
``conference_finance.persistence`` and hand the snapshot to the aggregator.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from .aggregate import compute_monthly_map  # noqa: F401  (re-export)
from .models import MapInputs, MapReportData, MapResult

# DB imports stay local to the functions so that pure computation callers do
# not need a configured database.


def monthly_map_for_period(
    conference_id: str,
    month: int,
    year: int,
    *,
    opening_balance: Decimal | float | int | str = Decimal("0"),
    database_url: str | None = None,
) -> MapResult:
    """Load the period's entries from the store and compute the map.

    The store is read in a single short transaction; the computation runs on
    the resulting snapshot after the session is closed.
    """

    from db.client import session_scope

    from .persistence import load_map_inputs

    with session_scope(database_url=database_url) as session:
        inputs: MapInputs = load_map_inputs(
            session,
            conference_id=conference_id,
            month=month,
            year=year,
            opening_balance=opening_balance,
        )
    return compute_monthly_map(inputs)


def build_report_data(
    conference_id: str,
    month: int,
    year: int,
    *,
    database_url: str | None = None,
    **manual: Any,
) -> MapReportData:
    """Assemble the statistics printed with a map.

    Member headcounts come from the store; ``manual`` supplies the rest
    (families/people assisted, food kg, special works, ...) and may also
    override a stored headcount.
    """

    from db.client import session_scope

    from .persistence import member_statistics

    with session_scope(database_url=database_url) as session:
        stats = dict(member_statistics(session, conference_id))
    stats.update({k: v for k, v in manual.items() if v is not None})
    return MapReportData(month=month, year=year, **stats)


__all__ = [
    "compute_monthly_map",
    "monthly_map_for_period",
    "build_report_data",
]
