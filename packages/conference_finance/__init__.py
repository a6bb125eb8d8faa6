"""Public interface for the ``conference_finance`` package.

Symbol re-exports only; see ``conference_finance.aggregate`` for the monthly
map computation and ``conference_finance.map_lines`` for the line catalog.
"""

from .aggregate import check_identities, compute_monthly_map, validate_transaction
from .errors import InvalidAmount, InvalidCategory, KindMismatch, MapError
from .map_lines import (
    MAP_LINES,
    LineKind,
    LineRole,
    MapLine,
    all_ids,
    is_summable,
    line_kind,
    selectable_lines,
)
from .models import (
    LedgerRow,
    LedgerTransaction,
    MapInputs,
    MapReportData,
    MapResult,
    TransactionKind,
)

__all__ = [
    # Computation
    "compute_monthly_map",
    "validate_transaction",
    "check_identities",
    # Errors
    "MapError",
    "InvalidCategory",
    "KindMismatch",
    "InvalidAmount",
    # Catalog
    "MAP_LINES",
    "MapLine",
    "LineKind",
    "LineRole",
    "all_ids",
    "is_summable",
    "line_kind",
    "selectable_lines",
    # Models
    "LedgerTransaction",
    "LedgerRow",
    "MapInputs",
    "MapResult",
    "MapReportData",
    "TransactionKind",
]
