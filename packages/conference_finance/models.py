"""Data models for ``conference_finance``.

Plain frozen dataclasses carry the values that flow through the map
computation (ledger entries in, line table out). Pydantic models are used at
the edges where untrusted input arrives: imported ledger rows and the
manually typed statistics that accompany a printed map.
"""

from __future__ import annotations

import datetime as _dt
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .map_lines import INCOME_SIDE_LAST_ID, TITHE_ID

# ---------------------------------------------------------------------------
# Ledger entries
# ---------------------------------------------------------------------------


class TransactionKind(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True, slots=True)
class LedgerTransaction:
    """A single cash movement recorded by a conference treasurer.

    Attributes
    ----------
    id:
        Store identifier (UUID string for persisted rows).
    category_id:
        The map line the amount is booked against. Only summable lines are
        valid; the aggregator rejects anything else.
    value:
        Positive monetary amount. The sign is implied by ``kind``. Values are
        not checked here so that the aggregator can report the precise
        validation error.
    """

    id: str
    conference_id: str
    date: date
    category_id: int
    description: str
    value: Decimal
    kind: TransactionKind


# ---------------------------------------------------------------------------
# Map computation input/output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MapInputs:
    """Everything needed to compute one conference's map for one month.

    ``transactions`` is expected to already be filtered to the period; the
    store's ``list_transactions`` does that filtering by date.
    ``opening_balance`` is line 14, carried over manually from the previous
    month's closing balance. It may be negative.
    """

    conference_id: str
    month: int
    year: int
    transactions: tuple[LedgerTransaction, ...] = ()
    opening_balance: Decimal | float | int | str = Decimal("0")

    def __post_init__(self) -> None:
        if isinstance(self.month, bool) or not isinstance(self.month, int):
            raise ValueError("MapInputs.month must be an integer in 1..12")
        if not 1 <= self.month <= 12:
            raise ValueError(f"MapInputs.month must be in 1..12, got {self.month}")
        if isinstance(self.year, bool) or not isinstance(self.year, int) or self.year <= 0:
            raise ValueError("MapInputs.year must be a positive integer")
        # Accept any iterable but store an immutable snapshot
        if not isinstance(self.transactions, tuple):
            object.__setattr__(self, "transactions", tuple(self.transactions))


@dataclass(frozen=True, slots=True)
class MapResult:
    """The fully populated 30-line table of a monthly map.

    Never persisted; recompute it whenever the ledger or the opening balance
    changes.
    """

    conference_id: str
    month: int
    year: int
    lines: Mapping[int, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", MappingProxyType(dict(self.lines)))

    def line(self, line_id: int) -> Decimal:
        return self.lines[line_id]

    def income_side(self) -> list[tuple[int, Decimal]]:
        return [(i, v) for i, v in sorted(self.lines.items()) if i <= INCOME_SIDE_LAST_ID]

    def expense_side(self) -> list[tuple[int, Decimal]]:
        return [(i, v) for i, v in sorted(self.lines.items()) if i > INCOME_SIDE_LAST_ID]

    @property
    def closing_balance(self) -> Decimal:
        return self.lines[29]

    @property
    def tithe_due(self) -> Decimal:
        return self.lines[TITHE_ID]

    def as_dict(self) -> dict[str, Any]:
        """JSON-friendly representation (amounts as 2dp strings)."""
        return {
            "conference_id": self.conference_id,
            "month": self.month,
            "year": self.year,
            "lines": {str(i): f"{v:.2f}" for i, v in sorted(self.lines.items())},
        }


# ---------------------------------------------------------------------------
# Edge DTOs (validated)
# ---------------------------------------------------------------------------


class MapReportData(BaseModel):
    """Manually supplied statistics printed alongside the computed lines.

    These values are not derived from the ledger. Build one per report
    request and pass it to the renderer.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    month: int = Field(ge=1, le=12)
    year: int = Field(gt=0)

    # Header statistics
    active_members: int = Field(default=0, ge=0)
    confrades_count: int = Field(default=0, ge=0)
    consocias_count: int = Field(default=0, ge=0)
    aspirantes_count: int = Field(default=0, ge=0)
    auxiliares_count: int = Field(default=0, ge=0)
    families_assisted_count: int = Field(default=0, ge=0)
    people_assisted_count: int = Field(default=0, ge=0)

    # Footer
    food_kg: Decimal = Field(default=Decimal("0"), ge=0)
    special_works: str = ""
    people_attended_special_works: int = Field(default=0, ge=0)
    expenses_special_works: Decimal = Field(default=Decimal("0"), ge=0)
    construction_reform: str = ""


# Dots are thousands separators only after a non-zero leading group.
_BR_AMOUNT_RE = re.compile(r"^-?(?:[1-9]\d{0,2}(?:\.\d{3})+|\d+)(?:,\d+)?$")


def parse_amount(raw: Any) -> Decimal:
    """Parse ``1.234,56`` (pt-BR), ``1234.56`` or numeric input to ``Decimal``.

    An optional ``R$`` prefix is ignored. Raises ``ValueError`` when the text
    cannot be read as a number.
    """

    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, bool):
        raise ValueError("boolean is not an amount")
    if isinstance(raw, int | float):
        return Decimal(str(raw))
    s = str(raw).strip().replace("R$", "").replace(" ", "").replace("\u00a0", "")
    if not s:
        raise ValueError("empty amount")
    if _BR_AMOUNT_RE.match(s):
        s = s.replace(".", "").replace(",", ".")
    try:
        return Decimal(s)
    except InvalidOperation as e:
        raise ValueError(f"not an amount: {raw!r}") from e


def parse_date(raw: Any) -> date:
    """Parse ``DD/MM/YYYY`` or ISO ``YYYY-MM-DD``."""

    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    for fmt in ("%d/%m/%Y", "%Y-%m-%d"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"not a date (expected DD/MM/YYYY or YYYY-MM-DD): {raw!r}")


class LedgerRow(BaseModel):
    """One imported ledger row before it is booked against a conference."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    date: _dt.date
    category_id: int
    description: str = ""
    value: Decimal

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> _dt.date:
        return parse_date(v)

    @field_validator("category_id", mode="before")
    @classmethod
    def _parse_line(cls, v: Any) -> int:
        if isinstance(v, str):
            # Accept "07" as well as "07. Subvenções Oficiais"
            head = v.strip().split(".", 1)[0].strip()
            if not head.isdigit():
                raise ValueError(f"map line must start with its number: {v!r}")
            return int(head)
        return v

    @field_validator("value", mode="before")
    @classmethod
    def _parse_value(cls, v: Any) -> Decimal:
        return parse_amount(v)


__all__ = [
    "TransactionKind",
    "LedgerTransaction",
    "MapInputs",
    "MapResult",
    "MapReportData",
    "LedgerRow",
    "parse_amount",
    "parse_date",
]
