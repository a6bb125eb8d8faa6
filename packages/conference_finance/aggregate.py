"""Monthly map aggregation.

Turns a period's ledger entries plus the manually carried-over opening balance
into the 30 values of the monthly map. The computation is pure and
synchronous: it performs no I/O and keeps no state between calls.

Derivation order
----------------
1. Every line starts at zero.
2. Each entry is validated and added to its (summable) line.
3. Line 6  = lines 1..5 (base for the tithe).
4. Line 13 = line 6 + lines 7..12.
5. Line 14 = opening balance (external input).
6. Line 15 = line 13 + line 14.
7. Line 24 = 10% of line 6, rounded half away from zero to cents.
8. Line 28 = lines 16..27 (with the derived line 24).
9. Line 29 = line 15 - line 28 (may be negative).
10. Line 30 = line 28 + line 29.

Any invalid entry aborts the whole computation; partial tables are never
returned.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .errors import InvalidAmount, InvalidCategory, KindMismatch
from .logging_setup import get_logger
from .map_lines import (
    OPENING_BALANCE_ID,
    TITHE_ID,
    LineKind,
    all_ids,
    get_line,
    is_summable,
)
from .models import LedgerTransaction, MapInputs, MapResult, TransactionKind

logger = get_logger("conference_finance.aggregate")

_CENT = Decimal("0.01")
TITHE_RATE = Decimal("0.10")


def _to_decimal(raw: Any) -> Decimal | None:
    """Convert ``raw`` to ``Decimal``; ``None`` when it is not a number at all."""

    if isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, int | float | str):
        try:
            # str() keeps floats like 0.1 at their shortest repr
            return Decimal(str(raw).strip())
        except InvalidOperation:
            return None
    return None


def round_currency(value: Decimal) -> Decimal:
    """Round to cents, half away from zero (not banker's rounding)."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def validate_transaction(tx: LedgerTransaction) -> Decimal:
    """Check a single ledger entry and return its value as ``Decimal``.

    Raises
    ------
    InvalidCategory
        Line id outside 1..30, or a derived line (6, 13, 14, 15, 24, 28, 29, 30).
    KindMismatch
        ``tx.kind`` disagrees with the line's income/expense kind.
    InvalidAmount
        Value is zero, negative, NaN, infinite or not a number.
    """

    cat = tx.category_id
    if not is_summable(cat):
        if isinstance(cat, int) and not isinstance(cat, bool) and 1 <= cat <= 30:
            reason = f"line {cat} is derived and cannot receive entries"
        else:
            reason = f"unknown map line {cat!r}"
        raise InvalidCategory(
            f"transaction {tx.id}: {reason}", transaction_id=tx.id
        )

    expected = get_line(cat).kind
    try:
        declared = TransactionKind(tx.kind)
    except ValueError:
        declared = None
    if declared is None or declared.value != expected.value:
        raise KindMismatch(
            f"transaction {tx.id}: declared {tx.kind!r} but line {cat} is {expected.value}",
            transaction_id=tx.id,
        )

    value = _to_decimal(tx.value)
    if value is None or not value.is_finite() or value <= 0:
        raise InvalidAmount(
            f"transaction {tx.id}: value must be a positive finite amount, got {tx.value!r}",
            transaction_id=tx.id,
        )
    return value


def _opening_balance(raw: Any) -> Decimal:
    value = _to_decimal(raw)
    if value is None or not value.is_finite():
        raise InvalidAmount(f"opening balance must be a finite amount, got {raw!r}")
    return value


def _sum(lines: Mapping[int, Decimal], ids: range) -> Decimal:
    return sum((lines[i] for i in ids), Decimal("0"))


def compute_monthly_map(inputs: MapInputs) -> MapResult:
    """Compute the full 30-line table for ``inputs``.

    Deterministic: identical inputs yield equal results. Raises a
    :class:`~conference_finance.errors.MapError` subclass on the first invalid
    entry (or an invalid opening balance); nothing is returned in that case.
    """

    opening = _opening_balance(inputs.opening_balance)

    lines: dict[int, Decimal] = {i: Decimal("0") for i in all_ids()}

    try:
        for tx in inputs.transactions:
            value = validate_transaction(tx)
            lines[tx.category_id] += value
    except (InvalidCategory, KindMismatch, InvalidAmount) as e:
        logger.warning(
            "monthly map aborted conference=%s period=%02d/%d: %s",
            inputs.conference_id,
            inputs.month,
            inputs.year,
            e,
        )
        raise

    lines[6] = _sum(lines, range(1, 6))
    lines[13] = lines[6] + _sum(lines, range(7, 13))
    lines[OPENING_BALANCE_ID] = opening
    lines[15] = lines[13] + lines[OPENING_BALANCE_ID]
    lines[TITHE_ID] = round_currency(lines[6] * TITHE_RATE)
    lines[28] = _sum(lines, range(16, 28))
    lines[29] = lines[15] - lines[28]
    lines[30] = lines[28] + lines[29]

    logger.debug(
        "monthly map computed conference=%s period=%02d/%d entries=%d closing=%s",
        inputs.conference_id,
        inputs.month,
        inputs.year,
        len(inputs.transactions),
        lines[29],
    )

    return MapResult(
        conference_id=inputs.conference_id,
        month=inputs.month,
        year=inputs.year,
        lines=lines,
    )


def check_identities(result: MapResult) -> list[str]:
    """Return a description of every violated map identity (empty when sound)."""

    ln = result.lines
    problems: list[str] = []

    def _expect(name: str, got: Decimal, want: Decimal) -> None:
        if got != want:
            problems.append(f"{name}: {got} != {want}")

    _expect("line 6 = sum(1..5)", ln[6], _sum(ln, range(1, 6)))
    _expect("line 13 = line 6 + sum(7..12)", ln[13], ln[6] + _sum(ln, range(7, 13)))
    _expect("line 15 = line 13 + line 14", ln[15], ln[13] + ln[14])
    _expect("line 24 = 10% of line 6", ln[24], round_currency(ln[6] * TITHE_RATE))
    _expect("line 28 = sum(16..27)", ln[28], _sum(ln, range(16, 28)))
    _expect("line 29 = line 15 - line 28", ln[29], ln[15] - ln[28])
    _expect("line 30 = line 28 + line 29", ln[30], ln[28] + ln[29])
    _expect("line 30 = line 15", ln[30], ln[15])
    return problems


def line_kind_for_entry(line_id: int) -> TransactionKind:
    """Kind an entry booked against ``line_id`` must carry."""

    if not is_summable(line_id):
        raise InvalidCategory(f"map line {line_id!r} cannot receive entries")
    kind = get_line(line_id).kind
    return TransactionKind.INCOME if kind is LineKind.INCOME else TransactionKind.EXPENSE


__all__ = [
    "TITHE_RATE",
    "compute_monthly_map",
    "validate_transaction",
    "check_identities",
    "round_currency",
    "line_kind_for_entry",
]
