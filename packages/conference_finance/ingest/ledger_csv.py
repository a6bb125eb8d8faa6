"""Adapter for mapping a treasurer's ledger CSV to :class:`LedgerRow` items.

CSV header (exact keys expected, any order; extra columns are ignored):
``Data, Linha, Descrição, Valor``

- ``Data``: ``DD/MM/YYYY`` or ``YYYY-MM-DD``
- ``Linha``: map line number, optionally followed by its label
  (``"16"`` or ``"16. Despesas com Cestas Básicas ..."``)
- ``Valor``: ``1.234,56``, ``1234,56`` or ``1234.56`` (``R$`` prefix allowed)

Blank lines (all cells empty) are skipped. The entry kind is not part of the
file; it follows from the map line when the rows are booked.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable, Iterator, Mapping

from pydantic import ValidationError

from ..models import LedgerRow

REQUIRED_HEADERS = ("Data", "Linha", "Descrição", "Valor")


def _clean_text(value: str | None) -> str:
    if value is None:
        return ""
    return re.sub(r"\s+", " ", value.replace("\r", " ").replace("\n", " ")).strip()


def check_headers(fieldnames: Iterable[str] | None) -> None:
    """Raise ``csv.Error`` naming the missing columns, if any."""

    headers = {h.strip() for h in (fieldnames or []) if h}
    if not headers:
        raise csv.Error("CSV appears to have no header row")
    missing = [h for h in REQUIRED_HEADERS if h not in headers]
    if missing:
        raise csv.Error("CSV header mismatch for ledger adapter. Missing columns: " + ", ".join(missing))


def to_ledger_rows(rows: Iterable[Mapping[str, str | None]]) -> Iterator[LedgerRow]:
    """Convert ``csv.DictReader`` rows to validated :class:`LedgerRow` items.

    Raises ``ValueError`` with the 1-based data row number on the first cell
    that cannot be parsed.
    """

    for n, raw in enumerate(rows, start=1):
        row = {(k or "").strip(): v for k, v in raw.items()}
        cells = [row.get(h) for h in REQUIRED_HEADERS]
        if all(not (c or "").strip() for c in cells):
            continue
        try:
            yield LedgerRow(
                date=(row.get("Data") or "").strip(),
                category_id=(row.get("Linha") or "").strip(),
                description=_clean_text(row.get("Descrição")),
                value=(row.get("Valor") or "").strip(),
            )
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValueError(f"row {n}: {details}") from e
