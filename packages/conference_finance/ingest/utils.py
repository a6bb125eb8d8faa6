"""Ingest utilities shared by CLI commands."""

from __future__ import annotations

import csv
from os import PathLike
from pathlib import Path

from ..models import LedgerRow
from .ledger_csv import check_headers, to_ledger_rows


def load_ledger_csv(csv_path: str | PathLike[str]) -> list[LedgerRow]:
    """Read a ledger CSV and return its validated rows.

    Accepts ``,`` or ``;`` delimited files (spreadsheets in pt-BR locales
    export with ``;``). A UTF-8 BOM is tolerated.
    """

    p = Path(csv_path)
    with p.open(encoding="utf-8-sig", newline="") as f:
        head = f.read(4096)
        f.seek(0)
        first_line = head.splitlines()[0] if head else ""
        delimiter = ";" if first_line.count(";") > first_line.count(",") else ","
        reader = csv.DictReader(f, delimiter=delimiter)
        check_headers(reader.fieldnames)
        return list(to_ledger_rows(reader))


__all__ = ["load_ledger_csv"]
