"""Fixed catalog of the 30 lines of the monthly financial map ("Mapa Mensal").

The statutory report has a fixed layout: lines 1..15 are the receipts side and
lines 16..30 the payments side. Each line is either *summable* (it accepts raw
ledger entries), *computed* (derived from other lines by the aggregator) or an
*external input* (line 14, the opening balance, which is typed in by the
treasurer rather than summed or computed).

Exports
-------
- ``MAP_LINES``: the ordered catalog.
- ``line_kind(...)``, ``is_summable(...)``, ``all_ids()``, ``get_line(...)``:
  lookups used both to validate ledger entries and to drive aggregation.
- ``selectable_lines(...)``: the lines offered by entry forms for a given
  transaction kind.

The derivation formulas in ``conference_finance.aggregate`` are positionally
tied to these ids; changing the catalog requires changing both modules.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType


class LineKind(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"
    DERIVED = "derived"


class LineRole(StrEnum):
    """How a line obtains its value."""

    SUMMABLE = "summable"
    COMPUTED = "computed"
    EXTERNAL_INPUT = "external_input"


@dataclass(frozen=True, slots=True)
class MapLine:
    id: int
    kind: LineKind
    role: LineRole
    label: str

    @property
    def is_derived(self) -> bool:
        """True for every line whose value is not summed from ledger entries."""
        return self.role is not LineRole.SUMMABLE

    @property
    def side(self) -> LineKind:
        return LineKind.INCOME if self.id <= INCOME_SIDE_LAST_ID else LineKind.EXPENSE


INCOME_SIDE_LAST_ID = 15
OPENING_BALANCE_ID = 14
TITHE_ID = 24


def _summable(line_id: int, kind: LineKind, label: str) -> MapLine:
    return MapLine(line_id, kind, LineRole.SUMMABLE, label)


def _computed(line_id: int, label: str) -> MapLine:
    return MapLine(line_id, LineKind.DERIVED, LineRole.COMPUTED, label)


_I = LineKind.INCOME
_E = LineKind.EXPENSE

MAP_LINES: tuple[MapLine, ...] = (
    # Receipts
    _summable(1, _I, "01. Coleta nas reuniões durante o mês"),
    _summable(2, _I, "02. Subscritores e Benfeitores"),
    _summable(3, _I, "03. Doações Recebidas"),
    _summable(4, _I, "04. Receitas Líquidas com Eventos (Rifa, Bazar, almoços etc.)"),
    _summable(5, _I, "05. Outras Receitas Sujeitas a Décimas"),
    _computed(6, "06. Subtotal (Valor base para cálculo da Décima do mês)"),
    _summable(7, _I, "07. Subvenções Oficiais"),
    _summable(8, _I, "08. Contribuição da Solidariedade e Coleta de Ozanam"),
    _summable(9, _I, "09. União Fraternal (Contribuições Recebidas)"),
    _summable(10, _I, "10. Outras Receitas não sujeitas a décima"),
    _summable(11, _I, "11. Receitas Diversas"),
    _summable(12, _I, "12. Recebimento de Contribuições para Repasses"),
    _computed(13, "13. Total dos Recebimentos (Somar da linha 06 a linha 12)"),
    MapLine(
        OPENING_BALANCE_ID,
        LineKind.DERIVED,
        LineRole.EXTERNAL_INPUT,
        "14. Saldo no início do mês (Igual ao Saldo final do mês anterior)",
    ),
    _computed(15, "15. Total Recebimentos + Saldo início do mês"),
    # Payments
    _summable(16, _E, "16. Despesas com Cestas Básicas (alimentos, higiene, etc.)"),
    _summable(17, _E, "17. Despesas com Moradias dos Assistidos (Construção, Aluguel)"),
    _summable(18, _E, "18. Pagamentos de contas Assistidos (água, luz, gás, etc.)"),
    _summable(19, _E, "19. Despesas com Obras Especiais"),
    _summable(20, _E, "20. União Fraternal (Contribuições a Unidades Vicentinas)"),
    _summable(21, _E, "21. Outras despesas"),
    _summable(22, _E, "22. Despesas com Subvenções"),
    _summable(23, _E, "23. Despesas Administrativas e de Consumo da Conferência"),
    _computed(TITHE_ID, "24. Décima paga ao Conselho Particular (10% da linha 6)"),
    _summable(25, _E, "25. Outras saídas"),
    _summable(26, _E, "26. Repasses da Contribuição da Solidariedade e Ozanam"),
    _summable(27, _E, "27. Repasses de contribuições Recebidas"),
    _computed(28, "28. Total dos Pagamentos (Somar da linha 16 a linha 27)"),
    _computed(29, "29. Saldo no final do mês (linha 15 - linha 28)"),
    _computed(30, "30. Total Pagamentos + Saldo Final"),
)

_BY_ID: Mapping[int, MapLine] = MappingProxyType({line.id: line for line in MAP_LINES})

DERIVED_IDS: frozenset[int] = frozenset(line.id for line in MAP_LINES if line.is_derived)
SUMMABLE_IDS: frozenset[int] = frozenset(line.id for line in MAP_LINES if not line.is_derived)


def _check_catalog() -> None:
    ids = [line.id for line in MAP_LINES]
    if ids != list(range(1, 31)):
        raise RuntimeError("map lines must be exactly 1..30 in canonical order")
    for line in MAP_LINES:
        if line.kind is not LineKind.DERIVED and line.kind is not line.side:
            raise RuntimeError(f"line {line.id} is {line.kind} but sits on the {line.side} side")


_check_catalog()


def get_line(line_id: int) -> MapLine:
    """Return the catalog entry for ``line_id``; ``KeyError`` when unknown."""
    return _BY_ID[line_id]


def line_kind(line_id: int) -> LineKind:
    return _BY_ID[line_id].kind


def is_summable(line_id: int) -> bool:
    """True iff ``line_id`` exists and accepts raw ledger entries."""
    # bool is an int subclass; True must not alias line 1
    if isinstance(line_id, bool) or not isinstance(line_id, int):
        return False
    return line_id in SUMMABLE_IDS


def all_ids() -> tuple[int, ...]:
    return tuple(line.id for line in MAP_LINES)


def selectable_lines(kind: LineKind | str) -> list[MapLine]:
    """Lines an entry form may offer for a transaction of ``kind``.

    Derived lines (including the opening balance) are never selectable.
    """

    k = LineKind(kind)
    if k is LineKind.DERIVED:
        raise ValueError("derived lines cannot receive ledger entries")
    return [line for line in MAP_LINES if line.kind is k and not line.is_derived]


__all__ = [
    "LineKind",
    "LineRole",
    "MapLine",
    "MAP_LINES",
    "DERIVED_IDS",
    "SUMMABLE_IDS",
    "INCOME_SIDE_LAST_ID",
    "OPENING_BALANCE_ID",
    "TITHE_ID",
    "get_line",
    "line_kind",
    "is_summable",
    "all_ids",
    "selectable_lines",
]
