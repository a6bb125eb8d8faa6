"""Plain-text preview of a monthly map.

Lays out the computed lines the way the printed form does: receipts (lines
1..15) on the left, payments (16..30) on the right, derived lines marked with
``*``. Optional header/footer statistics come from a :class:`MapReportData`
built for the request.
"""

from __future__ import annotations

from decimal import Decimal

from babel.dates import format_date
from babel.numbers import format_currency, format_decimal

from .map_lines import get_line
from .models import MapReportData, MapResult

LOCALE = "pt_BR"

MONTH_NAMES = (
    "Janeiro",
    "Fevereiro",
    "Março",
    "Abril",
    "Maio",
    "Junho",
    "Julho",
    "Agosto",
    "Setembro",
    "Outubro",
    "Novembro",
    "Dezembro",
)


def fmt_brl(value: Decimal) -> str:
    """R$ 1.234,56 in pt-BR."""
    return format_currency(value, "BRL", locale=LOCALE)


def fmt_amount(value: Decimal) -> str:
    """1.234,56 (no currency symbol), as printed in the map columns."""
    return format_decimal(value, format="#,##0.00", locale=LOCALE)


def _cell(line_id: int, value: Decimal, width: int) -> str:
    line = get_line(line_id)
    mark = "*" if line.is_derived else " "
    label = line.label
    room = width - 16
    if len(label) > room:
        label = label[: room - 1] + "…"
    return f"{mark}{label:<{room}} {fmt_amount(value):>14}"


def render_map_text(
    result: MapResult,
    data: MapReportData | None = None,
    *,
    conference_name: str | None = None,
    councils: dict[str, str | None] | None = None,
    width: int = 78,
) -> str:
    """Render ``result`` as a two-column text table.

    ``councils`` may carry ``particular``/``central``/``metropolitan`` names
    for the header. ``width`` is the width of each column.
    """

    out: list[str] = []
    title = "MAPA DO MOVIMENTO MENSAL PARA CONFERÊNCIAS"
    total_w = width * 2 + 3
    out.append(title.center(total_w))
    month_name = MONTH_NAMES[result.month - 1]
    out.append(
        f"CONFERÊNCIA: {(conference_name or result.conference_id).upper()}"
        f"    MÊS: {result.month:02d} {month_name}    ANO: {result.year}"
    )
    if councils:
        parts = [
            f"Conselho {label}: {(councils.get(key) or '-').upper()}"
            for key, label in (
                ("particular", "Particular"),
                ("central", "Central"),
                ("metropolitan", "Metropolitano"),
            )
        ]
        out.append("    ".join(parts))
    if data is not None:
        out.append(
            f"Nº de Membros: {data.active_members}  Confrades: {data.confrades_count}  "
            f"Consócias: {data.consocias_count}  Aspirantes: {data.aspirantes_count}  "
            f"Auxiliares: {data.auxiliares_count}  "
            f"Famílias Assistidas: {data.families_assisted_count}  "
            f"Pessoas Assistidas: {data.people_assisted_count}"
        )

    out.append("-" * total_w)
    out.append(
        f"{'RECEBIMENTOS (Receitas/Arrecadações)':<{width}} | "
        f"{'PAGAMENTOS (Despesas/Inv. Sociais)':<{width}}"
    )
    out.append("-" * total_w)
    for (lid, lval), (rid, rval) in zip(result.income_side(), result.expense_side(), strict=True):
        out.append(f"{_cell(lid, lval, width)} | {_cell(rid, rval, width)}")
    out.append("-" * total_w)

    if data is not None:
        out.append(
            f"Alimentos doados: {format_decimal(data.food_kg, locale=LOCALE)} Kg    "
            f"Obras Especiais: {data.special_works or '-'}    "
            f"Pessoas atendidas nas O.E.: {data.people_attended_special_works}"
        )
        out.append(
            f"Despesas do mês com O.E.: {fmt_brl(data.expenses_special_works)}    "
            f"Construção/Reforma: {data.construction_reform or '-'}"
        )
    out.append(f"Saldo final do mês: {fmt_brl(result.closing_balance)}")
    return "\n".join(out)


def default_report_filename(conference_name: str, month: int, year: int) -> str:
    """``Mapa_<Conference_Name>_<month>_<year>``, matching the printed form."""
    return f"Mapa_{'_'.join(conference_name.split())}_{month}_{year}"


def format_entry_date(d) -> str:
    """dd/mm/aaaa in pt-BR."""
    return format_date(d, format="dd/MM/yyyy", locale=LOCALE)


__all__ = [
    "MONTH_NAMES",
    "fmt_brl",
    "fmt_amount",
    "render_map_text",
    "default_report_filename",
    "format_entry_date",
]
