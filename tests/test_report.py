from __future__ import annotations

from datetime import date
from decimal import Decimal

from conference_finance import LedgerTransaction, MapInputs, TransactionKind, compute_monthly_map
from conference_finance.models import MapReportData
from conference_finance.report import (
    default_report_filename,
    fmt_amount,
    fmt_brl,
    format_entry_date,
    render_map_text,
)


def _result():
    txs = [
        LedgerTransaction("a", "c1", date(2024, 3, 1), 1, "", Decimal("1500.00"), TransactionKind.INCOME),
        LedgerTransaction("b", "c1", date(2024, 3, 2), 16, "", Decimal("120.00"), TransactionKind.EXPENSE),
    ]
    return compute_monthly_map(
        MapInputs("c1", 3, 2024, transactions=txs, opening_balance=Decimal("1000.00"))
    )


def test_pt_br_number_formatting():
    assert fmt_amount(Decimal("1234.5")) == "1.234,50"
    assert fmt_amount(Decimal("-810")) == "-810,00"
    assert fmt_brl(Decimal("1234.56")).endswith("1.234,56")
    assert "R$" in fmt_brl(Decimal("1"))
    assert format_entry_date(date(2024, 3, 9)) == "09/03/2024"


def test_render_map_text_lists_every_line_and_closing_balance():
    data = MapReportData(month=3, year=2024, active_members=5, families_assisted_count=8)
    text = render_map_text(
        _result(),
        data,
        conference_name="São José",
        councils={"particular": "Matriz", "central": None, "metropolitan": None},
    )
    assert "CONFERÊNCIA: SÃO JOSÉ" in text
    assert "MÊS: 03 Março" in text
    assert "Conselho Particular: MATRIZ" in text
    assert "Famílias Assistidas: 8" in text
    for n in range(1, 31):
        assert f"{n:02d}. " in text
    # derived lines are marked
    assert "*24. Décima" in text
    assert "150,00" in text  # tithe
    assert text.splitlines()[-1].startswith("Saldo final do mês: ")
    assert text.splitlines()[-1].endswith("2.230,00")


def test_default_report_filename():
    assert default_report_filename("Conferência São José", 3, 2024) == "Mapa_Conferência_São_José_3_2024"
