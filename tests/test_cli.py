from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from sqlalchemy.exc import OperationalError
from typer.testing import CliRunner

from db.client import session_scope

from conference_finance.cli import app
from conference_finance.persistence import list_transactions
from tests.helpers.db import seed_conference, seed_members

runner = CliRunner()


def _invoke(*args: str):
    return runner.invoke(app, list(args))


def _add(url: str, conf: str, when: str, line: str, value: str):
    return _invoke(
        "add-transaction",
        "--conference-id", conf,
        "--date", when,
        "--line", line,
        "--value", value,
        "--database-url", url,
    )


def test_lines_lists_the_catalog():
    result = _invoke("lines")
    assert result.exit_code == 0
    out = result.stdout.splitlines()
    assert len(out) == 30
    assert out[23].split("\t")[1].strip() == "derived"


def test_add_list_and_delete(db_url):
    conf = seed_conference(database_url=db_url)
    r = _add(db_url, conf, "02/05/2024", "1", "1.500,00")
    assert r.exit_code == 0, r.output
    tx_id = r.stdout.strip()

    r = _invoke(
        "list-transactions", "--conference-id", conf, "--month", "5", "--year", "2024",
        "--database-url", db_url,
    )
    assert r.exit_code == 0
    assert tx_id in r.stdout
    assert "02/05/2024" in r.stdout
    assert "1.500,00" in r.stdout

    r = _invoke("delete-transaction", tx_id, "--database-url", db_url)
    assert r.exit_code == 0
    r = _invoke("delete-transaction", tx_id, "--database-url", db_url)
    assert r.exit_code == 1
    assert "Error: Transaction not found" in r.output


def test_add_transaction_on_derived_line_fails(db_url):
    conf = seed_conference(database_url=db_url)
    r = _add(db_url, conf, "02/05/2024", "24", "10")
    assert r.exit_code == 1
    assert "Error:" in r.output
    assert "24" in r.output


def test_add_transaction_prompts_for_line_when_omitted(db_url, monkeypatch):
    conf = seed_conference(database_url=db_url)
    monkeypatch.setattr("conference_finance.term_ui.select_map_line", lambda kind: 18)
    r = _invoke(
        "add-transaction", "--conference-id", conf, "--date", "2024-05-03",
        "--value", "80", "--kind", "expense", "--database-url", db_url,
    )
    assert r.exit_code == 0, r.output
    with session_scope(database_url=db_url) as s:
        (tx,) = list_transactions(s, conf, 5, 2024)
    assert tx.category_id == 18
    assert tx.date == date(2024, 5, 3)


def test_import_csv_then_monthly_map_json(db_url, tmp_path: Path):
    conf = seed_conference(database_url=db_url)
    seed_members(database_url=db_url, conference_id=conf)
    csv_path = tmp_path / "maio.csv"
    csv_path.write_text(
        "Data;Linha;Descrição;Valor\n"
        "02/05/2024;1;Coleta;500,00\n"
        "20/05/2024;16;Cestas;120,00\n",
        encoding="utf-8",
    )
    r = _invoke("import-csv", "--conference-id", conf, "--csv-path", str(csv_path),
                "--database-url", db_url)
    assert r.exit_code == 0, r.output
    assert "Imported 2 entries." in r.stdout

    r = _invoke(
        "monthly-map", "--conference-id", conf, "--month", "5", "--year", "2024",
        "--opening-balance", "1.000,00", "--families-assisted", "4", "--json",
        "--database-url", db_url,
    )
    assert r.exit_code == 0, r.output
    payload = json.loads(r.stdout)
    assert payload["lines"]["29"] == "1330.00"
    assert payload["lines"]["30"] == "1500.00"
    assert payload["report"]["active_members"] == 3
    assert payload["report"]["families_assisted_count"] == 4


def test_import_csv_with_bad_row_saves_nothing(db_url, tmp_path: Path):
    conf = seed_conference(database_url=db_url)
    csv_path = tmp_path / "bad.csv"
    csv_path.write_text(
        "Data,Linha,Descrição,Valor\n"
        "02/05/2024,1,Coleta,10\n"
        "03/05/2024,13,Total,10\n",
        encoding="utf-8",
    )
    r = _invoke("import-csv", "--conference-id", conf, "--csv-path", str(csv_path),
                "--database-url", db_url)
    assert r.exit_code == 1
    assert "row 2" in r.output
    with session_scope(database_url=db_url) as s:
        assert list_transactions(s, conf, 5, 2024) == ()


def test_monthly_map_text_for_empty_month(db_url, tmp_path: Path):
    conf = seed_conference(database_url=db_url)
    out = tmp_path / "mapa.txt"
    r = _invoke(
        "monthly-map", "--conference-id", conf, "--month", "2", "--year", "2024",
        "--opening-balance", "250,00", "--output", str(out), "--database-url", db_url,
    )
    assert r.exit_code == 0, r.output
    assert "No transactions for 02/2024" in r.output
    text = out.read_text(encoding="utf-8")
    assert "MAPA DO MOVIMENTO MENSAL" in text
    assert text.rstrip().endswith("250,00")


def test_monthly_map_rejects_non_finite_opening_balance(db_url):
    conf = seed_conference(database_url=db_url)
    r = _invoke(
        "monthly-map", "--conference-id", conf, "--month", "2", "--year", "2024",
        "--opening-balance", "NaN", "--database-url", db_url,
    )
    assert r.exit_code == 1
    assert "Error: cannot build the map" in r.output


def test_unknown_conference_is_an_error(db_url):
    r = _invoke("monthly-map", "--conference-id", "nope", "--database-url", db_url)
    assert r.exit_code == 1
    assert "Conference not found" in r.output


def test_monthly_map_into_directory_uses_default_name(db_url, tmp_path: Path):
    conf = seed_conference(database_url=db_url, name="São Vicente")
    r = _invoke(
        "monthly-map", "--conference-id", conf, "--month", "3", "--year", "2024",
        "--output", str(tmp_path), "--json", "--database-url", db_url,
    )
    assert r.exit_code == 0, r.output
    written = tmp_path / "Mapa_São_Vicente_3_2024.json"
    assert json.loads(written.read_text(encoding="utf-8"))["month"] == 3


def test_monthly_map_unwritable_output_is_an_error(db_url, tmp_path: Path):
    conf = seed_conference(database_url=db_url)
    target = tmp_path / "missing-dir" / "mapa.txt"
    r = _invoke(
        "monthly-map", "--conference-id", conf, "--month", "3", "--year", "2024",
        "--output", str(target), "--database-url", db_url,
    )
    assert r.exit_code == 1
    assert "Error: cannot write" in r.output


def test_delete_transaction_database_failure_is_an_error(db_url, monkeypatch):
    def _locked(session, transaction_id):
        raise OperationalError("DELETE FROM financial_transactions", {}, Exception("locked"))

    monkeypatch.setattr("conference_finance.persistence.delete_transaction", _locked)
    r = _invoke("delete-transaction", "abc", "--database-url", db_url)
    assert r.exit_code == 1
    assert "Error: database error" in r.output
