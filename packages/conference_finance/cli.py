# ruff: noqa: I001
"""CLI for the ``conference_finance`` package.

Command handlers (``cmd_*``) hold the logic and return a process exit code so
they can be called directly; the Typer commands at the bottom are thin
wrappers. Environment variables (notably ``DATABASE_URL``) are loaded from a
local ``.env`` via ``python-dotenv`` before any command runs.
"""

from __future__ import annotations

import json
import sys
from datetime import date
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from .errors import MapError
from .logging_setup import configure_logging, get_logger
from .map_lines import MAP_LINES, LineKind
from .models import parse_amount, parse_date

logger = get_logger("conference_finance.cli")


def _err(msg: str) -> None:
    print(f"Error: {msg}", file=sys.stderr)


def _resolve_period(month: int | None, year: int | None) -> tuple[int, int]:
    today = date.today()
    return (month or today.month), (year or today.year)


# ---- Command handlers ---------------------------------------------------------


def cmd_lines() -> int:
    """Print the map line catalog."""

    for line in MAP_LINES:
        print(f"{line.id:>2}\t{line.kind.value:<8}\t{line.role.value:<15}\t{line.label}")
    return 0


def cmd_add_conference(
    name: str, *, city: str | None = None, database_url: str | None = None
) -> int:
    from db.client import session_scope
    from .persistence import create_conference

    try:
        with session_scope(database_url=database_url) as session:
            conf = create_conference(session, name=name, city=city)
            conf_id = conf.id
    except ValueError as e:
        _err(str(e))
        return 1
    print(conf_id)
    return 0


def cmd_add_member(
    conference_id: str,
    name: str,
    *,
    member_type: str,
    role: str | None = None,
    database_url: str | None = None,
) -> int:
    from db.client import session_scope
    from .persistence import add_member

    try:
        with session_scope(database_url=database_url) as session:
            m = add_member(
                session, conference_id=conference_id, name=name, type=member_type, role=role
            )
            member_id = m.id
    except ValueError as e:
        _err(str(e))
        return 1
    print(member_id)
    return 0


def cmd_add_transaction(
    conference_id: str,
    *,
    value: str,
    entry_date: str | None = None,
    line: int | None = None,
    kind: str | None = None,
    description: str = "",
    database_url: str | None = None,
) -> int:
    """Book one ledger entry.

    When ``line`` is omitted, the line is picked interactively among the
    summable lines of ``kind`` (default: income).
    """

    from db.client import session_scope
    from .persistence import add_transaction

    try:
        amount = parse_amount(value)
        when = parse_date(entry_date) if entry_date else date.today()
    except ValueError as e:
        _err(str(e))
        return 1

    if line is None:
        from .term_ui import select_map_line

        try:
            line = select_map_line(LineKind(kind or "income"))
        except (EOFError, KeyboardInterrupt):
            _err("cancelled")
            return 1
        except ValueError as e:
            _err(str(e))
            return 1

    try:
        with session_scope(database_url=database_url) as session:
            tx = add_transaction(
                session,
                conference_id=conference_id,
                date=when,
                category_id=line,
                value=amount,
                description=description,
            )
    except (ValueError, SQLAlchemyError) as e:
        _err(str(e))
        return 1
    print(tx.id)
    return 0


def cmd_list_transactions(
    conference_id: str,
    *,
    month: int | None = None,
    year: int | None = None,
    database_url: str | None = None,
) -> int:
    from db.client import session_scope
    from .persistence import list_transactions
    from .report import fmt_amount, format_entry_date

    month, year = _resolve_period(month, year)
    try:
        with session_scope(database_url=database_url) as session:
            txs = list_transactions(session, conference_id, month, year)
    except ValueError as e:
        _err(str(e))
        return 1

    if not txs:
        print("Nenhum lançamento neste mês.")
        return 0
    for tx in txs:
        entrada = fmt_amount(tx.value) if tx.kind.value == "income" else ""
        saida = fmt_amount(tx.value) if tx.kind.value == "expense" else ""
        print(
            f"{tx.id}\t{format_entry_date(tx.date)}\t{tx.category_id:02d}\t"
            f"{tx.description}\t{entrada}\t{saida}"
        )
    return 0


def cmd_delete_transaction(transaction_id: str, *, database_url: str | None = None) -> int:
    from db.client import session_scope
    from .persistence import delete_transaction

    try:
        with session_scope(database_url=database_url) as session:
            deleted = delete_transaction(session, transaction_id)
    except SQLAlchemyError as e:
        _err(f"database error: {e}")
        return 1
    if not deleted:
        _err(f"Transaction not found: {transaction_id}")
        return 1
    return 0


def cmd_import_csv(
    conference_id: str, csv_path: str, *, database_url: str | None = None
) -> int:
    """Validate and book every row of a ledger CSV (all-or-nothing)."""

    import csv

    from db.client import session_scope
    from .ingest.utils import load_ledger_csv
    from .persistence import add_ledger_rows

    try:
        rows = load_ledger_csv(csv_path)
    except FileNotFoundError:
        _err(f"File not found: {csv_path}")
        return 1
    except PermissionError:
        _err(f"Permission denied: {csv_path}")
        return 1
    except csv.Error as e:
        _err(f"Failed to parse CSV: {e}")
        return 1
    except ValueError as e:
        _err(str(e))
        return 1

    if not rows:
        print("No ledger rows to import.")
        return 0

    try:
        with session_scope(database_url=database_url) as session:
            booked = add_ledger_rows(session, conference_id=conference_id, rows=rows)
    except ValueError as e:
        _err(f"import aborted, nothing was saved: {e}")
        return 1
    print(f"Imported {len(booked)} entries.")
    return 0


def cmd_monthly_map(
    conference_id: str,
    *,
    month: int | None = None,
    year: int | None = None,
    opening_balance: str = "0",
    as_json: bool = False,
    output: Path | None = None,
    database_url: str | None = None,
    manual: dict[str, Any] | None = None,
) -> int:
    """Compute and print the monthly map for one conference and month."""

    from pydantic import ValidationError

    from db.client import session_scope
    from .aggregate import compute_monthly_map
    from .models import MapReportData
    from .persistence import conference_header, load_map_inputs, member_statistics
    from .report import default_report_filename, render_map_text

    month, year = _resolve_period(month, year)
    try:
        balance = parse_amount(opening_balance)
    except ValueError as e:
        _err(f"invalid opening balance: {e}")
        return 1

    try:
        with session_scope(database_url=database_url) as session:
            inputs = load_map_inputs(
                session,
                conference_id=conference_id,
                month=month,
                year=year,
                opening_balance=balance,
            )
            header = conference_header(session, conference_id)
            stats: dict[str, Any] = dict(member_statistics(session, conference_id))
    except ValueError as e:
        _err(str(e))
        return 1

    if not inputs.transactions:
        print(
            f"No transactions for {month:02d}/{year}; ledger lines are zero.",
            file=sys.stderr,
        )

    try:
        result = compute_monthly_map(inputs)
    except MapError as e:
        _err(f"cannot build the map: {e}")
        return 1

    stats.update({k: v for k, v in (manual or {}).items() if v is not None})
    try:
        data = MapReportData(month=month, year=year, **stats)
    except ValidationError as e:
        _err(f"invalid report data: {e}")
        return 1

    if as_json:
        payload = result.as_dict()
        payload["report"] = data.model_dump(mode="json")
        text = json.dumps(payload, ensure_ascii=False, indent=2)
    else:
        text = render_map_text(
            result,
            data,
            conference_name=header["name"],
            councils={
                "particular": header["particular"],
                "central": header["central"],
                "metropolitan": header["metropolitan"],
            },
        )

    if output is not None:
        if output.is_dir():
            name = default_report_filename(header["name"], month, year)
            output = output / f"{name}.{'json' if as_json else 'txt'}"
        try:
            output.write_text(text + "\n", encoding="utf-8")
        except OSError as e:
            _err(f"cannot write {output}: {e}")
            return 1
        logger.info("monthly map written to %s", output)
        print(output)
    else:
        print(text)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Ledger and monthly financial map (Mapa Mensal) for conferences. "
        "Loads DATABASE_URL from a local .env before running."
    ),
)

DatabaseUrl = Annotated[
    str | None, typer.Option(help="Override DATABASE_URL (falls back to env var).")
]
ConferenceId = Annotated[str, typer.Option("--conference-id", help="Conference identifier.")]
Month = Annotated[int | None, typer.Option(min=1, max=12, help="Month (default: current).")]
Year = Annotated[int | None, typer.Option(min=1, help="Year (default: current).")]


@app.command("lines")
def lines_cmd() -> None:
    """List the 30 lines of the monthly map."""
    raise typer.Exit(cmd_lines())


@app.command("add-conference")
def add_conference_cmd(
    name: Annotated[str, typer.Option(help="Conference name.")],
    city: Annotated[str | None, typer.Option(help="City.")] = None,
    database_url: DatabaseUrl = None,
) -> None:
    """Create a conference and print its id."""
    raise typer.Exit(cmd_add_conference(name, city=city, database_url=database_url))


@app.command("add-member")
def add_member_cmd(
    conference_id: ConferenceId,
    name: Annotated[str, typer.Option(help="Member name.")],
    member_type: Annotated[
        str, typer.Option("--type", help="Confrade or Consócia.")
    ] = "Confrade",
    role: Annotated[str | None, typer.Option(help="Role (e.g. Aspirante).")] = None,
    database_url: DatabaseUrl = None,
) -> None:
    """Register a member of a conference and print its id."""
    raise typer.Exit(
        cmd_add_member(
            conference_id, name, member_type=member_type, role=role, database_url=database_url
        )
    )


@app.command("add-transaction")
def add_transaction_cmd(
    conference_id: ConferenceId,
    value: Annotated[str, typer.Option(help="Amount, e.g. 150,00 or 150.00.")],
    entry_date: Annotated[
        str | None, typer.Option("--date", help="DD/MM/YYYY or YYYY-MM-DD (default: today).")
    ] = None,
    line: Annotated[
        int | None, typer.Option(help="Map line; prompts interactively when omitted.")
    ] = None,
    kind: Annotated[
        str | None, typer.Option(help="income or expense (only used by the prompt).")
    ] = None,
    description: Annotated[str, typer.Option(help="Details.")] = "",
    database_url: DatabaseUrl = None,
) -> None:
    """Book a ledger entry against a map line."""
    raise typer.Exit(
        cmd_add_transaction(
            conference_id,
            value=value,
            entry_date=entry_date,
            line=line,
            kind=kind,
            description=description,
            database_url=database_url,
        )
    )


@app.command("list-transactions")
def list_transactions_cmd(
    conference_id: ConferenceId,
    month: Month = None,
    year: Year = None,
    database_url: DatabaseUrl = None,
) -> None:
    """List the entries of one month."""
    raise typer.Exit(
        cmd_list_transactions(conference_id, month=month, year=year, database_url=database_url)
    )


@app.command("delete-transaction")
def delete_transaction_cmd(
    transaction_id: Annotated[str, typer.Argument(help="Entry id.")],
    database_url: DatabaseUrl = None,
) -> None:
    """Delete a ledger entry."""
    raise typer.Exit(cmd_delete_transaction(transaction_id, database_url=database_url))


@app.command("import-csv")
def import_csv_cmd(
    conference_id: ConferenceId,
    csv_path: Annotated[
        Path,
        typer.Option(
            "--csv-path",
            help="Ledger CSV with columns Data, Linha, Descrição, Valor.",
            dir_okay=False,
        ),
    ],
    database_url: DatabaseUrl = None,
) -> None:
    """Import a ledger CSV; nothing is saved if any row is invalid."""
    raise typer.Exit(cmd_import_csv(conference_id, str(csv_path), database_url=database_url))


@app.command("monthly-map")
def monthly_map_cmd(
    conference_id: ConferenceId,
    month: Month = None,
    year: Year = None,
    opening_balance: Annotated[
        str, typer.Option(help="Line 14: balance carried over from last month.")
    ] = "0",
    as_json: Annotated[bool, typer.Option("--json", help="Emit JSON instead of text.")] = False,
    output: Annotated[
        Path | None,
        typer.Option(
            help="Write to this file, or into this directory under the default report name."
        ),
    ] = None,
    auxiliares: Annotated[int | None, typer.Option(min=0, help="Auxiliaries.")] = None,
    families_assisted: Annotated[
        int | None, typer.Option(min=0, help="Families assisted.")
    ] = None,
    people_assisted: Annotated[int | None, typer.Option(min=0, help="People assisted.")] = None,
    food_kg: Annotated[str | None, typer.Option(help="Food donated (kg).")] = None,
    special_works: Annotated[str | None, typer.Option(help="Special works (text).")] = None,
    people_attended_special_works: Annotated[
        int | None, typer.Option(min=0, help="People attended in special works.")
    ] = None,
    expenses_special_works: Annotated[
        str | None, typer.Option(help="Special works expenses (R$).")
    ] = None,
    construction_reform: Annotated[
        str | None, typer.Option(help="Construction/reform (text).")
    ] = None,
    database_url: DatabaseUrl = None,
) -> None:
    """Compute the monthly financial map."""

    manual: dict[str, Any] = {
        "auxiliares_count": auxiliares,
        "families_assisted_count": families_assisted,
        "people_assisted_count": people_assisted,
        "special_works": special_works,
        "people_attended_special_works": people_attended_special_works,
        "construction_reform": construction_reform,
    }
    try:
        if food_kg is not None:
            manual["food_kg"] = parse_amount(food_kg)
        if expenses_special_works is not None:
            manual["expenses_special_works"] = parse_amount(expenses_special_works)
    except ValueError as e:
        _err(str(e))
        raise typer.Exit(1) from e

    raise typer.Exit(
        cmd_monthly_map(
            conference_id,
            month=month,
            year=year,
            opening_balance=opening_balance,
            as_json=as_json,
            output=output,
            database_url=database_url,
            manual=manual,
        )
    )


@app.callback()
def _root() -> None:
    """Load ``.env`` (without overriding the environment) and set up logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


def main() -> None:  # pragma: no cover - console script entry
    app()


if __name__ == "__main__":  # pragma: no cover
    main()


__all__ = [
    "app",
    "main",
    "cmd_lines",
    "cmd_add_conference",
    "cmd_add_member",
    "cmd_add_transaction",
    "cmd_list_transactions",
    "cmd_delete_transaction",
    "cmd_import_csv",
    "cmd_monthly_map",
]
