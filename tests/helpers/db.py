"""DB helpers for tests: bootstrap a temporary SQLite DB and seed a conference."""

from __future__ import annotations

import os
from pathlib import Path

from db import Base
from db.client import get_engine, session_scope
from sqlalchemy import text as sql_text

from conference_finance.persistence import add_member, create_conference, create_council


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)
    Base.metadata.create_all(bind=engine)
    _assert_schema_in_sync(url)

    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def seed_conference(
    *,
    database_url: str,
    name: str = "Conferência São José",
    with_councils: bool = True,
) -> str:
    """Insert a conference (optionally under a full council chain); return its id."""

    with session_scope(database_url=database_url) as session:
        ids: dict[str, str] = {}
        if with_councils:
            metro = create_council(session, type="Metropolitano", name="Metropolitano Sul")
            central = create_council(
                session, type="Central", name="Central Centro", parent_id=metro.id
            )
            particular = create_council(
                session, type="Particular", name="Particular Matriz", parent_id=central.id
            )
            ids = {
                "metropolitan_council_id": metro.id,
                "central_council_id": central.id,
                "particular_council_id": particular.id,
            }
        conf = create_conference(session, name=name, city="Curitiba", **ids)
        return conf.id


def seed_members(*, database_url: str, conference_id: str) -> None:
    """Two confrades (one aspirant), one consócia and one inactive member."""

    with session_scope(database_url=database_url) as session:
        add_member(session, conference_id=conference_id, name="João", type="Confrade")
        add_member(
            session,
            conference_id=conference_id,
            name="Pedro",
            type="Confrade",
            role="Aspirante",
        )
        add_member(session, conference_id=conference_id, name="Maria", type="Consócia")
        add_member(
            session,
            conference_id=conference_id,
            name="Ana",
            type="Consócia",
            active=False,
        )


def _assert_schema_in_sync(database_url: str) -> None:
    """Quick sanity check: every ORM table exists with the same column set."""

    with session_scope(database_url=database_url) as session:
        for table in Base.metadata.sorted_tables:
            rows = session.execute(sql_text(f"PRAGMA table_info('{table.name}')")).fetchall()
            got = {row[1] for row in rows}  # (cid, name, type, notnull, dflt_value, pk)
            expected = {c.name for c in table.columns}
            assert got == expected, (
                f"{table.name} schema drift: missing={expected - got or '∅'}, "
                f"extra={got - expected or '∅'}"
            )
