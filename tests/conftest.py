"""Pytest configuration for test isolation.

Engines are cached per database URL by ``db.client``. Each test gets its own
SQLite file, so the cache is dropped after every test to release file handles
and keep one test's engine from leaking into the next. ``DATABASE_URL`` is
removed from the environment so that a developer's ``.env`` never points a
test at a real database.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from db.client import dispose_engines

from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture(autouse=True)
def _isolate_database(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    yield
    dispose_engines()


@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    """URL of a fresh file-backed SQLite database with the full schema."""

    return bootstrap_sqlite_db(tmp_path / "finance.sqlite3")
