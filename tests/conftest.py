"""Pytest configuration for test isolation.

``db.client`` keeps one engine per process and refuses to rebind it to a
different ``DATABASE_URL``. Tests each bootstrap their own SQLite file, so the
shared engine is disposed before and after every test via an autouse fixture.
Environment defaults that the CLI would read are cleared for the same reason,
and any handler the CLI attached is dropped so later tests do not write to a
closed ``CliRunner`` stream.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import reset_engine

from ledger_import import logging_setup
from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture(autouse=True)
def _isolate_engine_and_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test without a bound engine or ambient configuration."""

    for var in ("DATABASE_URL", "LEDGER_IMPORT_USER_ID", logging_setup.LEVEL_ENV):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(logging_setup, "_handler", None)
    reset_engine()
    yield
    reset_engine()
    pkg = logging.getLogger(logging_setup.ROOT)
    for h in list(pkg.handlers):
        pkg.removeHandler(h)
    pkg.propagate = True


@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    """URL of a fresh file-backed SQLite database with the ledger schema."""

    return bootstrap_sqlite_db(tmp_path / "ledger.sqlite3")
