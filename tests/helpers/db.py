"""DB helpers for tests: bootstrap a temporary SQLite DB and seed registries."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from db import Base
from db.client import get_engine, session_scope
from db.models.ledger import ExpenseCategory, IncomeSource
from sqlalchemy import inspect


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)
    Base.metadata.create_all(bind=engine)
    _assert_schema_in_sync(engine)

    if set_default_env:
        # Preserve prior non-overriding semantics
        os.environ.setdefault("DATABASE_URL", url)
    return url


def seed_categories(
    *, database_url: str, user_id: str, names: Iterable[str], active: bool = True
) -> list[int]:
    """Insert expense categories in order and return their ids."""

    with session_scope(database_url=database_url) as session:
        rows = [ExpenseCategory(user_id=user_id, name=n, is_active=active) for n in names]
        session.add_all(rows)
        session.flush()
        return [r.id for r in rows]


def seed_sources(
    *, database_url: str, user_id: str, names: Iterable[str], active: bool = True
) -> list[int]:
    """Insert income sources in order and return their ids."""

    with session_scope(database_url=database_url) as session:
        rows = [IncomeSource(user_id=user_id, name=n, is_active=active) for n in names]
        session.add_all(rows)
        session.flush()
        return [r.id for r in rows]


def _assert_schema_in_sync(engine) -> None:
    """Quick sanity check: every ORM table exists with the ORM column set."""

    insp = inspect(engine)
    for table in Base.metadata.sorted_tables:
        got = {c["name"] for c in insp.get_columns(table.name)}
        expected = {c.name for c in table.columns}
        assert got == expected, (
            f"{table.name} schema drift: missing={expected - got or '∅'}, "
            f"extra={got - expected or '∅'}"
        )
