"""Engine and session access for the ledger database.

One engine is bound per process, from ``DATABASE_URL`` or the URL the first
caller passes. Later callers get the same engine; asking for a different URL
is an error until :func:`reset_engine` runs (tests rebind per temp database).

    from db.client import session_scope

    with session_scope(database_url=url) as s:
        s.add(row)

SQLite connections run with ``PRAGMA foreign_keys = ON`` so expenses and
incomes cannot point at registry rows that do not exist.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


@dataclass(frozen=True, slots=True)
class _Binding:
    url: str
    engine: Engine
    sessions: sessionmaker[Session]


_BINDING: _Binding | None = None


def _pick_url(explicit: str | None) -> str:
    url = explicit or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("no database configured: pass --database-url or set DATABASE_URL")
    return url


def _sqlite_fk_on(dbapi_conn, _record) -> None:  # pragma: no cover - driver hook
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def _bind(url: str) -> _Binding:
    engine = create_engine(url, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _sqlite_fk_on)
    return _Binding(
        url=url,
        engine=engine,
        sessions=sessionmaker(bind=engine, expire_on_commit=False),
    )


def _current(database_url: str | None) -> _Binding:
    global _BINDING
    url = _pick_url(database_url)
    if _BINDING is None:
        _BINDING = _bind(url)
    elif _BINDING.url != url:
        raise RuntimeError(
            f"database already bound to {_BINDING.engine.url!r}; "
            "call reset_engine() before switching databases"
        )
    return _BINDING


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the process-wide engine, binding it on first use."""

    return _current(database_url).engine


def get_session(*, database_url: str | None = None) -> Session:
    """Open a new session on the process-wide engine. The caller closes it."""

    return _current(database_url).sessions()


def reset_engine() -> None:
    global _BINDING
    if _BINDING is not None:
        _BINDING.engine.dispose()
    _BINDING = None


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on error."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["get_engine", "get_session", "reset_engine", "session_scope"]
