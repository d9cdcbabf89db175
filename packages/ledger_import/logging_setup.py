"""Logging for ``ledger_import``.

Modules log through ``get_logger("ledger_import.<module>")`` and never attach
handlers. Only an entrypoint (the CLI, or a host application) calls
:func:`configure_logging`, which gives the ``ledger_import`` logger one stderr
handler. Until then the package is silent.

The level comes from the ``level`` argument, then ``$LEDGER_IMPORT_LOG_LEVEL``,
then ``INFO``. SQLAlchemy's engine logger is held at ``WARNING`` unless the
import runs at ``DEBUG``, so statement echo only shows up when asked for.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

ROOT = "ledger_import"
LEVEL_ENV = "LEDGER_IMPORT_LOG_LEVEL"

_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``"debug"``, ``"10"`` or ``10`` into a level number.

    Raises ``ValueError`` for names the ``logging`` module does not know.
    """

    if level is None:
        level = os.getenv(LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    text = level.strip().upper()
    if text.isdigit():
        return int(text)
    value = logging.getLevelNamesMapping().get(text)
    if value is None:
        raise ValueError(f"unknown log level: {level!r}")
    return value


def configure_logging(
    level: int | str | None = None,
    *,
    stream: IO[str] | None = None,
) -> int:
    """Route ``ledger_import`` records to ``stream`` (stderr by default).

    Calling it again swaps the handler instead of stacking a second one.
    Returns the effective level.
    """

    global _handler
    resolved = resolve_level(level)
    pkg = logging.getLogger(ROOT)
    for h in list(pkg.handlers):
        if h is _handler or isinstance(h, logging.NullHandler):
            pkg.removeHandler(h)

    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter(_FORMAT))
    pkg.addHandler(_handler)
    pkg.setLevel(resolved)
    pkg.propagate = False

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if resolved <= logging.DEBUG else logging.WARNING
    )
    return resolved


def get_logger(name: str) -> logging.Logger:
    if _handler is None:
        pkg = logging.getLogger(ROOT)
        if not pkg.handlers:
            pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["LEVEL_ENV", "configure_logging", "get_logger", "resolve_level"]
