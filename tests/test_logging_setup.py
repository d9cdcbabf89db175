import io
import logging

import pytest

from ledger_import.logging_setup import configure_logging, get_logger, resolve_level


def test_resolve_level_accepts_names_numbers_and_env(monkeypatch):
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" 30 ") == 30
    assert resolve_level(logging.ERROR) == logging.ERROR
    assert resolve_level() == logging.INFO
    monkeypatch.setenv("LEDGER_IMPORT_LOG_LEVEL", "warning")
    assert resolve_level() == logging.WARNING


def test_resolve_level_rejects_unknown_names():
    with pytest.raises(ValueError, match="unknown log level"):
        resolve_level("chatty")


def test_configure_logging_replaces_its_handler():
    first, second = io.StringIO(), io.StringIO()
    configure_logging("INFO", stream=first)
    configure_logging("INFO", stream=second)

    get_logger("ledger_import.api").info("imported %d rows", 3)

    assert first.getvalue() == ""
    assert "ledger_import.api INFO imported 3 rows" in second.getvalue()
    assert len(logging.getLogger("ledger_import").handlers) == 1


def test_sqlalchemy_echo_follows_debug():
    configure_logging("DEBUG", stream=io.StringIO())
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
    configure_logging("INFO", stream=io.StringIO())
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
