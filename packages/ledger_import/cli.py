"""CLI for the ``ledger_import`` package.

This module exposes callable command handlers (``cmd_preview``,
``cmd_import``, ``cmd_seed_registry``) and a Typer-based console interface.
Environment variables (``DATABASE_URL``, ``LEDGER_IMPORT_USER_ID``,
``LEDGER_IMPORT_LOG_LEVEL``) are loaded from a local ``.env`` using
``python-dotenv`` before delegating to command logic. Business logic lives in
``ledger_import.api`` and related modules.
"""

from __future__ import annotations

import os
import sys
import zipfile
from datetime import date
from pathlib import Path
from typing import Annotated

import typer
import xlrd
from dotenv import load_dotenv
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.exc import SQLAlchemyError
from typer.models import OptionInfo

from .logging_setup import configure_logging
from .models import EmptyBatch, MissingRegistry, ParseResult, UnsupportedFileFormat

_USER_ENV = "LEDGER_IMPORT_USER_ID"

# Failures that mean "this file could not be read", reported without a traceback.
_READ_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    ValueError,
    zipfile.BadZipFile,
    InvalidFileException,
    xlrd.XLRDError,
)

# No database configured (RuntimeError from db.client), unreachable or unmigrated.
_DB_ERRORS: tuple[type[BaseException], ...] = (RuntimeError, SQLAlchemyError)


def _resolve_user_id(user_id: str | None) -> str | None:
    resolved = (user_id or os.getenv(_USER_ENV) or "").strip()
    return resolved or None


def _parse_or_report(file: str, *, today: date | None) -> ParseResult | None:
    """Parse ``file``; print the reason and return ``None`` when it yields nothing."""

    from .api import parse_file

    try:
        result = parse_file(file, today=today)
    except _READ_ERRORS as e:
        print(f"Error: could not read {file}: {e}", file=sys.stderr)
        return None
    if isinstance(result, (UnsupportedFileFormat, EmptyBatch)):
        print(f"Error: {result.message}", file=sys.stderr)
        return None
    return result


def cmd_preview(file: str, *, today: date | None = None) -> int:
    """Parse ``file`` and print one line per transaction plus a summary.

    Nothing is written to the database. Returns ``1`` for unsupported files,
    unreadable files and files without a single valid transaction.
    """

    from .api import format_transaction

    result = _parse_or_report(file, today=today)
    if result is None:
        return 1
    for tx in result.transactions:
        print(format_transaction(tx))
    print(
        f"{len(result.transactions)} transactions parsed ({result.layout} layout), "
        f"{result.skipped} rows skipped"
    )
    return 0


def cmd_import(
    file: str,
    *,
    user_id: str | None = None,
    database_url: str | None = None,
    assume_yes: bool = False,
    fixed_templates: bool = True,
    today: date | None = None,
    confirm=None,
) -> int:
    """Parse ``file``, confirm, and import the batch for one user.

    Flow
    ----
    - Parse via :func:`ledger_import.api.parse_file` and print the row counts.
    - Ask for confirmation through :func:`ledger_import.term_ui.confirm_import`
      (or the injected ``confirm`` callable) unless ``assume_yes``.
    - Run :func:`ledger_import.api.import_batch` against
      :class:`ledger_import.persistence.SqlLedgerStore` and print
      ``imported``/``failed``.
    - With ``fixed_templates``, derive fixed expense templates from the
      imported fixed rows.

    Requirements
    ------------
    Database access via ``--database-url`` or ``DATABASE_URL``, and a user id
    via ``--user-id`` or ``LEDGER_IMPORT_USER_ID``.
    """

    load_dotenv(override=False)

    uid = _resolve_user_id(user_id)
    if uid is None:
        print(f"Error: pass --user-id or set {_USER_ENV}.", file=sys.stderr)
        return 1

    result = _parse_or_report(file, today=today)
    if result is None:
        return 1
    print(
        f"{len(result.transactions)} transactions parsed ({result.layout} layout), "
        f"{result.skipped} rows skipped"
    )

    if not assume_yes:
        if confirm is None:
            from .term_ui import confirm_import as confirm
        if not confirm(len(result.transactions), skipped=result.skipped):
            print("Import canceled.")
            return 0

    from db.client import get_session, session_scope

    from .api import import_batch
    from .persistence import SqlLedgerStore, sync_fixed_templates

    try:
        session = get_session(database_url=database_url)
        try:
            store = SqlLedgerStore(session)
            outcome = import_batch(
                result.transactions, user_id=uid, registries=store, writer=store
            )
        finally:
            session.close()
    except _DB_ERRORS as e:
        print(f"Error: database unavailable: {e}", file=sys.stderr)
        return 1

    if isinstance(outcome, MissingRegistry):
        print(f"Error: {outcome.message}", file=sys.stderr)
        return 1
    if isinstance(outcome, EmptyBatch):
        print(f"Error: {outcome.message}", file=sys.stderr)
        return 1

    print(f"imported: {outcome.imported}")
    print(f"failed: {outcome.failed}")
    if outcome.fallbacks:
        print(f"rows filed under a fallback category/source: {outcome.fallbacks}")

    if fixed_templates:
        try:
            with session_scope(database_url=database_url) as s:
                created = sync_fixed_templates(
                    s,
                    user_id=uid,
                    transactions=result.transactions,
                    categories=SqlLedgerStore(s).list_active_categories(uid),
                )
        except _DB_ERRORS as e:
            print(f"Error: fixed expense templates not synced: {e}", file=sys.stderr)
            return 1
        if created:
            print(f"fixed expense templates created: {created}")

    return 0 if outcome.failed == 0 else 2


def cmd_seed_registry(
    file: str,
    *,
    user_id: str | None = None,
    database_url: str | None = None,
) -> int:
    """Create categories, income sources and fixed templates from a workbook."""

    load_dotenv(override=False)

    uid = _resolve_user_id(user_id)
    if uid is None:
        print(f"Error: pass --user-id or set {_USER_ENV}.", file=sys.stderr)
        return 1

    from db.client import session_scope

    from .ingest.seed_workbook import apply_seed, parse_seed_workbook
    from .ingest.utils import read_workbook

    ext = Path(file).suffix.lower().lstrip(".")
    if ext not in {"xlsx", "xls"}:
        print(f"Error: {UnsupportedFileFormat(ext).message}", file=sys.stderr)
        return 1
    try:
        seed = parse_seed_workbook(read_workbook(file))
    except _READ_ERRORS as e:
        print(f"Error: could not read {file}: {e}", file=sys.stderr)
        return 1

    try:
        with session_scope(database_url=database_url) as session:
            created = apply_seed(session, user_id=uid, seed=seed)
    except _DB_ERRORS as e:
        print(f"Error: database unavailable: {e}", file=sys.stderr)
        return 1

    print(f"categories created: {created.categories}")
    print(f"income sources created: {created.sources}")
    print(f"fixed expense templates created: {created.templates}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import personal-finance spreadsheets (CSV, XLSX, XLS) into the ledger. "
        "Loads DATABASE_URL and LEDGER_IMPORT_USER_ID from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect these when used as default values below.
FILE_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--file",
    help="Path to a CSV, XLSX or XLS file",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler will report nice errors
)
USER_ID_OPTION: OptionInfo = typer.Option(
    ..., "--user-id", help=f"Owner of the imported rows (falls back to ${_USER_ENV})."
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    ..., "--database-url", help="Override DATABASE_URL (falls back to env var)."
)


@app.command("preview")
def preview_cmd(file: Annotated[Path, FILE_OPTION]) -> None:
    """Parse a file and print the transactions it would import."""

    raise typer.Exit(cmd_preview(str(file)))


@app.command("import")
def import_cmd(
    file: Annotated[Path, FILE_OPTION],
    *,
    user_id: Annotated[str | None, USER_ID_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    fixed_templates: bool = typer.Option(
        True,
        "--fixed-templates/--no-fixed-templates",
        help="Create fixed expense templates from imported fixed expenses.",
    ),
) -> None:
    """Parse a file and import its transactions for one user."""

    raise typer.Exit(
        cmd_import(
            str(file),
            user_id=user_id,
            database_url=database_url,
            assume_yes=yes,
            fixed_templates=fixed_templates,
        )
    )


@app.command("seed-registry")
def seed_registry_cmd(
    file: Annotated[Path, FILE_OPTION],
    *,
    user_id: Annotated[str | None, USER_ID_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Create missing categories, income sources and templates from a dashboard workbook."""

    raise typer.Exit(cmd_seed_registry(str(file), user_id=user_id, database_url=database_url))


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (falls back to $LEDGER_IMPORT_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    # Load environment from .env in CWD (override=False to keep existing env)
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    try:
        configure_logging(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from e


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    # Running as a module: `python -m ledger_import.cli`
    app()
