"""Public API for the ``ledger_import`` package.

Two steps, deliberately separate so a caller can show a preview between them:

- :func:`parse_file` turns a CSV/XLSX/XLS file into a batch of
  :class:`~ledger_import.models.NormalizedTransaction` (or a typed outcome when
  the file cannot yield one).
- :func:`import_batch` persists a batch through the registry/writer
  collaborators and reports how many rows landed.

Neither step raises for expected conditions; batch-level problems come back as
:class:`~ledger_import.models.UnsupportedFileFormat`,
:class:`~ledger_import.models.EmptyBatch` or
:class:`~ledger_import.models.MissingRegistry`.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from os import PathLike

from .ingest.utils import load_transactions
from .logging_setup import get_logger
from .models import (
    EmptyBatch,
    ImportSummary,
    MissingRegistry,
    NormalizedTransaction,
    ParseResult,
    TransactionType,
    UnsupportedFileFormat,
)
from .registry import LedgerWriter, RegistryProvider, resolve_entry

_logger = get_logger("ledger_import.api")


def parse_file(
    path: str | PathLike[str], *, today: date | None = None
) -> ParseResult | UnsupportedFileFormat | EmptyBatch:
    """Parse ``path`` into a transaction batch (see :mod:`ledger_import.ingest.utils`)."""

    return load_transactions(path, today=today)


def format_transaction(tx: NormalizedTransaction) -> str:
    """One preview line: ``date  type  amount  description  [label]``."""

    parts = [tx.date.isoformat(), f"{tx.type.value:<7}", f"{tx.amount:>12,.2f}", tx.description]
    if tx.label:
        parts.append(f"[{tx.label}]")
    if tx.jar_type:
        parts.append(f"jar={tx.jar_type.value}")
    if tx.payment_method:
        parts.append(f"via={tx.payment_method.value}")
    if tx.is_fixed:
        parts.append("fixed" if tx.is_paid else "fixed, unpaid")
    return "  ".join(parts)


def _missing_registries(
    transactions: Sequence[NormalizedTransaction],
    categories: Sequence[object],
    sources: Sequence[object],
) -> tuple[str, ...]:
    types = {tx.type for tx in transactions}
    missing: list[str] = []
    if TransactionType.EXPENSE in types and not categories:
        missing.append("categories")
    if TransactionType.INCOME in types and not sources:
        missing.append("sources")
    return tuple(missing)


def import_batch(
    transactions: Sequence[NormalizedTransaction],
    *,
    user_id: str,
    registries: RegistryProvider,
    writer: LedgerWriter,
) -> ImportSummary | MissingRegistry | EmptyBatch:
    """Persist ``transactions`` one at a time and count the outcome.

    Behavior
    --------
    - Active categories and sources are fetched once and treated as a
      snapshot for the whole batch.
    - A batch that needs a registry the user has no entries in returns
      :class:`MissingRegistry` before any write.
    - Each row resolves its label by case-insensitive exact name; unmatched
      labels use the registry's first entry (logged and counted in
      ``ImportSummary.fallbacks``).
    - Writes are sequential. A row whose write raises is logged and counted
      in ``failed``; the remaining rows are still attempted.
    """

    if not transactions:
        return EmptyBatch()

    categories = registries.list_active_categories(user_id)
    sources = registries.list_active_sources(user_id)
    missing = _missing_registries(transactions, categories, sources)
    if missing:
        _logger.warning("Import aborted for user %s: no active %s", user_id, " or ".join(missing))
        return MissingRegistry(missing=missing)

    imported = 0
    failed = 0
    fallbacks = 0
    failures: list[str] = []

    for pos, tx in enumerate(transactions, start=1):
        if tx.type is TransactionType.EXPENSE:
            entry, fell_back = resolve_entry(tx.category, categories)
        else:
            entry, fell_back = resolve_entry(tx.source, sources)
        fallbacks += int(fell_back)
        try:
            if tx.type is TransactionType.EXPENSE:
                writer.create_expense(user_id, tx, entry)
            else:
                writer.create_income(user_id, tx, entry)
        except Exception as exc:  # noqa: BLE001 - per-row failures must not abort the batch
            _logger.exception("Failed to import row %d (%s %r)", pos, tx.type.value, tx.description)
            failed += 1
            failures.append(f"row {pos} ({tx.description}): {exc}")
            continue
        imported += 1

    _logger.info(
        "Imported %d of %d rows for user %s (%d failed, %d registry fallbacks)",
        imported,
        len(transactions),
        user_id,
        failed,
        fallbacks,
    )
    return ImportSummary(
        imported=imported, failed=failed, fallbacks=fallbacks, failures=tuple(failures)
    )


__all__ = ["format_transaction", "import_batch", "parse_file"]
