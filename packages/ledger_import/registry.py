"""Per-user registries of expense categories and income sources.

A *registry* is the user's set of active categories (for expenses) or income
sources (for incomes). Imported rows carry free-text labels; this module turns
a label into a registry entry.

Exports
-------
- ``RegistryEntry``: the ``(id, name)`` pair the orchestrator works with.
- ``list_active_categories(...)`` / ``list_active_sources(...)``: SQL listings
  ordered by name, which also fixes the fallback entry.
- ``resolve_entry(...)``: case-insensitive exact match with an explicit,
  logged fallback to the first entry.
- ``RegistryProvider`` / ``LedgerWriter``: the collaborator protocols consumed
  by :func:`ledger_import.api.import_batch`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from db.models.ledger import ExpenseCategory, IncomeSource
from sqlalchemy import select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import NormalizedTransaction

_logger = get_logger("ledger_import.registry")


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    id: int
    name: str


# ---------------------------
# Collaborator protocols
# ---------------------------


class RegistryProvider(Protocol):
    def list_active_categories(self, user_id: str) -> list[RegistryEntry]: ...

    def list_active_sources(self, user_id: str) -> list[RegistryEntry]: ...


class LedgerWriter(Protocol):
    """Persists one record per call; a call either fully applies or raises."""

    def create_expense(
        self, user_id: str, tx: NormalizedTransaction, category: RegistryEntry
    ) -> None: ...

    def create_income(
        self, user_id: str, tx: NormalizedTransaction, source: RegistryEntry
    ) -> None: ...


# ---------------------------
# SQL listings
# ---------------------------


def list_active_categories(session: Session, user_id: str) -> list[RegistryEntry]:
    stmt = (
        select(ExpenseCategory.id, ExpenseCategory.name)
        .where(ExpenseCategory.user_id == user_id, ExpenseCategory.is_active.is_(True))
        .order_by(ExpenseCategory.name.asc(), ExpenseCategory.id.asc())
    )
    return [RegistryEntry(id=row.id, name=row.name) for row in session.execute(stmt)]


def list_active_sources(session: Session, user_id: str) -> list[RegistryEntry]:
    stmt = (
        select(IncomeSource.id, IncomeSource.name)
        .where(IncomeSource.user_id == user_id, IncomeSource.is_active.is_(True))
        .order_by(IncomeSource.name.asc(), IncomeSource.id.asc())
    )
    return [RegistryEntry(id=row.id, name=row.name) for row in session.execute(stmt)]


# ---------------------------
# Label resolution
# ---------------------------


def _key(name: str) -> str:
    return name.strip().lower()


def resolve_entry(
    label: str | None, entries: Sequence[RegistryEntry]
) -> tuple[RegistryEntry, bool]:
    """Return ``(entry, fell_back)`` for ``label``.

    Matching is exact after trimming and lowercasing. When nothing matches
    (or the row has no label) the first entry is used and ``fell_back`` is
    True. ``entries`` must be non-empty; the orchestrator checks that before
    resolving any row.
    """

    if not entries:
        raise ValueError("cannot resolve a label against an empty registry")
    if label:
        wanted = _key(label)
        for entry in entries:
            if _key(entry.name) == wanted:
                return entry, False
    fallback = entries[0]
    _logger.info("No registry entry named %r; using first entry %r", label, fallback.name)
    return fallback, True


__all__ = [
    "LedgerWriter",
    "RegistryEntry",
    "RegistryProvider",
    "list_active_categories",
    "list_active_sources",
    "resolve_entry",
]
