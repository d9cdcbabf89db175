"""SQL persistence for imported ledger rows.

Writes expenses, incomes and fixed-expense templates to the tables owned by
``libs/db`` (``db.models.ledger``) through a caller-provided session.

Scope:
- ``SqlLedgerStore``: registry listings plus single-row ``create_expense`` /
  ``create_income``. Each row is committed on its own so one failed insert
  never takes earlier rows with it.
- ``sync_fixed_templates``: derive recurring templates from imported fixed
  expenses.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from db.models.ledger import Expense, FixedExpenseTemplate, Income
from sqlalchemy import select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import NormalizedTransaction, TransactionType
from .normalizers import MAX_SAFE_DAY
from .registry import (
    RegistryEntry,
    list_active_categories,
    list_active_sources,
    resolve_entry,
)

_logger = get_logger("ledger_import.persistence")


class SqlLedgerStore:
    """Registry provider and ledger writer backed by one SQLAlchemy session.

    The store owns commit/rollback for the rows it writes; callers should not
    hold other pending changes on the same session.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # RegistryProvider

    def list_active_categories(self, user_id: str) -> list[RegistryEntry]:
        return list_active_categories(self.session, user_id)

    def list_active_sources(self, user_id: str) -> list[RegistryEntry]:
        return list_active_sources(self.session, user_id)

    # LedgerWriter

    def create_expense(
        self, user_id: str, tx: NormalizedTransaction, category: RegistryEntry
    ) -> None:
        row = Expense(
            user_id=user_id,
            category_id=category.id,
            amount=tx.amount,
            description=tx.description,
            date=tx.date,
            payment_method=tx.payment_method.value if tx.payment_method else None,
            jar_type=tx.jar_type.value if tx.jar_type else None,
        )
        # Unset flags keep the column defaults (not fixed, paid).
        if tx.is_fixed is not None:
            row.is_fixed = tx.is_fixed
        if tx.is_paid is not None:
            row.is_paid = tx.is_paid
        self._commit(row)

    def create_income(
        self, user_id: str, tx: NormalizedTransaction, source: RegistryEntry
    ) -> None:
        self._commit(
            Income(
                user_id=user_id,
                source_id=source.id,
                amount=tx.amount,
                description=tx.description,
                date=tx.date,
            )
        )

    def _commit(self, row: Expense | Income) -> None:
        self.session.add(row)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise


def sync_fixed_templates(
    session: Session,
    *,
    user_id: str,
    transactions: Iterable[NormalizedTransaction],
    categories: Sequence[RegistryEntry],
) -> int:
    """Create a template for every distinct imported fixed expense.

    Rows are keyed by ``(lower(description), category)``; the latest-dated
    occurrence supplies the amount and due day (clamped to ``[1, 28]``).
    Templates already present for the user are left alone. Returns the
    number of templates created; the caller commits.
    """

    fixed = [
        tx for tx in transactions if tx.type is TransactionType.EXPENSE and tx.is_fixed
    ]
    if not fixed or not categories:
        return 0

    existing = {
        (name.lower(), category_id)
        for name, category_id in session.execute(
            select(FixedExpenseTemplate.name, FixedExpenseTemplate.category_id).where(
                FixedExpenseTemplate.user_id == user_id
            )
        )
    }

    latest: dict[tuple[str, int], tuple[NormalizedTransaction, RegistryEntry]] = {}
    for tx in fixed:
        category, _ = resolve_entry(tx.category, categories)
        key = (tx.description.lower(), category.id)
        if key in existing:
            continue
        prev = latest.get(key)
        if prev is None or tx.date >= prev[0].date:
            latest[key] = (tx, category)

    for tx, category in latest.values():
        session.add(
            FixedExpenseTemplate(
                user_id=user_id,
                category_id=category.id,
                name=tx.description,
                amount=tx.amount,
                due_day=min(max(tx.date.day, 1), MAX_SAFE_DAY),
            )
        )
    session.flush()
    _logger.info("Created %d fixed expense templates for user %s", len(latest), user_id)
    return len(latest)


__all__ = ["SqlLedgerStore", "sync_fixed_templates"]
