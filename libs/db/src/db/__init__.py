"""db: shared database library (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``db.models.ledger`` (re-exported for convenience)
- Engine/session helpers in ``db.client``
"""

from __future__ import annotations

from .models.ledger import (
    Base,
    Expense,
    ExpenseCategory,
    FixedExpenseTemplate,
    Income,
    IncomeSource,
)

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "ExpenseCategory",
    "IncomeSource",
    "Expense",
    "Income",
    "FixedExpenseTemplate",
]
