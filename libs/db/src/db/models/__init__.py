"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the ledger domain models used by ``ledger_import``.
"""

from .ledger import (
    Base,
    Expense,
    ExpenseCategory,
    FixedExpenseTemplate,
    Income,
    IncomeSource,
)

__all__ = [
    "Base",
    "ExpenseCategory",
    "IncomeSource",
    "Expense",
    "Income",
    "FixedExpenseTemplate",
]
