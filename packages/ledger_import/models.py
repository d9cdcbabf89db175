"""Data models and typed outcomes for ``ledger_import``.

``NormalizedTransaction`` is the canonical, storage-ready record produced by
every extractor regardless of the input file shape. It is a frozen pydantic
model so that construction doubles as row validation: extractors build one per
candidate row and drop the row when validation fails.

Batch-level results are plain frozen dataclasses. Callers branch on the
concrete type (``isinstance``) to render a specific message per case; none of
these are raised as exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as Date
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TransactionType(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"


class JarType(StrEnum):
    """The six canonical budget buckets an expense can be allocated to."""

    NECESSITIES = "necessities"
    EDUCATION = "education"
    SAVINGS = "savings"
    PLAY = "play"
    INVESTMENT = "investment"
    GIVING = "giving"


class PaymentMethod(StrEnum):
    PIX = "pix"
    DEBIT = "debit"
    CREDIT = "credit"
    CASH = "cash"
    BOLETO = "boleto"
    TRANSFER = "transfer"


class IncomeSourceType(StrEnum):
    SALARY = "salary"
    FREELANCE = "freelance"
    SALES = "sales"
    CONSULTING = "consulting"
    INVESTMENTS = "investments"
    RENT = "rent"
    COMMISSIONS = "commissions"
    BONUS = "bonus"
    EXTRA = "extra"
    OTHER = "other"


class IncomeFrequency(StrEnum):
    MONTHLY_FIXED = "monthly_fixed"
    MONTHLY_VARIABLE = "monthly_variable"
    PER_PROJECT = "per_project"
    SPORADIC = "sporadic"


# ---------------------------------------------------------------------------
# Canonical transaction
# ---------------------------------------------------------------------------

_CENT = Decimal("0.01")


class NormalizedTransaction(BaseModel):
    """A single validated transaction ready for the import orchestrator.

    Invariants
    ----------
    - ``amount`` is strictly positive and quantized to cents.
    - ``description`` is non-empty after trimming.
    - Expense-only fields (``category``, ``jar_type``, ``payment_method``,
      ``is_fixed``, ``is_paid``) are ``None`` on incomes; ``source`` is
      ``None`` on expenses.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    type: TransactionType
    amount: Decimal
    description: str
    date: Date
    category: str | None = None
    source: str | None = None
    jar_type: JarType | None = None
    payment_method: PaymentMethod | None = None
    is_fixed: bool | None = None
    is_paid: bool | None = None

    @field_validator("amount")
    @classmethod
    def _amount_positive_cents(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("amount must be finite")
        q = v.quantize(_CENT, rounding=ROUND_HALF_UP)
        if q <= 0:
            raise ValueError("amount must be greater than zero")
        return q

    @field_validator("description")
    @classmethod
    def _description_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("description must be non-empty")
        return v

    @field_validator("category", "source")
    @classmethod
    def _blank_label_is_none(cls, v: str | None) -> str | None:
        return v or None

    @model_validator(mode="after")
    def _fields_match_type(self) -> NormalizedTransaction:
        if self.type is TransactionType.INCOME:
            expense_only = {
                "category": self.category,
                "jar_type": self.jar_type,
                "payment_method": self.payment_method,
                "is_fixed": self.is_fixed,
                "is_paid": self.is_paid,
            }
            present = sorted(k for k, v in expense_only.items() if v is not None)
            if present:
                raise ValueError(f"income rows cannot carry {', '.join(present)}")
        elif self.source is not None:
            raise ValueError("expense rows cannot carry source")
        return self

    @property
    def label(self) -> str | None:
        """Registry label for this row: category for expenses, source for incomes."""

        return self.category if self.type is TransactionType.EXPENSE else self.source


# ---------------------------------------------------------------------------
# Typed batch outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Transactions extracted from one file plus bookkeeping for the preview.

    ``rows_seen`` counts candidate data rows offered to the extractor, so
    ``skipped`` is the number of rows dropped as unparseable.
    """

    transactions: tuple[NormalizedTransaction, ...]
    rows_seen: int
    layout: str

    @property
    def skipped(self) -> int:
        return max(0, self.rows_seen - len(self.transactions))


@dataclass(frozen=True, slots=True)
class UnsupportedFileFormat:
    extension: str

    @property
    def message(self) -> str:
        shown = f".{self.extension}" if self.extension else "(none)"
        return f"Unsupported file format {shown}; use CSV or XLSX files."


@dataclass(frozen=True, slots=True)
class EmptyBatch:
    rows_seen: int = 0

    @property
    def message(self) -> str:
        return (
            "No valid transactions found. Check that the file has the columns "
            "tipo, valor, descricao, data (or the monthly dashboard layout)."
        )


@dataclass(frozen=True, slots=True)
class MissingRegistry:
    """The batch needs a registry the user has no active entries in.

    ``missing`` holds ``"categories"`` and/or ``"sources"``.
    """

    missing: tuple[str, ...]

    @property
    def message(self) -> str:
        return "No active " + " or ".join(self.missing) + " to attach imported rows to."


@dataclass(frozen=True, slots=True)
class ImportSummary:
    imported: int
    failed: int
    # Rows whose label matched no registry entry and used the first entry.
    fallbacks: int = 0
    failures: tuple[str, ...] = field(default=())


__all__ = [
    "TransactionType",
    "JarType",
    "PaymentMethod",
    "IncomeSourceType",
    "IncomeFrequency",
    "NormalizedTransaction",
    "ParseResult",
    "UnsupportedFileFormat",
    "EmptyBatch",
    "MissingRegistry",
    "ImportSummary",
]
