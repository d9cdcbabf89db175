from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from ledger_import.models import (
    EmptyBatch,
    JarType,
    NormalizedTransaction,
    ParseResult,
    TransactionType,
)


def _kw(**overrides):
    base = {
        "type": TransactionType.EXPENSE,
        "amount": Decimal("10"),
        "description": "Mercado",
        "date": date(2025, 3, 2),
    }
    base.update(overrides)
    return base


def test_amount_is_quantized_to_cents():
    tx = NormalizedTransaction(**_kw(amount=Decimal("10.005")))
    assert tx.amount == Decimal("10.01")
    assert str(tx.amount) == "10.01"


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1"), Decimal("0.004"), Decimal("NaN")])
def test_amount_must_be_positive_and_finite(amount):
    with pytest.raises(ValidationError):
        NormalizedTransaction(**_kw(amount=amount))


def test_description_is_trimmed_and_required():
    assert NormalizedTransaction(**_kw(description="  Padaria ")).description == "Padaria"
    with pytest.raises(ValidationError):
        NormalizedTransaction(**_kw(description="   "))


def test_income_rejects_expense_only_fields():
    with pytest.raises(ValidationError):
        NormalizedTransaction(**_kw(type=TransactionType.INCOME, jar_type=JarType.PLAY))
    with pytest.raises(ValidationError):
        NormalizedTransaction(**_kw(type=TransactionType.INCOME, category="Lazer"))


def test_expense_rejects_source():
    with pytest.raises(ValidationError):
        NormalizedTransaction(**_kw(source="Salário"))


def test_blank_labels_become_none_and_label_follows_type():
    expense = NormalizedTransaction(**_kw(category=" "))
    assert expense.category is None
    income = NormalizedTransaction(**_kw(type=TransactionType.INCOME, source="Freela"))
    assert income.label == "Freela"


def test_transactions_are_frozen():
    tx = NormalizedTransaction(**_kw())
    with pytest.raises(ValidationError):
        tx.amount = Decimal("1")  # type: ignore[misc]


def test_parse_result_skipped_count():
    assert ParseResult(transactions=(), rows_seen=3, layout="tabular").skipped == 3
    assert EmptyBatch(rows_seen=2).message.startswith("No valid transactions found")
