"""Adapter for flat transaction tables (CSV, or the first sheet of an XLSX).

Header (case-insensitive, any order; unknown columns are ignored):
``tipo, valor, descricao|descrição, data, categoria, fonte``

Mapping rules
-------------
- ``tipo``: ``receita``/``income`` → income, ``despesa``/``expense`` → expense;
  anything else rejects the row.
- ``valor``: see :func:`~ledger_import.normalizers.parse_tabular_amount`.
- ``data``: ISO prefix, ``DD/MM/YYYY`` or ``DD-MM-YYYY`` (must be a real day).
- ``descricao``: required, non-empty.
- ``categoria`` is kept on expenses; incomes keep ``fonte`` falling back to
  ``categoria``.

Rejected rows are dropped silently; the caller derives a skipped count from
:attr:`~ledger_import.models.ParseResult.rows_seen`.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from io import StringIO
from typing import Any

from pydantic import ValidationError

from ...logging_setup import get_logger
from ...models import NormalizedTransaction, ParseResult, TransactionType
from ...normalizers import parse_tabular_amount, parse_tabular_date

LAYOUT = "tabular"

_TYPE_ALIASES: dict[str, TransactionType] = {
    "receita": TransactionType.INCOME,
    "income": TransactionType.INCOME,
    "despesa": TransactionType.EXPENSE,
    "expense": TransactionType.EXPENSE,
}

_logger = get_logger("ledger_import.ingest.tabular")


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _normalize_keys(row: Mapping[Any, Any]) -> dict[str, str]:
    # DictReader puts overflow cells under a ``None`` key; drop those.
    return {str(k).lower().strip(): _cell_text(v) for k, v in row.items() if k is not None}


def parse_row(row: Mapping[Any, Any]) -> NormalizedTransaction | None:
    """Map one header-keyed row to a transaction, or ``None`` when rejected."""

    r = _normalize_keys(row)
    tx_type = _TYPE_ALIASES.get(r.get("tipo", "").lower())
    if tx_type is None:
        return None

    amount = parse_tabular_amount(r.get("valor", ""))
    if amount is None:
        return None

    description = r["descricao"] if "descricao" in r else r.get("descrição", "")
    if not description:
        return None

    when = parse_tabular_date(r.get("data", ""))
    if when is None:
        return None

    categoria = r.get("categoria") or None
    fonte = r.get("fonte") or None
    try:
        if tx_type is TransactionType.EXPENSE:
            return NormalizedTransaction(
                type=tx_type,
                amount=amount,
                description=description,
                date=when,
                category=categoria,
            )
        return NormalizedTransaction(
            type=tx_type,
            amount=amount,
            description=description,
            date=when,
            source=fonte or categoria,
        )
    except ValidationError as exc:
        _logger.debug("Rejected row %r: %s", description, exc)
        return None


def _is_blank(row: Mapping[Any, Any]) -> bool:
    return all(_cell_text(v) == "" for k, v in row.items() if k is not None)


def from_rows(rows: Iterable[Mapping[Any, Any]]) -> ParseResult:
    """Convert header-keyed rows, skipping fully blank ones."""

    seen = 0
    parsed: list[NormalizedTransaction] = []
    for row in rows:
        if _is_blank(row):
            continue
        seen += 1
        tx = parse_row(row)
        if tx is not None:
            parsed.append(tx)
    _logger.info("Tabular layout: %d of %d rows parsed", len(parsed), seen)
    return ParseResult(transactions=tuple(parsed), rows_seen=seen, layout=LAYOUT)


def from_csv_text(csv_text: str) -> ParseResult:
    """Parse CSV text whose first line is the header row."""

    with StringIO(csv_text) as f:
        reader = csv.DictReader(f)
        return from_rows(reader)


def from_sheet_rows(rows: Sequence[Sequence[Any]]) -> ParseResult:
    """Parse a worksheet given as row lists; the first non-empty row is the header."""

    header: list[str] | None = None
    records: list[dict[str, Any]] = []
    for values in rows:
        if header is None:
            if not any(_cell_text(v) for v in values):
                continue
            header = [_cell_text(v) for v in values]
            continue
        records.append(
            {key: (values[i] if i < len(values) else None) for i, key in enumerate(header) if key}
        )
    return from_rows(records)


__all__ = ["LAYOUT", "parse_row", "from_rows", "from_csv_text", "from_sheet_rows"]
