"""Adapter for the monthly dashboard workbook (one sheet per calendar month).

Each month sheet holds three blocks located by :mod:`ledger_import.sections`.
Within a block the columns are fixed:

=========  ==========  ===========  ======  ========  ===========  ===========
block      col 1       col 2        col 3   col 4     col 5        col 6
=========  ==========  ===========  ======  ========  ===========  ===========
income     date        description  amount  source    -            -
fixed      due day     description  amount  category  paid (✅)    -
variable   date        description  amount  category  jar          payment
=========  ==========  ===========  ======  ========  ===========  ===========

Amounts and dates follow Brazilian conventions and are parsed with the
fail-soft helpers in :mod:`ledger_import.normalizers`. A row is emitted only
when it has a description, a positive amount and a resolvable date.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Sequence
from datetime import date
from decimal import Decimal
from typing import Any, NamedTuple

from pydantic import ValidationError

from ...labels import JAR_LABELS, PAYMENT_METHOD_LABELS, LabelTable, normalize_label
from ...logging_setup import get_logger
from ...models import (
    JarType,
    NormalizedTransaction,
    ParseResult,
    PaymentMethod,
    TransactionType,
)
from ...normalizers import MAX_SAFE_DAY, normalize_text, parse_amount, resolve_date
from ...sections import scan_sections

LAYOUT = "dashboard"

MONTHS: tuple[str, ...] = (
    "Janeiro",
    "Fevereiro",
    "Março",
    "Abril",
    "Maio",
    "Junho",
    "Julho",
    "Agosto",
    "Setembro",
    "Outubro",
    "Novembro",
    "Dezembro",
)
_MONTH_KEYS = tuple(normalize_text(m) for m in MONTHS)

PAID_MARK = "✅"
YEAR_SCAN_ROWS = 5
_YEAR_RE = re.compile(r"(?<!\d)(20\d{2})(?!\d)")
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")

_logger = get_logger("ledger_import.ingest.dashboard")


class Sheet(NamedTuple):
    """A worksheet materialized as a list of row value lists."""

    name: str
    rows: list[list[Any]]


def month_index(sheet_name: str) -> int | None:
    """0-based month for a sheet named after a month (accent/case-insensitive)."""

    key = normalize_text(sheet_name)
    for idx, month in enumerate(_MONTH_KEYS):
        if month in key:
            return idx
    return None


def is_dashboard(sheets: Sequence[Sheet]) -> bool:
    return any(month_index(s.name) is not None for s in sheets)


def sheet_year(rows: Sequence[Sequence[Any]], *, default: int) -> int:
    """First ``20xx`` token found in the sheet's title rows, else ``default``."""

    for row in rows[:YEAR_SCAN_ROWS]:
        for cell in row:
            if isinstance(cell, date):
                return cell.year
            if not isinstance(cell, str):
                continue
            m = _YEAR_RE.search(cell)
            if m:
                return int(m.group(1))
    return default


def _cell(row: Sequence[Any], idx: int) -> Any:
    return row[idx] if idx < len(row) else None


def _text(row: Sequence[Any], idx: int) -> str:
    value = _cell(row, idx)
    return "" if value is None else str(value).strip()


def _has_content(row: Sequence[Any]) -> bool:
    return any(_text(row, i) for i in range(1, 7))


def due_day(raw: Any) -> int:
    """Day of month for a fixed expense: ``[1, 31]`` clamped to 28, else 1."""

    if isinstance(raw, bool) or raw is None:
        return 1
    day: int | None = None
    if isinstance(raw, (int, float, Decimal)):
        if math.isfinite(raw) and raw == int(raw):
            day = int(raw)
    else:
        m = _LEADING_INT_RE.match(str(raw))
        if m:
            day = int(m.group(1))
    if day is None or not 1 <= day <= 31:
        return 1
    return min(day, MAX_SAFE_DAY)


class MonthContext(NamedTuple):
    year: int
    month_index: int


def _build(**fields: Any) -> NormalizedTransaction | None:
    try:
        return NormalizedTransaction(**fields)
    except ValidationError as exc:
        _logger.debug("Rejected dashboard row %r: %s", fields.get("description"), exc)
        return None


def income_row(row: Sequence[Any], ctx: MonthContext) -> NormalizedTransaction | None:
    description = _text(row, 2)
    amount = parse_amount(_cell(row, 3))
    if not description or amount <= 0:
        return None
    when = resolve_date(_cell(row, 1), ctx.year, ctx.month_index)
    if when is None:
        return None
    return _build(
        type=TransactionType.INCOME,
        amount=amount,
        description=description,
        date=when,
        source=_text(row, 4) or None,
    )


def fixed_row(row: Sequence[Any], ctx: MonthContext) -> NormalizedTransaction | None:
    description = _text(row, 2)
    amount = parse_amount(_cell(row, 3))
    if not description or amount <= 0:
        return None
    when = date(ctx.year, ctx.month_index + 1, due_day(_cell(row, 1)))
    return _build(
        type=TransactionType.EXPENSE,
        amount=amount,
        description=description,
        date=when,
        category=_text(row, 4) or None,
        is_fixed=True,
        is_paid=PAID_MARK in _text(row, 5),
    )


def variable_row(
    row: Sequence[Any],
    ctx: MonthContext,
    *,
    jar_labels: LabelTable[JarType] = JAR_LABELS,
    payment_labels: LabelTable[PaymentMethod] = PAYMENT_METHOD_LABELS,
) -> NormalizedTransaction | None:
    description = _text(row, 2)
    amount = parse_amount(_cell(row, 3))
    if not description or amount <= 0:
        return None
    when = resolve_date(_cell(row, 1), ctx.year, ctx.month_index)
    if when is None:
        return None
    return _build(
        type=TransactionType.EXPENSE,
        amount=amount,
        description=description,
        date=when,
        category=_text(row, 4) or None,
        jar_type=normalize_label(_cell(row, 5), jar_labels),
        payment_method=normalize_label(_cell(row, 6), payment_labels),
        is_fixed=False,
        is_paid=True,
    )


class MonthExtraction(NamedTuple):
    transactions: list[NormalizedTransaction]
    rows_seen: int


def extract_month_sheet(
    sheet: Sheet,
    month: int,
    *,
    default_year: int,
    jar_labels: LabelTable[JarType] = JAR_LABELS,
    payment_labels: LabelTable[PaymentMethod] = PAYMENT_METHOD_LABELS,
) -> MonthExtraction:
    """Extract every block of one month sheet in sheet order (income, fixed, variable)."""

    ctx = MonthContext(year=sheet_year(sheet.rows, default=default_year), month_index=month)
    ranges = scan_sections(sheet.rows)

    def _variable(row: Sequence[Any], c: MonthContext) -> NormalizedTransaction | None:
        return variable_row(row, c, jar_labels=jar_labels, payment_labels=payment_labels)

    blocks: tuple[tuple[range, Callable[..., NormalizedTransaction | None]], ...] = (
        (ranges.income, income_row),
        (ranges.fixed, fixed_row),
        (ranges.variable, _variable),
    )

    out: list[NormalizedTransaction] = []
    seen = 0
    for block, convert in blocks:
        for idx in block:
            row = sheet.rows[idx]
            if not _has_content(row):
                continue
            seen += 1
            tx = convert(row, ctx)
            if tx is None:
                _logger.debug("%s row %d skipped", sheet.name, idx + 1)
                continue
            out.append(tx)

    _logger.info(
        "%s %d: %d income, %d fixed, %d variable rows in blocks; %d parsed",
        sheet.name,
        ctx.year,
        len(ranges.income),
        len(ranges.fixed),
        len(ranges.variable),
        len(out),
    )
    return MonthExtraction(out, seen)


def from_workbook(
    sheets: Sequence[Sheet],
    *,
    today: date | None = None,
    jar_labels: LabelTable[JarType] = JAR_LABELS,
    payment_labels: LabelTable[PaymentMethod] = PAYMENT_METHOD_LABELS,
) -> ParseResult:
    """Extract all month-named sheets of a dashboard workbook, in workbook order."""

    default_year = (today or date.today()).year
    parsed: list[NormalizedTransaction] = []
    seen = 0
    for sheet in sheets:
        month = month_index(sheet.name)
        if month is None:
            continue
        result = extract_month_sheet(
            sheet,
            month,
            default_year=default_year,
            jar_labels=jar_labels,
            payment_labels=payment_labels,
        )
        parsed.extend(result.transactions)
        seen += result.rows_seen
    return ParseResult(transactions=tuple(parsed), rows_seen=seen, layout=LAYOUT)


__all__ = [
    "LAYOUT",
    "MONTHS",
    "PAID_MARK",
    "Sheet",
    "MonthContext",
    "due_day",
    "extract_month_sheet",
    "fixed_row",
    "from_workbook",
    "income_row",
    "is_dashboard",
    "month_index",
    "sheet_year",
    "variable_row",
]
