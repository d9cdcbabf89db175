"""Cell → value normalizers shared by the ledger extractors.

Two families live here:

- Dashboard-workbook helpers (:func:`parse_amount`, :func:`resolve_date`) are
  fail-soft: they never raise and signal "absent" with ``Decimal(0)`` or
  ``None`` so callers can skip the row.
- Flat-table helpers (:func:`parse_tabular_amount`, :func:`parse_tabular_date`)
  are stricter and return ``None`` for anything outside the accepted shapes.

Both families accept Brazilian number formatting (``1.234,56``) alongside the
plain ``1234.56`` form.
"""

from __future__ import annotations

import math
import re
import unicodedata
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from openpyxl.utils.datetime import from_excel

ZERO = Decimal("0")
_CENT = Decimal("0.01")

# Numeric cells above this are Excel serial day numbers (40000 ≈ 2009-07-06),
# below it a number is read as a bare day of month.
EXCEL_SERIAL_THRESHOLD = 40000
# Bare day-of-month values are clamped so every month accepts them.
MAX_SAFE_DAY = 28

_CURRENCY_RE = re.compile(r"[R$\s]")
_TABULAR_AMOUNT_RE = re.compile(r"[^\d.,-]")
_ISO_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_DMY_RE = re.compile(r"^(\d{1,2})([/-])(\d{1,2})\2(\d{4})$")
_TABULAR_DMY_RE = re.compile(r"^(\d{2})([/-])(\d{2})\2(\d{4})$")
_BARE_DAY_RE = re.compile(r"^\d{1,2}$")


def normalize_text(value: Any) -> str:
    """Strip diacritics, lower-case, and collapse whitespace.

    ``"  Educação "`` → ``"educacao"``. ``None`` becomes ``""``.
    """

    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def _quantize(d: Decimal) -> Decimal:
    return d.quantize(_CENT, rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Dashboard-workbook helpers
# ---------------------------------------------------------------------------


def parse_amount(raw: Any) -> Decimal:
    """Parse a spreadsheet amount cell into a non-negative cent amount.

    - Numeric cells: absolute value, rounded to cents.
    - Text: currency symbols and whitespace are removed. When the rightmost
      comma sits after the rightmost dot the value is Brazilian (dots are
      thousands separators, comma is the decimal point); otherwise commas are
      thousands separators.
    - Accounting negatives in parentheses, e.g. ``"(120,00)"``, yield ``0``.
    - Empty or unparseable input yields ``0``; callers treat ``0`` as absent.
    """

    if isinstance(raw, bool) or raw is None:
        return ZERO
    if isinstance(raw, (int, float, Decimal)):
        if isinstance(raw, float) and not math.isfinite(raw):
            return ZERO
        d = Decimal(str(raw))
        if not d.is_finite():
            return ZERO
        return _quantize(abs(d))

    s = _CURRENCY_RE.sub("", str(raw))
    if not s:
        return ZERO
    if "(" in s or ")" in s:
        return ZERO

    last_comma = s.rfind(",")
    last_dot = s.rfind(".")
    if last_comma > last_dot:
        s = s.replace(".", "").replace(",", ".", 1)
    else:
        s = s.replace(",", "")

    try:
        d = Decimal(s)
    except InvalidOperation:
        return ZERO
    if not d.is_finite():
        return ZERO
    return _quantize(abs(d))


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _context_day(day: int, year: int, month_index: int) -> date | None:
    if not 1 <= day <= 31:
        return None
    return _safe_date(year, month_index + 1, min(day, MAX_SAFE_DAY))


def resolve_date(raw: Any, year: int, month_index: int) -> date | None:
    """Resolve a date cell using the sheet's year and 0-based month index.

    Resolution order (first match wins):

    1. native ``date``/``datetime`` values;
    2. Excel serial numbers (numeric cells above ``EXCEL_SERIAL_THRESHOLD``);
    3. ISO strings (``YYYY-MM-DD`` prefix);
    4. ``DD/MM/YYYY`` or ``DD-MM-YYYY`` strings;
    5. a bare day of month in ``[1, 31]``, combined with ``year`` and
       ``month_index`` and clamped to day 28.

    Anything else, including impossible calendar dates such as
    ``"31/02/2025"``, returns ``None``. Never raises.
    """

    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, (int, float, Decimal)):
        if not math.isfinite(raw):
            return None
        if raw > EXCEL_SERIAL_THRESHOLD:
            try:
                converted = from_excel(float(raw))
            except (ValueError, OverflowError):
                return None
            return converted.date() if isinstance(converted, datetime) else None
        if raw != int(raw):
            return None
        return _context_day(int(raw), year, month_index)

    s = str(raw).strip()
    if not s:
        return None
    m = _ISO_PREFIX_RE.match(s)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    m = _DMY_RE.match(s)
    if m:
        return _safe_date(int(m.group(4)), int(m.group(3)), int(m.group(1)))
    if _BARE_DAY_RE.match(s):
        return _context_day(int(s), year, month_index)
    return None


# ---------------------------------------------------------------------------
# Flat-table helpers
# ---------------------------------------------------------------------------


def parse_tabular_amount(raw: str | None) -> Decimal | None:
    """Parse a ``valor`` column value; ``None`` unless finite and positive.

    Everything except digits, ``.``, ``,`` and ``-`` is discarded. Any comma
    switches to Brazilian convention (dots are thousands separators).
    """

    if raw is None:
        return None
    s = _TABULAR_AMOUNT_RE.sub("", raw)
    if "," in s:
        s = s.replace(".", "").replace(",", ".", 1)
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    if not d.is_finite() or d <= 0:
        return None
    q = _quantize(d)
    return q if q > 0 else None


def parse_tabular_date(raw: str | None) -> date | None:
    """Parse a ``data`` column value (ISO prefix, ``DD/MM/YYYY``, ``DD-MM-YYYY``)."""

    if raw is None:
        return None
    s = raw.strip()
    m = _ISO_PREFIX_RE.match(s)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    m = _TABULAR_DMY_RE.match(s)
    if m:
        return _safe_date(int(m.group(4)), int(m.group(3)), int(m.group(1)))
    return None


__all__ = [
    "EXCEL_SERIAL_THRESHOLD",
    "MAX_SAFE_DAY",
    "normalize_text",
    "parse_amount",
    "resolve_date",
    "parse_tabular_amount",
    "parse_tabular_date",
]
