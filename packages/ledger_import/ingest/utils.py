"""Ingest utilities shared by the CLI and the import API.

Exposes :func:`load_transactions`, the single entry point that turns an
uploaded file into a batch of normalized transactions:

- the file extension selects CSV or workbook parsing (anything else is an
  :class:`~ledger_import.models.UnsupportedFileFormat`, reported before reading);
- a workbook with at least one month-named sheet goes through the dashboard
  adapter, otherwise its first sheet is read as a flat table;
- a parse that yields nothing becomes an
  :class:`~ledger_import.models.EmptyBatch` rather than an error.
"""

from __future__ import annotations

from datetime import date
from os import PathLike
from pathlib import Path
from typing import Any

import xlrd
from openpyxl import load_workbook

from ..logging_setup import get_logger
from ..models import EmptyBatch, ParseResult, UnsupportedFileFormat
from .adapters import dashboard_xlsx, tabular
from .adapters.dashboard_xlsx import Sheet

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset({"csv", "xlsx", "xls"})

_logger = get_logger("ledger_import.ingest")


def _extension(path: Path) -> str:
    return path.suffix.lower().lstrip(".")


def _xls_rows(sheet, datemode: int) -> list[list[Any]]:
    """Row values of an xlrd sheet with date cells turned into ``datetime``."""

    rows: list[list[Any]] = []
    for r in range(sheet.nrows):
        values = list(sheet.row_values(r))
        for c, value in enumerate(values):
            if sheet.cell_type(r, c) == xlrd.XL_CELL_DATE:
                try:
                    values[c] = xlrd.xldate_as_datetime(value, datemode)
                except ValueError:
                    _logger.debug("Unconvertible date cell %s!R%dC%d", sheet.name, r + 1, c + 1)
        rows.append(values)
    return rows


def read_workbook(path: str | PathLike[str]) -> list[Sheet]:
    """Materialize every worksheet as ``Sheet(name, rows)`` in workbook order.

    ``.xls`` files are read with ``xlrd``; its date cells (serial numbers in
    the file) come back as ``datetime`` like openpyxl's do. Everything else is
    read with ``openpyxl`` using cached formula values.
    """

    p = Path(path)
    if _extension(p) == "xls":
        book = xlrd.open_workbook(str(p))
        return [Sheet(sh.name, _xls_rows(sh, book.datemode)) for sh in book.sheets()]

    wb = load_workbook(p, read_only=True, data_only=True)
    try:
        return [
            Sheet(ws.title, [list(row) for row in ws.iter_rows(values_only=True)])
            for ws in wb.worksheets
        ]
    finally:
        wb.close()


def parse_sheets(sheets: list[Sheet], *, today: date | None = None) -> ParseResult:
    """Pick the dashboard or flat-table adapter for already-read worksheets."""

    if dashboard_xlsx.is_dashboard(sheets):
        return dashboard_xlsx.from_workbook(sheets, today=today)
    if not sheets:
        return ParseResult(transactions=(), rows_seen=0, layout=tabular.LAYOUT)
    return tabular.from_sheet_rows(sheets[0].rows)


def load_transactions(
    path: str | PathLike[str],
    *,
    today: date | None = None,
) -> ParseResult | UnsupportedFileFormat | EmptyBatch:
    """Read ``path`` and return its transactions or a typed batch outcome.

    ``today`` supplies the default year for month sheets whose title carries
    none. I/O errors (missing file, corrupt workbook) propagate to the caller.
    """

    p = Path(path)
    ext = _extension(p)
    if ext not in SUPPORTED_EXTENSIONS:
        return UnsupportedFileFormat(extension=ext)

    if ext == "csv":
        with p.open(encoding="utf-8-sig", newline="") as f:
            result = tabular.from_csv_text(f.read())
    else:
        result = parse_sheets(read_workbook(p), today=today)

    _logger.info(
        "%s: %s layout, %d transactions, %d rows skipped",
        p.name,
        result.layout,
        len(result.transactions),
        result.skipped,
    )
    if not result.transactions:
        return EmptyBatch(rows_seen=result.rows_seen)
    return result


__all__ = ["SUPPORTED_EXTENSIONS", "load_transactions", "parse_sheets", "read_workbook"]
