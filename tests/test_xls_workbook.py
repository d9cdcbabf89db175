from datetime import date, datetime
from decimal import Decimal

import xlrd

from ledger_import.ingest import utils
from ledger_import.ingest.utils import load_transactions, parse_sheets, read_workbook
from ledger_import.models import ParseResult, TransactionType


class FakeXlsSheet:
    """Mimics the slice of ``xlrd.sheet.Sheet`` that the loader reads.

    Floats listed in ``date_cells`` are reported as ``XL_CELL_DATE``, the way
    xlrd exposes date-formatted cells as raw serial numbers.
    """

    def __init__(self, name, rows, date_cells=()):
        self.name = name
        self._rows = rows
        self._dates = set(date_cells)
        self.nrows = len(rows)

    def row_values(self, r):
        return list(self._rows[r])

    def cell_type(self, r, c):
        if (r, c) in self._dates:
            return xlrd.XL_CELL_DATE
        value = self._rows[r][c]
        if value == "":
            return xlrd.XL_CELL_EMPTY
        return xlrd.XL_CELL_NUMBER if isinstance(value, float) else xlrd.XL_CELL_TEXT


class FakeXlsBook:
    datemode = 0

    def __init__(self, *sheets):
        self._sheets = list(sheets)

    def sheets(self):
        return self._sheets


def _patch_open(monkeypatch, book):
    opened = []

    def _open(path):
        opened.append(path)
        return book

    monkeypatch.setattr(utils.xlrd, "open_workbook", _open)
    return opened


def test_xls_date_cells_become_datetimes(monkeypatch):
    sheet = FakeXlsSheet(
        "Plan1",
        [["tipo", "valor", "descricao", "data"], ["Despesa", 150.5, "Mercado", 45718.0]],
        date_cells={(1, 3)},
    )
    opened = _patch_open(monkeypatch, FakeXlsBook(sheet))

    (got,) = read_workbook("extrato.xls")

    assert opened == ["extrato.xls"]
    assert got.name == "Plan1"
    assert got.rows[1] == ["Despesa", 150.5, "Mercado", datetime(2025, 3, 2)]


def test_xls_flat_table_keeps_dated_rows(monkeypatch):
    sheet = FakeXlsSheet(
        "Plan1",
        [
            ["tipo", "valor", "descricao", "data", "categoria"],
            ["Despesa", 150.5, "Mercado", 45718.0, "Alimentação"],
            ["Receita", 3000.0, "Salário", 45717.0, ""],
        ],
        date_cells={(1, 3), (2, 3)},
    )
    _patch_open(monkeypatch, FakeXlsBook(sheet))

    result = load_transactions("extrato.xls")

    assert isinstance(result, ParseResult)
    assert result.layout == "tabular"
    assert result.skipped == 0
    expense, income = result.transactions
    assert expense.date == date(2025, 3, 2)
    assert expense.amount == Decimal("150.50")
    assert expense.category == "Alimentação"
    assert income.type is TransactionType.INCOME
    assert income.date == date(2025, 3, 1)


def test_xls_dashboard_sheet_reads_converted_dates(monkeypatch):
    sheet = FakeXlsSheet(
        "Março",
        [
            ["MARÇO 2025", "", "", "", ""],
            ["🛒 DESPESAS VARIÁVEIS", "", "", "", ""],
            ["", "Data", "Descrição", "Valor", "Categoria"],
            ["", 45719.0, "Farmácia", 42.0, "Saúde"],
            ["", 9.0, "Padaria", 12.5, "Alimentação"],
            ["TOTAL", "", "", "", ""],
        ],
        date_cells={(3, 1)},
    )
    _patch_open(monkeypatch, FakeXlsBook(sheet))

    result = parse_sheets(read_workbook("controle.xls"), today=date(2026, 1, 1))

    assert isinstance(result, ParseResult)
    assert result.layout == "dashboard"
    farmacia, padaria = result.transactions
    assert farmacia.date == date(2025, 3, 3)
    assert farmacia.category == "Saúde"
    # A plain number in the date column is still a day of the sheet's month.
    assert padaria.date == date(2025, 3, 9)
