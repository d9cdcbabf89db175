from datetime import date, datetime
from decimal import Decimal

from openpyxl import Workbook

from ledger_import.ingest.adapters import dashboard_xlsx
from ledger_import.ingest.adapters.dashboard_xlsx import (
    MonthContext,
    Sheet,
    due_day,
    fixed_row,
    from_workbook,
    is_dashboard,
    month_index,
    sheet_year,
    variable_row,
)
from ledger_import.ingest.utils import load_transactions
from ledger_import.labels import label_table
from ledger_import.models import (
    JarType,
    ParseResult,
    PaymentMethod,
    TransactionType,
)


def _march_rows(title: str = "📅 MARÇO 2025 — CONTROLE COMPLETO") -> list[list]:
    return [
        [title],
        [],
        ["💰 RECEITAS"],
        ["", "Data", "Descrição", "Valor", "Fonte"],
        ["", 5, "Salário", 5000, "Salário CLT"],
        ["", "20/03/2025", "Freela site", "R$ 1.200,00", "Freelance / Projetos"],
        ["", 7, "Sem valor", "", "Outros"],
        ["", "TOTAL", None, 6200],
        [],
        ["📌 DESPESAS FIXAS"],
        ["", "Venc.", "Descrição", "Valor", "Categoria", "Pago"],
        ["", 10, "Aluguel", "1.500,00", "Moradia", "✅ Pago"],
        ["", "31", "Internet", 99.9, "Tecnologia", ""],
        ["", None, "Academia", 120, "Saúde", None],
        ["", "TOTAL"],
        [],
        ["🛒 DESPESAS VARIÁVEIS"],
        ["", "Data", "Descrição", "Valor", "Categoria", "Pote", "Pagamento"],
        ["", "03/03/2025", "Mercado", "R$ 250,40", "Alimentação", "Necessidades", "Pix"],
        ["", 30, "Cinema", 40, "Lazer", "Diversão", "Cartão de Crédito"],
        ["", "", "Sem data", 10, "Lazer", "", ""],
        ["", 12, "Livro", "(45,00)", "Educação", "Educação", "Débito"],
        ["", 14, "Doação ONG", 50, "Doações", "Desconhecido", "Cheque"],
        ["", "", "TOTAL"],
    ]


def test_month_index_and_detection():
    assert month_index("Março") == 2
    assert month_index("MARCO 2025") == 2
    assert month_index(" dezembro ") == 11
    assert month_index("Configuração") is None
    assert is_dashboard([Sheet("Resumo", []), Sheet("Janeiro", [])])
    assert not is_dashboard([Sheet("Dados", [])])


def test_sheet_year_scans_title_rows_only():
    assert sheet_year([["JANEIRO 2026 — CONTROLE"]], default=2020) == 2026
    assert sheet_year([[None], ["", datetime(2024, 1, 1)]], default=2020) == 2024
    # Numeric cells are amounts, not years.
    assert sheet_year([["Saldo", 2050]], default=2020) == 2020
    rows = [[""]] * 5 + [["Resumo 2030"]]
    assert sheet_year(rows, default=2020) == 2020


def test_due_day_rules():
    assert due_day(10) == 10
    assert due_day("31") == 28
    assert due_day("5º dia útil") == 5
    assert due_day(None) == 1
    assert due_day(0) == 1
    assert due_day(45) == 1
    assert due_day("todo mês") == 1
    assert due_day(float("nan")) == 1


def test_extract_march_sheet_in_block_order():
    result = from_workbook([Sheet("Março", _march_rows())], today=date(2030, 1, 1))

    assert result.layout == "dashboard"
    descriptions = [tx.description for tx in result.transactions]
    assert descriptions == [
        "Salário",
        "Freela site",
        "Aluguel",
        "Internet",
        "Academia",
        "Mercado",
        "Cinema",
        "Doação ONG",
    ]
    # 3 income + 3 fixed + 5 variable rows offered, 3 dropped.
    assert result.rows_seen == 11
    assert result.skipped == 3


def test_income_rows():
    result = from_workbook([Sheet("Março", _march_rows())])
    salary, freela = result.transactions[:2]
    assert salary.type is TransactionType.INCOME
    assert salary.date == date(2025, 3, 5)
    assert salary.amount == Decimal("5000.00")
    assert salary.source == "Salário CLT"
    assert freela.date == date(2025, 3, 20)
    assert freela.amount == Decimal("1200.00")


def test_fixed_rows_use_due_day_and_paid_mark():
    result = from_workbook([Sheet("Março", _march_rows())])
    rent, internet, gym = result.transactions[2:5]
    assert rent.is_fixed is True and rent.is_paid is True
    assert rent.date == date(2025, 3, 10)
    assert rent.amount == Decimal("1500.00")
    assert rent.category == "Moradia"
    assert internet.date == date(2025, 3, 28)
    assert internet.is_paid is False
    assert gym.date == date(2025, 3, 1)
    assert gym.jar_type is None and gym.payment_method is None


def test_variable_rows_map_labels():
    result = from_workbook([Sheet("Março", _march_rows())])
    market, cinema, donation = result.transactions[5:]
    assert market.date == date(2025, 3, 3)
    assert market.amount == Decimal("250.40")
    assert market.jar_type is JarType.NECESSITIES
    assert market.payment_method is PaymentMethod.PIX
    assert market.is_fixed is False and market.is_paid is True
    assert cinema.date == date(2025, 3, 28)
    assert cinema.jar_type is JarType.PLAY
    assert cinema.payment_method is PaymentMethod.CREDIT
    # Unmapped labels are left unset rather than guessed.
    assert donation.jar_type is None
    assert donation.payment_method is None


def test_custom_label_tables_are_used():
    ctx = MonthContext(year=2025, month_index=2)
    row = ["", 3, "Uber", 20, "Transporte", "Essencial", "Nubank"]
    jars = label_table(JarType, {"Essencial": JarType.NECESSITIES})
    payments = label_table(PaymentMethod, {"Nubank": PaymentMethod.CREDIT})
    tx = variable_row(row, ctx, jar_labels=jars, payment_labels=payments)
    assert tx is not None
    assert tx.jar_type is JarType.NECESSITIES
    assert tx.payment_method is PaymentMethod.CREDIT


def test_fixed_row_requires_description_and_amount():
    ctx = MonthContext(year=2025, month_index=0)
    assert fixed_row(["", 5, "", 100, "Moradia"], ctx) is None
    assert fixed_row(["", 5, "Luz", "abc", "Moradia"], ctx) is None
    assert fixed_row(["", 5, "Luz"], ctx) is None


def test_sheet_without_year_uses_today():
    rows = _march_rows(title="ABRIL — CONTROLE")
    result = from_workbook([Sheet("Abril", rows)], today=date(2027, 6, 1))
    assert result.transactions[0].date == date(2027, 4, 5)


def test_non_month_sheets_are_ignored_and_months_keep_workbook_order():
    sheets = [
        Sheet("Configuração", [["RECEITAS"], ["h"], ["", 1, "Nada", 10, "x"]]),
        Sheet("Abril", _march_rows(title="ABRIL 2025")),
        Sheet("Março", _march_rows()),
    ]
    result = from_workbook(sheets)
    dates = [tx.date for tx in result.transactions]
    assert dates[0] == date(2025, 4, 5)
    assert dates[-1] == date(2025, 3, 14)
    assert len(result.transactions) == 16


def test_load_transactions_reads_dashboard_xlsx(tmp_path):
    wb = Workbook()
    wb.active.title = "Configuração"
    ws = wb.create_sheet("Março")
    for row in _march_rows():
        ws.append(row)
    path = tmp_path / "controle.xlsx"
    wb.save(path)

    result = load_transactions(path, today=date(2030, 1, 1))

    assert isinstance(result, ParseResult)
    assert result.layout == dashboard_xlsx.LAYOUT
    assert len(result.transactions) == 8
    assert result.transactions[0].date == date(2025, 3, 5)
