from __future__ import annotations

from decimal import Decimal

from db.client import session_scope
from db.models.ledger import ExpenseCategory, FixedExpenseTemplate, IncomeSource
from sqlalchemy import select

from ledger_import.ingest.adapters.dashboard_xlsx import Sheet
from ledger_import.ingest.seed_workbook import (
    apply_seed,
    parse_config_sheet,
    parse_seed_workbook,
    template_due_day,
)
from ledger_import.models import IncomeFrequency, IncomeSourceType
from tests.helpers.db import seed_categories

USER = "ana"


def _config_rows() -> list[list]:
    rows: list[list] = [[] for _ in range(60)]
    rows[15] = ["", "Salário CLT", "Sim", "Mensal Fixo"]
    rows[16] = ["", "Freelance / Projetos", "sim", "Variável/Projeto"]
    rows[17] = ["", "Bolsa", "Não", "Semestral"]
    rows[18] = ["", "", "Sim", "Mensal Fixo"]
    rows[38] = ["", "Aluguel", 1500, "Moradia", 10]
    rows[39] = ["", "Academia", "R$ 99,90", "Saúde", 35]
    rows[40] = ["", "Seguro", 0, "Seguros", "todo dia 5"]
    rows[41] = ["", "Sem categoria", 10, "", 5]
    return rows


def _month_rows() -> list[list]:
    return [
        ["MARÇO 2025"],
        ["📌 DESPESAS FIXAS"],
        ["", "Venc.", "Descrição", "Valor", "Categoria"],
        ["", 10, "Aluguel", 1500, "Moradia"],
        ["", 5, "Luz", 200, "moradia"],
        ["TOTAL"],
        ["🛒 DESPESAS VARIÁVEIS"],
        ["", "Data", "Descrição", "Valor", "Categoria"],
        ["", 3, "Mercado", 100, "Alimentação"],
        ["", 4, "Uber", 30, "Transporte"],
        ["TOTAL"],
    ]


def test_parse_config_sheet():
    sources, templates = parse_config_sheet(_config_rows())

    assert [s.name for s in sources] == ["Salário CLT", "Freelance / Projetos", "Bolsa"]
    clt, freela, bolsa = sources
    assert clt.type is IncomeSourceType.SALARY
    assert clt.frequency is IncomeFrequency.MONTHLY_FIXED
    assert clt.is_active is True and clt.sort_order == 0
    assert freela.type is IncomeSourceType.FREELANCE
    assert freela.frequency is IncomeFrequency.PER_PROJECT
    assert bolsa.type is IncomeSourceType.OTHER
    assert bolsa.frequency is IncomeFrequency.SPORADIC
    assert bolsa.is_active is False

    assert [(t.name, t.amount, t.category, t.due_day) for t in templates] == [
        ("Aluguel", Decimal("1500.00"), "Moradia", 10),
        ("Academia", Decimal("99.90"), "Saúde", 28),
        ("Seguro", Decimal("0"), "Seguros", 1),
    ]


def test_template_due_day():
    assert template_due_day(0) == 1
    assert template_due_day(12.6) == 13
    assert template_due_day(40) == 28
    assert template_due_day("5") == 1
    assert template_due_day(float("nan")) == 1


def test_parse_seed_workbook_collects_categories_once():
    seed = parse_seed_workbook(
        [Sheet("Resumo", []), Sheet("Configuração", _config_rows()), Sheet("Março", _month_rows())]
    )
    assert seed.categories == ("Moradia", "Saúde", "Seguros", "Alimentação", "Transporte")
    assert len(seed.sources) == 3
    assert len(seed.templates) == 3


def test_workbook_without_config_sheet_still_yields_categories():
    seed = parse_seed_workbook([Sheet("Março", _month_rows())])
    assert seed.categories == ("Moradia", "Alimentação", "Transporte")
    assert seed.sources == ()
    assert seed.templates == ()


def test_apply_seed_creates_missing_rows_and_is_idempotent(db_url):
    seed_categories(database_url=db_url, user_id=USER, names=["MORADIA"])
    seed = parse_seed_workbook([Sheet("Configuração", _config_rows()), Sheet("Março", _month_rows())])

    with session_scope(database_url=db_url) as s:
        first = apply_seed(s, user_id=USER, seed=seed)
    assert (first.categories, first.sources, first.templates) == (4, 3, 3)

    with session_scope(database_url=db_url) as s:
        again = apply_seed(s, user_id=USER, seed=seed)
    assert (again.categories, again.sources, again.templates) == (0, 0, 0)

    with session_scope(database_url=db_url) as s:
        cats = {c.name: c for c in s.scalars(select(ExpenseCategory).where(ExpenseCategory.user_id == USER))}
        assert set(cats) == {"MORADIA", "Saúde", "Seguros", "Alimentação", "Transporte"}
        assert (cats["Alimentação"].icon, cats["Alimentação"].color) == ("UtensilsCrossed", "#f59e0b")
        assert (cats["Transporte"].icon, cats["Transporte"].color) == ("Car", "#3b82f6")
        assert cats["Saúde"].is_default is True

        sources = {x.name: x for x in s.scalars(select(IncomeSource))}
        assert sources["Salário CLT"].type == "salary"
        assert sources["Freelance / Projetos"].frequency == "per_project"
        assert sources["Bolsa"].is_active is False

        templates = {t.name: t for t in s.scalars(select(FixedExpenseTemplate))}
        # Templates attach to the existing category regardless of its casing.
        assert templates["Aluguel"].category_id == cats["MORADIA"].id
        assert templates["Academia"].due_day == 28
        assert templates["Seguro"].is_active is False
        assert templates["Aluguel"].is_active is True
