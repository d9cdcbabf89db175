from __future__ import annotations

# Seeder for a user's registries from a dashboard workbook.
#
# Usage (example):
#   ledger-import seed-registry --user-id alice --file "Controle financeiro.xlsx"
#
# This module:
#   1) Reads the "Configuração" sheet: income sources (rows 16-25: name,
#      active "Sim"/"Não", frequency) and fixed expense templates (rows 39-60:
#      name, amount, category, due day).
#   2) Collects every category label used by the templates and by the
#      Fixed/Variable blocks of the month sheets.
#   3) Creates whatever the user does not have yet. Existing rows are matched
#      by case-insensitive name, so seeding twice is a no-op.
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from db.models.ledger import ExpenseCategory, FixedExpenseTemplate, IncomeSource
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..labels import INCOME_FREQUENCY_LABELS, INCOME_SOURCE_TYPE_LABELS, normalize_label
from ..logging_setup import get_logger
from ..models import IncomeFrequency, IncomeSourceType
from ..normalizers import MAX_SAFE_DAY, normalize_text, parse_amount
from ..sections import scan_sections
from .adapters.dashboard_xlsx import Sheet, month_index

CONFIG_SHEET = "Configuração"
# 0-based, inclusive row bounds on the configuration sheet.
SOURCE_ROWS = range(15, 25)
TEMPLATE_ROWS = range(38, 60)
_CATEGORY_COL = 4

DEFAULT_ICON = "MoreHorizontal"
DEFAULT_COLOR = "#64748b"

CATEGORY_META: dict[str, tuple[str, str]] = {
    normalize_text(name): meta
    for name, meta in {
        "Moradia": ("Home", "#8b5cf6"),
        "Alimentação": ("UtensilsCrossed", "#f59e0b"),
        "Transporte": ("Car", "#3b82f6"),
        "Saúde": ("Heart", "#ef4444"),
        "Educação": ("GraduationCap", "#10b981"),
        "Lazer / Diversão": ("Gamepad2", "#f97316"),
        "Lazer": ("Gamepad2", "#f97316"),
        "Vestuário": ("Shirt", "#ec4899"),
        "Assinaturas": ("CreditCard", "#6366f1"),
        "Tecnologia": ("Monitor", "#06b6d4"),
        "Impostos": ("Receipt", "#f43f5e"),
        "Seguros": ("Shield", "#14b8a6"),
        "Investimentos": ("TrendingUp", "#22c55e"),
        "Doações": ("HeartHandshake", "#ec4899"),
        "Dívida": ("AlertTriangle", "#ef4444"),
        "Documentação": ("FileText", "#64748b"),
    }.items()
}

_logger = get_logger("ledger_import.ingest.seed")


@dataclass(frozen=True, slots=True)
class SourceSeed:
    name: str
    type: IncomeSourceType
    frequency: IncomeFrequency
    is_active: bool
    sort_order: int


@dataclass(frozen=True, slots=True)
class TemplateSeed:
    name: str
    amount: Decimal
    category: str
    due_day: int


@dataclass(frozen=True, slots=True)
class WorkbookSeed:
    categories: tuple[str, ...]
    sources: tuple[SourceSeed, ...]
    templates: tuple[TemplateSeed, ...]


@dataclass(frozen=True, slots=True)
class SeedResult:
    categories: int
    sources: int
    templates: int


def _text(row: Sequence[Any] | None, idx: int) -> str:
    if row is None or idx >= len(row) or row[idx] is None:
        return ""
    return str(row[idx]).strip()


def _row(rows: Sequence[Sequence[Any]], idx: int) -> Sequence[Any] | None:
    return rows[idx] if idx < len(rows) else None


def template_due_day(raw: Any) -> int:
    if isinstance(raw, (int, float, Decimal)) and not isinstance(raw, bool):
        try:
            return min(max(round(raw), 1), MAX_SAFE_DAY)
        except (ValueError, OverflowError):
            return 1
    return 1


def _unique(names: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for name in names:
        key = name.lower()
        if name and key not in seen:
            seen.add(key)
            out.append(name)
    return out


def parse_config_sheet(
    rows: Sequence[Sequence[Any]],
) -> tuple[list[SourceSeed], list[TemplateSeed]]:
    sources: list[SourceSeed] = []
    for i in SOURCE_ROWS:
        row = _row(rows, i)
        name = _text(row, 1)
        if not name:
            continue
        sources.append(
            SourceSeed(
                name=name,
                type=normalize_label(name, INCOME_SOURCE_TYPE_LABELS) or IncomeSourceType.OTHER,
                frequency=normalize_label(_text(row, 3), INCOME_FREQUENCY_LABELS)
                or IncomeFrequency.SPORADIC,
                is_active=normalize_text(_text(row, 2)) == "sim",
                sort_order=i - SOURCE_ROWS.start,
            )
        )

    templates: list[TemplateSeed] = []
    for i in TEMPLATE_ROWS:
        row = _row(rows, i)
        name = _text(row, 1)
        category = _text(row, 3)
        if not name or not category:
            continue
        templates.append(
            TemplateSeed(
                name=name,
                amount=parse_amount(row[2] if row is not None and len(row) > 2 else None),
                category=category,
                due_day=template_due_day(row[4] if row is not None and len(row) > 4 else None),
            )
        )
    return sources, templates


def month_category_labels(rows: Sequence[Sequence[Any]]) -> list[str]:
    """Category labels used in a month sheet's Fixed and Variable blocks."""

    ranges = scan_sections(rows)
    labels: list[str] = []
    for block in (ranges.fixed, ranges.variable):
        labels.extend(_text(rows[i], _CATEGORY_COL) for i in block)
    return _unique(labels)


def parse_seed_workbook(sheets: Sequence[Sheet]) -> WorkbookSeed:
    config_key = normalize_text(CONFIG_SHEET)
    sources: list[SourceSeed] = []
    templates: list[TemplateSeed] = []
    for sheet in sheets:
        if normalize_text(sheet.name) == config_key:
            sources, templates = parse_config_sheet(sheet.rows)
            break

    names = [t.category for t in templates]
    for sheet in sheets:
        if month_index(sheet.name) is not None:
            names.extend(month_category_labels(sheet.rows))

    return WorkbookSeed(
        categories=tuple(_unique(names)),
        sources=tuple(sources),
        templates=tuple(templates),
    )


def apply_seed(session: Session, *, user_id: str, seed: WorkbookSeed) -> SeedResult:
    """Create the seed's missing registry rows and templates for ``user_id``.

    The caller owns the transaction scope.
    """

    categories: dict[str, int] = {
        name.lower(): cid
        for cid, name in session.execute(
            select(ExpenseCategory.id, ExpenseCategory.name).where(
                ExpenseCategory.user_id == user_id
            )
        )
    }
    created_categories = 0
    for order, name in enumerate(seed.categories):
        if name.lower() in categories:
            continue
        icon, color = CATEGORY_META.get(normalize_text(name), (DEFAULT_ICON, DEFAULT_COLOR))
        row = ExpenseCategory(
            user_id=user_id,
            name=name,
            icon=icon,
            color=color,
            is_default=True,
            sort_order=order,
        )
        session.add(row)
        session.flush()
        categories[name.lower()] = row.id
        created_categories += 1

    source_names = {
        name.lower()
        for name in session.scalars(
            select(IncomeSource.name).where(IncomeSource.user_id == user_id)
        )
    }
    created_sources = 0
    for src in seed.sources:
        if src.name.lower() in source_names:
            continue
        session.add(
            IncomeSource(
                user_id=user_id,
                name=src.name,
                type=src.type.value,
                frequency=src.frequency.value,
                is_active=src.is_active,
                sort_order=src.sort_order,
            )
        )
        source_names.add(src.name.lower())
        created_sources += 1

    template_keys = {
        (name.lower(), cid)
        for name, cid in session.execute(
            select(FixedExpenseTemplate.name, FixedExpenseTemplate.category_id).where(
                FixedExpenseTemplate.user_id == user_id
            )
        )
    }
    created_templates = 0
    for tpl in seed.templates:
        cid = categories.get(tpl.category.lower())
        if cid is None or (tpl.name.lower(), cid) in template_keys:
            continue
        session.add(
            FixedExpenseTemplate(
                user_id=user_id,
                category_id=cid,
                name=tpl.name,
                amount=tpl.amount,
                due_day=tpl.due_day,
                is_active=tpl.amount > 0,
            )
        )
        template_keys.add((tpl.name.lower(), cid))
        created_templates += 1

    session.flush()
    result = SeedResult(
        categories=created_categories, sources=created_sources, templates=created_templates
    )
    _logger.info(
        "Seeded user %s: %d categories, %d sources, %d templates",
        user_id,
        result.categories,
        result.sources,
        result.templates,
    )
    return result


__all__ = [
    "CATEGORY_META",
    "SeedResult",
    "SourceSeed",
    "TemplateSeed",
    "WorkbookSeed",
    "apply_seed",
    "month_category_labels",
    "parse_config_sheet",
    "parse_seed_workbook",
]
