"""Free-text label → enumeration member lookup.

Spreadsheets label jars, payment methods and income sources in Portuguese with
inconsistent accents and casing. A :class:`LabelTable` maps *normalized*
labels (see :func:`~ledger_import.normalizers.normalize_text`) to members of a
single ``StrEnum``; :func:`normalize_label` does the lookup.

The built-in tables below are immutable. Callers (and tests) may build their
own with :func:`label_table` and pass them wherever a table is accepted.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import StrEnum
from types import MappingProxyType

from .models import IncomeFrequency, IncomeSourceType, JarType, PaymentMethod
from .normalizers import normalize_text


class LabelTable[E: StrEnum](Mapping[str, E]):
    """Read-only mapping from normalized label text to an enum member."""

    __slots__ = ("_entries", "enum")

    def __init__(self, enum: type[E], entries: Mapping[str, E]) -> None:
        self.enum = enum
        normalized: dict[str, E] = {}
        for label, member in entries.items():
            if not isinstance(member, enum):
                raise TypeError(f"{member!r} is not a {enum.__name__} member")
            normalized[normalize_text(label)] = member
        self._entries = MappingProxyType(normalized)

    def __getitem__(self, key: str) -> E:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"LabelTable({self.enum.__name__}, {len(self)} labels)"


def label_table[E: StrEnum](enum: type[E], entries: Mapping[str, E]) -> LabelTable[E]:
    """Build a table; every enum member's own value is accepted as a label too."""

    merged: dict[str, E] = {m.value: m for m in enum}
    merged.update(entries)
    return LabelTable(enum, merged)


def normalize_label[E: StrEnum](raw: object, table: LabelTable[E]) -> E | None:
    """Return the member for ``raw`` or ``None`` when the label is unmapped.

    Matching ignores diacritics, case and surrounding/inner extra whitespace,
    so ``"Educação"`` and ``"educacao"`` resolve identically.
    """

    key = normalize_text(raw)
    if not key:
        return None
    return table.get(key)


JAR_LABELS: LabelTable[JarType] = label_table(
    JarType,
    {
        "Necessidades": JarType.NECESSITIES,
        "Necessidade": JarType.NECESSITIES,
        "NEC": JarType.NECESSITIES,
        "Educação": JarType.EDUCATION,
        "EDU": JarType.EDUCATION,
        "Poupança": JarType.SAVINGS,
        "Poupança para Longo Prazo": JarType.SAVINGS,
        "PELP": JarType.SAVINGS,
        "Diversão": JarType.PLAY,
        "Lazer": JarType.PLAY,
        "DIV": JarType.PLAY,
        "Investimentos": JarType.INVESTMENT,
        "Investimento": JarType.INVESTMENT,
        "Liberdade Financeira": JarType.INVESTMENT,
        "CFL": JarType.INVESTMENT,
        "Doações": JarType.GIVING,
        "Doação": JarType.GIVING,
        "DOA": JarType.GIVING,
    },
)

PAYMENT_METHOD_LABELS: LabelTable[PaymentMethod] = label_table(
    PaymentMethod,
    {
        "Pix": PaymentMethod.PIX,
        "Débito": PaymentMethod.DEBIT,
        "Cartão de Débito": PaymentMethod.DEBIT,
        "Crédito": PaymentMethod.CREDIT,
        "Cartão de Crédito": PaymentMethod.CREDIT,
        "Dinheiro": PaymentMethod.CASH,
        "Espécie": PaymentMethod.CASH,
        "Boleto": PaymentMethod.BOLETO,
        "Transferência": PaymentMethod.TRANSFER,
        "TED": PaymentMethod.TRANSFER,
        "DOC": PaymentMethod.TRANSFER,
    },
)

INCOME_SOURCE_TYPE_LABELS: LabelTable[IncomeSourceType] = label_table(
    IncomeSourceType,
    {
        "Salário": IncomeSourceType.SALARY,
        "Salário CLT": IncomeSourceType.SALARY,
        "Freelance": IncomeSourceType.FREELANCE,
        "Freelance / Projetos": IncomeSourceType.FREELANCE,
        "Vendas Online": IncomeSourceType.SALES,
        "Consultoria": IncomeSourceType.CONSULTING,
        "Investimentos": IncomeSourceType.INVESTMENTS,
        "Rendimentos / Investimentos": IncomeSourceType.INVESTMENTS,
        "Aluguel Recebido": IncomeSourceType.RENT,
        "Comissões": IncomeSourceType.COMMISSIONS,
        "Bônus / Participação": IncomeSourceType.BONUS,
        "Renda Extra / Bico": IncomeSourceType.EXTRA,
        "Outros": IncomeSourceType.OTHER,
    },
)

INCOME_FREQUENCY_LABELS: LabelTable[IncomeFrequency] = label_table(
    IncomeFrequency,
    {
        "Mensal Fixo": IncomeFrequency.MONTHLY_FIXED,
        "Mensal (juros)": IncomeFrequency.MONTHLY_FIXED,
        "Variável": IncomeFrequency.MONTHLY_VARIABLE,
        "Variável/Projeto": IncomeFrequency.PER_PROJECT,
        "Por Demanda": IncomeFrequency.SPORADIC,
        "Semestral": IncomeFrequency.SPORADIC,
        "Esporádico": IncomeFrequency.SPORADIC,
    },
)


__all__ = [
    "LabelTable",
    "label_table",
    "normalize_label",
    "JAR_LABELS",
    "PAYMENT_METHOD_LABELS",
    "INCOME_SOURCE_TYPE_LABELS",
    "INCOME_FREQUENCY_LABELS",
]
