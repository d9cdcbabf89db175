"""Locate the Income / Fixed / Variable blocks inside a month sheet.

Month sheets place their three blocks at varying rows, so blocks are found by
marker text in the first cell instead of fixed coordinates. The scan is an
explicit finite-state machine:

``SEEKING`` ─marker─▶ ``IN_INCOME`` | ``IN_FIXED`` | ``IN_VARIABLE``
``IN_*``    ─"total" row, or a repeated marker─▶ ``SEEKING``
``IN_*``    ─first marker of another block─▶ that block's state

:func:`transition` is the pure step function; :func:`scan_sections` drives it
over a sheet and returns the data-row range of every block. A block's data rows
start two rows below its marker (the marker row and the column-header row are
skipped) and stop before the row that ends the block.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from enum import Enum
from typing import Any, NamedTuple

from .normalizers import normalize_text


class Section(Enum):
    INCOME = "income"
    FIXED = "fixed"
    VARIABLE = "variable"


class ScanState(Enum):
    SEEKING = "seeking"
    IN_INCOME = "in_income"
    IN_FIXED = "in_fixed"
    IN_VARIABLE = "in_variable"


# Checked in order; "receitas" is last so "despesas" headings win on overlap.
_MARKERS: tuple[tuple[str, Section], ...] = (
    ("despesas fixas", Section.FIXED),
    ("despesas vari", Section.VARIABLE),
    ("receitas", Section.INCOME),
)

_STATE_FOR: dict[Section, ScanState] = {
    Section.INCOME: ScanState.IN_INCOME,
    Section.FIXED: ScanState.IN_FIXED,
    Section.VARIABLE: ScanState.IN_VARIABLE,
}

_SECTION_FOR: dict[ScanState, Section] = {v: k for k, v in _STATE_FOR.items()}

_END_TOKEN = "total"
_END_CELLS = 3
# Marker row + column-header row.
DATA_OFFSET = 2

type Row = Sequence[Any]


class SectionRanges(NamedTuple):
    income: range
    fixed: range
    variable: range

    def for_section(self, section: Section) -> range:
        return getattr(self, section.value)


def detect_marker(row: Row) -> Section | None:
    """Return the block whose marker text appears in the row's first cell."""

    if not row:
        return None
    first = normalize_text(row[0])
    for token, section in _MARKERS:
        if token in first:
            return section
    return None


def is_total_row(row: Row) -> bool:
    """True when any of the first three cells mentions ``total``."""

    return any(_END_TOKEN in normalize_text(cell) for cell in list(row)[:_END_CELLS])


def section_for(state: ScanState) -> Section | None:
    return _SECTION_FOR.get(state)


def transition(state: ScanState, row: Row, *, seen: Collection[Section] = ()) -> ScanState:
    """Return the scanner state after consuming ``row``.

    ``seen`` holds blocks whose marker was already recorded; their markers no
    longer open a block but still end the current one.
    """

    marker = detect_marker(row)
    if marker is not None and marker not in seen:
        return _STATE_FOR[marker]
    if state is ScanState.SEEKING:
        return state
    if marker is not None or is_total_row(row):
        return ScanState.SEEKING
    return state


def scan_sections(rows: Sequence[Row]) -> SectionRanges:
    """Partition a month sheet's rows into the three block data ranges.

    Blocks that never appear yield an empty range. A block with no end row
    runs to the end of the sheet.
    """

    state = ScanState.SEEKING
    markers: dict[Section, int] = {}
    ends: dict[Section, int] = {}

    for idx, row in enumerate(rows):
        current = section_for(state)
        if current is not None and idx < markers[current] + DATA_OFFSET:
            # Column-header row of the block just entered.
            continue
        nxt = transition(state, row, seen=markers.keys())
        if nxt is state:
            continue
        if current is not None:
            ends[current] = idx
        entered = section_for(nxt)
        if entered is not None:
            markers[entered] = idx
        state = nxt

    current = section_for(state)
    if current is not None:
        ends[current] = len(rows)

    def _range(section: Section) -> range:
        if section not in markers:
            return range(0)
        start = markers[section] + DATA_OFFSET
        return range(start, max(start, ends[section]))

    return SectionRanges(
        income=_range(Section.INCOME),
        fixed=_range(Section.FIXED),
        variable=_range(Section.VARIABLE),
    )


__all__ = [
    "DATA_OFFSET",
    "ScanState",
    "Section",
    "SectionRanges",
    "detect_marker",
    "is_total_row",
    "scan_sections",
    "section_for",
    "transition",
]
