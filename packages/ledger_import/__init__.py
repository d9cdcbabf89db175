"""Ledger import engine: spreadsheet files in, normalized ledger rows out."""

from .api import format_transaction, import_batch, parse_file
from .models import (
    EmptyBatch,
    ImportSummary,
    MissingRegistry,
    NormalizedTransaction,
    ParseResult,
    UnsupportedFileFormat,
)

__all__ = [
    "EmptyBatch",
    "ImportSummary",
    "MissingRegistry",
    "NormalizedTransaction",
    "ParseResult",
    "UnsupportedFileFormat",
    "format_transaction",
    "import_batch",
    "parse_file",
]
