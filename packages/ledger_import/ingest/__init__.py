"""Ingestion: file loading and shape detection for ledger imports."""

from .utils import SUPPORTED_EXTENSIONS, load_transactions, read_workbook

__all__ = ["SUPPORTED_EXTENSIONS", "load_transactions", "read_workbook"]
