"""File-shape adapters producing :class:`~ledger_import.models.NormalizedTransaction` rows."""
