"""Output formatters for ScriptForge CLI."""

from __future__ import annotations

from scriptforge.cli.formatters.json_formatter import JsonFormatter
from scriptforge.cli.formatters.table_formatter import rows_table

__all__ = ["JsonFormatter", "rows_table"]
