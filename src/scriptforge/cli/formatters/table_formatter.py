"""Table output for CLI reports."""

from __future__ import annotations

from typing import Any

from rich.table import Table


def rows_table(
    rows: list[dict[str, Any]],
    title: str | None = None,
    column_options: dict[str, dict[str, Any]] | None = None,
) -> Table:
    """Build a rich table whose columns are the keys of the first row.

    Args:
        rows: Rows to display; every row should share the same keys
        title: Optional table title
        column_options: Extra ``add_column`` options keyed by column name

    Returns:
        Table ready to print
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")
    if not rows:
        return table

    columns = list(rows[0].keys())
    for column in columns:
        options = (column_options or {}).get(column, {})
        table.add_column(column.replace("_", " ").title(), **options)
    for row in rows:
        table.add_row(*[str(row.get(column, "")) for column in columns])
    return table
