"""Human-readable rendering of tables and indexes."""

from __future__ import annotations

from typing import Any

from relational_tables.table import Table


def format_value(value: Any, max_width: int = 40) -> str:
    """Format a column value for display."""
    if value is None:
        return "NULL"
    if isinstance(value, float):
        return f"{value:.6g}"
    s = str(value)
    if len(s) > max_width:
        return s[: max_width - 3] + "..."
    return s


def format_table(table: Table, max_col_width: int = 40) -> str:
    """Render a table as aligned text with a header and row count."""
    columns = list(table.attributes)
    widths = [len(c) for c in columns]
    formatted_rows = []
    for row in table:
        values = [format_value(v, max_col_width) for v in row]
        formatted_rows.append(values)
        widths = [max(w, len(v)) for w, v in zip(widths, values)]
    widths = [min(w, max_col_width) for w in widths]

    header = " | ".join(c.ljust(w)[:w] for c, w in zip(columns, widths))
    lines = [f"Table {table.name}", header, "-" * len(header)]
    for values in formatted_rows:
        lines.append(" | ".join(v.ljust(w) for v, w in zip(values, widths)))

    count = len(table)
    lines.append(f"\n({count} row{'s' if count != 1 else ''})")
    return "\n".join(lines)


def format_index(table: Table) -> str:
    """Render the primary-key index of a table, one entry per line."""
    lines = [f"Index for {table.name} ({table.index_type.value})", "-" * 19]
    for key, row in table.index.items():
        lines.append(f"{key} -> {list(row)}")
    lines.append("-" * 19)
    return "\n".join(lines)
