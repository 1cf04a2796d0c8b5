"""
Vertical (``\\G`` style) rendering of query results.
"""
from __future__ import annotations

import typing as t

ROW_MARKER = "*" * 27


def column_labels(description: t.Sequence[t.Sequence[t.Any]] | None) -> list[str]:
    """Column labels from a DB‑API ``cursor.description``."""
    return [str(col[0]) for col in description or ()]


def render_result_set(columns: t.Sequence[str], rows: t.Iterable[t.Sequence[t.Any]]) -> str:
    lines = ["Results:", ""]
    count = 0
    for count, row in enumerate(rows, start=1):
        lines.append(f"{ROW_MARKER} {count}. row {ROW_MARKER}")
        for label, value in zip(columns, row):
            lines.append(f"{label}: {value}")
        lines.append("")
    lines.append(f"{count} rows in set.")
    return "\n".join(lines)


def render_update_count(count: int) -> str:
    return f"Update count: {count}"
