"""CLI formatters — color helpers, check indicators, table formatting."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

_STATUS_STYLES = {
    "ok": ("✓", "green"),
    "fixed": ("✓", "cyan"),
    "warning": ("!", "yellow"),
    "error": ("✗", "red"),
    "info": ("•", "white"),
}


def get_console(no_color: bool = False) -> Console:
    """Get a Rich Console, optionally with color disabled."""
    return Console(no_color=no_color, highlight=False)


def status_indicator(status: str) -> Text:
    """Map a check status to a colored icon."""
    icon, style = _STATUS_STYLES.get(status, ("?", "dim"))
    return Text(f"{icon} ", style=style)


def format_check(name: str, status: str, detail: str) -> Text:
    line = Text("  ")
    line.append_text(status_indicator(status))
    _, style = _STATUS_STYLES.get(status, ("?", "dim"))
    line.append(f"{name}: {detail}", style=style)
    return line


def format_value(value: Any) -> str:
    """Render a document value the way it would appear in TOML."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, list):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    return str(value)


def flatten_document(data: Any, prefix: str = "") -> list[tuple[str, Any]]:
    """Flatten nested tables into sorted ``(dotted.key, value)`` rows."""
    rows: list[tuple[str, Any]] = []
    if isinstance(data, dict):
        for key in sorted(data):
            path = f"{prefix}.{key}" if prefix else str(key)
            value = data[key]
            if isinstance(value, dict) and value:
                rows.extend(flatten_document(value, path))
            else:
                rows.append((path, value))
    return rows


def build_table(title: str, columns: list[str], rows: list[list[Any]]) -> Table:
    """Build a Rich table with standard styling."""
    table = Table(title=title, show_header=True, header_style="bold")
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*(str(v) for v in row))
    return table
