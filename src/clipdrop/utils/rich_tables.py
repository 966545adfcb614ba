# ABOUTME: Rich tables for the CLI: extraction summaries, written files, tracked directories
# ABOUTME: All tables share one rounded, cyan-bordered look

from pathlib import Path
from typing import Any

from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table

from clipdrop.extraction.models import ExtractionOutcome


def _styled_table(title: str, title_style: str, **options) -> Table:
    return Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=ROUNDED,
        show_header=True,
        header_style="bold magenta",
        border_style="cyan",
        title_justify="left",
        **options,
    )


def create_key_value_table(
    title: str,
    data: dict[str, str],
    title_style: str = "bold cyan",
    key_style: str = "bold blue",
    value_style: str = "green",
) -> Table:
    """Two-column Field/Value table, one row per mapping entry."""
    table = _styled_table(title, title_style, expand=False)
    table.add_column("Field", style=key_style)
    table.add_column("Value", style=value_style)
    for key, value in data.items():
        table.add_row(key, str(value))
    return table


def create_multi_column_table(
    title: str,
    columns: list[tuple[str, str]],
    rows: list[list[str]],
    title_style: str = "bold cyan",
) -> Table:
    """Zebra-striped table.

    Args:
        title: Table title
        columns: (name, style) per column
        rows: Cell values, one list per row
        title_style: Rich style for the title
    """
    table = _styled_table(title, title_style, row_styles=["", "dim"], expand=True)
    for name, style in columns:
        table.add_column(name, style=style)
    for row in rows:
        table.add_row(*row)
    return table


def create_outcome_table(outcome: ExtractionOutcome) -> Table:
    """Summarize one extraction: what matched and how each file operation went."""
    summary = {
        "📁 Directory": str(outcome.target_directory),
        "🔎 Branches": ", ".join(outcome.branches) or "None (unsupported format)",
        "🏷️ Text Label": outcome.label.value if outcome.label else "-",
        "✅ Succeeded": "Yes" if outcome.succeeded else "No",
    }
    if outcome.cancelled:
        summary["⛔ Cancelled"] = "Yes"
    if outcome.errors:
        summary["🚨 Errors"] = "\n".join(outcome.errors)

    return create_key_value_table("📋 Clipboard Extraction", summary, "bold magenta", "cyan", "white")


def create_items_table(outcome: ExtractionOutcome) -> Table:
    rows = [
        [item.kind, item.target, "✅" if item.success else f"❌ {item.error or ''}"]
        for item in outcome.items
    ]
    return create_multi_column_table(
        title="🗂️ Written Files",
        columns=[("Kind", "cyan"), ("Target", "white"), ("Status", "green")],
        rows=rows,
    )


def create_directories_table(directories: list[Path]) -> Table:
    rows = [[str(index), str(path)] for index, path in enumerate(directories, start=1)]
    return create_multi_column_table(
        title=f"📂 Tracked Directories ({len(directories)})",
        columns=[("#", "dim"), ("Directory", "white")],
        rows=rows,
    )


def create_logging_status_table(status: dict[str, Any]) -> Table:
    """Logging mode, log directory, per-sink files and the quieted libraries."""
    data = {
        "🔧 Mode": status["mode"].title(),
        "📁 Log Directory": status["log_directory"] or "N/A (production mode)",
        "🔇 Suppressed Libraries": ", ".join(status["third_party_suppressed"]),
    }
    labels = {"main": "📝 Main Log", "json": "📊 JSON Log", "errors": "🚨 Error Log"}
    for key, label in labels.items():
        if status["log_files"].get(key):
            data[label] = status["log_files"][key]

    return create_key_value_table("🔍 Logging Configuration", data, "bold green", "blue", "white")


def print_rich_table(console: Console, table: Table) -> None:
    """Print a table with a blank line on either side."""
    console.print()
    console.print(table)
    console.print()
