"""
Shared helpers for CLI commands.
"""
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table


def confirm_action(message: str, default: bool = False) -> bool:
    """Ask the operator to confirm a destructive action."""
    return typer.confirm(message, default=default)


def metric_table(title: str, value_style: str = "white") -> Table:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style=value_style)
    return table


def print_inline_error(console: Console, error: Optional[str], what: str) -> bool:
    """Print a failed sub-check next to the item it affects. Returns True if printed."""
    if not error:
        return False
    console.print(f"[red]✗ {what} could not be checked: {error}[/red]")
    return True


def truncate(value: Optional[str], length: int) -> str:
    if not value:
        return ""
    return value if len(value) <= length else f"{value[:length]}..."
