"""
Legacy store introspection commands.
"""
from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from reconcile.cli.logging import setup_cli_logging
from reconcile.schemas.legacy import LegacyLookup, LegacyStatus
from reconcile.services.legacy_introspector import LegacySchemaIntrospector, legacy_id_from_filename

app = typer.Typer(help="Read-only inspection of the legacy metadata store")
console = Console()


def render_lookup(lookup: LegacyLookup) -> None:
    if lookup.status == LegacyStatus.FAILED:
        console.print(f"[red]✗ Resource {lookup.resource_id}: {lookup.message}[/red]")
        return
    if lookup.status == LegacyStatus.NOT_FOUND:
        console.print(f"[yellow]Resource {lookup.resource_id}: {lookup.message}[/yellow]")
        return

    table = Table(title=f"Legacy resource {lookup.resource_id}")
    table.add_column("Field ID", style="dim", justify="right")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    for record in lookup.records:
        table.add_row(str(record.field_id), record.field_title, record.value or "")
    console.print(table)


@app.command("inspect")
def inspect_resources(
    resource_ids: Optional[List[int]] = typer.Argument(None, help="Legacy resource id(s)"),
    filename: Optional[List[str]] = typer.Option(
        None, "--filename", "-f", help="Migrated asset filename to derive the legacy id from"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """
    Show every field value the legacy store holds for the given resources.

    Each resource is looked up on its own connection; a failed lookup is
    reported and the remaining ids are still inspected.
    """
    logger = setup_cli_logging("legacy", verbose=verbose)

    ids = list(resource_ids or [])
    for name in filename or []:
        legacy_id = legacy_id_from_filename(name)
        if legacy_id is None:
            console.print(f"[yellow]⚠ Cannot derive a legacy id from '{name}'[/yellow]")
            continue
        ids.append(legacy_id)

    if not ids:
        console.print("[yellow]No resource ids to inspect.[/yellow]")
        raise typer.Exit(code=0)

    logger.info(f"Inspecting {len(ids)} legacy resource(s)")
    lookups = LegacySchemaIntrospector().introspect_many(ids)
    for lookup in lookups:
        render_lookup(lookup)

    failed = sum(1 for lookup in lookups if lookup.status == LegacyStatus.FAILED)
    logger.info(f"Legacy inspection finished: inspected={len(lookups)} failed={failed}")
    return lookups
