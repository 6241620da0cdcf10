"""
Migration status command.
"""
from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import Session

from reconcile.cli.logging import setup_cli_logging
from reconcile.core.config import settings
from reconcile.core.database import engine
from reconcile.core.exceptions import ProbeNotFoundError
from reconcile.schemas.scan import ScanReport
from reconcile.services.migration_scanner import MigrationScanner

console = Console()


def render_scan_report(report: ScanReport) -> None:
    table = Table(title=f"Remaining '{settings.external_marker}' references")
    table.add_column("Probe", style="cyan")
    table.add_column("Entity", style="white")
    table.add_column("Total", justify="right")
    table.add_column("External", justify="right", style="red")
    table.add_column("Local", justify="right", style="green")
    table.add_column("Empty", justify="right", style="dim")
    table.add_column("Complete", justify="right")

    for probe in report.probes:
        if not probe.ok:
            table.add_row(probe.label, probe.entity, "-", "-", "-", "-", f"[red]error: {probe.error}[/red]")
            continue
        table.add_row(
            probe.label,
            probe.entity,
            str(probe.total),
            str(probe.external),
            str(probe.local),
            str(probe.empty),
            f"{probe.completion_percent:.1f}%",
        )
    console.print(table)

    if report.fully_migrated:
        console.print("\n[green]✓ No external references remain. Storage migration is complete.[/green]")
    elif report.failed_probes:
        console.print(
            f"\n[yellow]⚠ {len(report.failed_probes)} probe(s) could not be scanned: "
            f"{', '.join(report.failed_probes)}[/yellow]"
        )
    if report.total_external:
        console.print(
            f"\n[yellow]⚠ {report.total_external} external reference(s) remain. "
            "Run the migration scripts again.[/yellow]"
        )


def migration_status(
    probe: Optional[List[str]] = typer.Option(
        None, "--probe", "-p", help="Only run the named probe(s), e.g. asset_thumbnail"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """
    Count references still pointing at the old storage provider.

    Scans every entity kind independently; a probe that fails is shown
    inline and does not stop the others.
    """
    logger = setup_cli_logging("status", verbose=verbose)
    logger.info(f"Starting migration status scan (probes={probe or 'all'})")

    with Session(engine) as session:
        scanner = MigrationScanner(session)
        try:
            report = scanner.scan(probe)
        except ProbeNotFoundError as exc:
            logger.error(str(exc))
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(code=2)

    render_scan_report(report)
    logger.info(f"Migration status scan finished: fully_migrated={report.fully_migrated}")
    return report
