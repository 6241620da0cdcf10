"""
Chat rehearsal reset commands.
"""
from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from reconcile.cli.commands.utils import confirm_action, print_inline_error
from reconcile.cli.logging import setup_cli_logging
from reconcile.core.database import engine
from reconcile.core.exceptions import TeardownStepError, describe_error
from reconcile.services.teardown_service import CHAT_TEARDOWN_PLAN, TeardownService

app = typer.Typer(help="Chat data reset for migration rehearsals")
console = Console()


@app.command("clear")
def clear_chat(
    dry_run: bool = typer.Option(False, "--dry-run", help="Show row counts without deleting anything"),
    force: bool = typer.Option(False, "--force", help="Skip confirmation prompt"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """
    Delete all chat data so the chat migration can be re-run.

    Tables are cleared children first: notifications, reactions, messages,
    memberships, rooms. Each table is committed on its own; if a step fails
    the remaining tables are left untouched and the command exits with 1.
    """
    logger = setup_cli_logging("chat", verbose=verbose)
    logger.info(f"Starting chat teardown (dry_run={dry_run}, force={force})")

    with Session(engine) as session:
        service = TeardownService(session)
        try:
            counts = service.counts(CHAT_TEARDOWN_PLAN)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(f"Failed to count chat data: {exc}")
            print_inline_error(console, describe_error(exc), "Chat data")
            raise typer.Exit(code=1)

        table = Table(title="Chat data to delete")
        table.add_column("Step", style="dim", justify="right")
        table.add_column("Table", style="cyan")
        table.add_column("Rows", justify="right")
        for position, count in enumerate(counts, start=1):
            table.add_row(str(position), count.table, str(count.deleted))
        console.print(table)

        if dry_run:
            console.print("[green]✓ Dry run complete. No changes applied.[/green]")
            raise typer.Exit(code=0)

        if not force:
            if not confirm_action(
                "\n⚠ This will permanently delete ALL chat data listed above. Continue?",
                default=False,
            ):
                logger.info("Chat teardown cancelled by user")
                console.print("[yellow]Teardown cancelled[/yellow]")
                raise typer.Exit(code=0)

        try:
            report = service.run(CHAT_TEARDOWN_PLAN)
        except TeardownStepError as exc:
            logger.error(str(exc))
            for step in exc.completed:
                console.print(f"[green]✓ {step.table}: deleted {step.deleted}[/green]")
            console.print(f"[red]✗ {exc.table}: {exc.original}[/red]")
            console.print("[yellow]Remaining tables were not touched. Fix the error and run again.[/yellow]")
            raise typer.Exit(code=1)

    for step in report.steps:
        console.print(f"[green]✓ {step.table}: deleted {step.deleted}[/green]")
    console.print(f"\n[green]✓ Chat data cleared ({report.total_deleted} rows).[/green]")
    logger.info(f"Chat teardown complete: total_deleted={report.total_deleted}")
    return report
