"""
Main CLI application using Typer.

Entry point: python -m reconcile.cli
CLI Name: capydam-reconcile
"""
import typer

from reconcile import __version__ as app_version
from reconcile.core.config import settings

app = typer.Typer(
    name="capydam-reconcile",
    help="CapyDAM Reconcile - storage migration status, audits and rehearsal resets",
)


@app.command()
def version():
    """Show CLI version information."""
    typer.echo(f"{settings.app_name} version {app_version}")


# Register command groups
from reconcile.cli.commands import audit, chat, legacy, status
app.command(name="status")(status.migration_status)
app.add_typer(audit.app, name="audit")
app.add_typer(legacy.app, name="legacy")
app.add_typer(chat.app, name="chat")
