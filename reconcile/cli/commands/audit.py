"""
Completeness audit commands.
"""
from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import Session

from reconcile.cli.commands.utils import metric_table, print_inline_error, truncate
from reconcile.cli.logging import setup_cli_logging
from reconcile.core.database import engine
from reconcile.schemas.audit import DESCRIPTIVE_TEXT_KEYS, KeyState, MetadataBlobStatus
from reconcile.services.completeness_auditor import (
    FILENAME_LISTING_LIMIT,
    RECENT_MESSAGES_LIMIT,
    CompletenessAuditor,
)

app = typer.Typer(help="Completeness audits for thumbnails, descriptions and previews")
console = Console()


@app.command("thumbnails")
def audit_thumbnails(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Count assets with and without a thumbnail and show the first offenders."""
    logger = setup_cli_logging("audit", verbose=verbose)
    logger.info("Starting thumbnail audit")

    with Session(engine) as session:
        report = CompletenessAuditor(session).audit_thumbnails()

    if print_inline_error(console, report.error, "Thumbnails"):
        return report

    summary = metric_table("Thumbnail Status")
    summary.add_row("Total assets", str(report.total))
    summary.add_row("With thumbnail", f"[green]{report.present}[/green]")
    summary.add_row("Without thumbnail", f"[red]{report.missing}[/red]")
    console.print(summary)

    if report.missing:
        offenders = Table(title=f"First {len(report.offenders)} offenders")
        offenders.add_column("ID", style="dim")
        offenders.add_column("Filename", style="white")
        offenders.add_column("MIME type", style="cyan")
        for offender in report.offenders:
            offenders.add_row(offender.id, offender.filename, offender.mime_type)
        console.print(offenders)
        console.print("[yellow]Run the thumbnail backfill for the assets above.[/yellow]")
    else:
        console.print("[green]✓ Every asset has a thumbnail.[/green]")

    logger.info(f"Thumbnail audit finished: missing={report.missing}")
    return report


@app.command("descriptions")
def audit_descriptions(
    prefix: Optional[str] = typer.Option(
        None, "--prefix", help="Filename prefix marking migrated assets (default from settings)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Check caption, summary and description on a sample of migrated assets."""
    logger = setup_cli_logging("audit", verbose=verbose)
    logger.info("Starting description audit")

    with Session(engine) as session:
        report = CompletenessAuditor(session).audit_descriptions(prefix=prefix)

    if print_inline_error(console, report.error, "Descriptions"):
        return report

    if not report.rows:
        console.print(f"[yellow]No assets found with filename prefix '{report.prefix}'.[/yellow]")
        return report

    table = Table(title=f"Descriptive text on assets under '{report.prefix}'")
    table.add_column("Filename", style="white")
    for key in DESCRIPTIVE_TEXT_KEYS:
        table.add_column(key, style="white")

    for row in report.rows:
        if row.status == MetadataBlobStatus.UNPARSABLE:
            table.add_row(
                row.filename,
                f"[red]unparsable blob: {row.error}[/red]",
                f"[dim]{truncate(row.raw_preview, 40)}[/dim]",
                "",
            )
            continue
        if row.status == MetadataBlobStatus.MISSING:
            table.add_row(row.filename, "[yellow]no metadata blob[/yellow]", "", "")
            continue

        cells = []
        for key in DESCRIPTIVE_TEXT_KEYS:
            presence = row.keys[key]
            if presence.state == KeyState.PRESENT:
                cells.append(f"[green]✓[/green] {truncate(presence.preview, 60)}")
            elif presence.state == KeyState.EMPTY:
                cells.append("[yellow]empty[/yellow]")
            else:
                cells.append("[red]✗ absent[/red]")
        table.add_row(row.filename, *cells)

    console.print(table)
    if report.unparsable:
        console.print(
            f"[yellow]⚠ {report.unparsable} blob(s) could not be parsed; fix serialization before re-running enrichment.[/yellow]"
        )

    logger.info(f"Description audit finished: rows={len(report.rows)} unparsable={report.unparsable}")
    return report


@app.command("previews")
def audit_previews(
    target_marker: Optional[str] = typer.Option(
        None, "--target-marker", help="Host fragment of the new storage (default from settings)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Deep verification of video preview frames, judged by the first frame."""
    logger = setup_cli_logging("audit", verbose=verbose)
    logger.info("Starting preview frame verification")

    with Session(engine) as session:
        report = CompletenessAuditor(session).audit_preview_frames(target_marker=target_marker)

    if print_inline_error(console, report.error, "Preview frames"):
        return report

    summary = metric_table("Preview Frame Verification")
    summary.add_row("Migrated", f"[green]{report.migrated}[/green]")
    summary.add_row("Pending (external)", f"[red]{report.pending}[/red]")
    summary.add_row("Empty / no previews", str(report.empty))
    summary.add_row("Unrecognized", f"[yellow]{report.unrecognized}[/yellow]")
    summary.add_row("Total videos", str(report.total))
    console.print(summary)

    if report.samples:
        samples = Table(title="Sample migrated first frames")
        samples.add_column("ID", style="dim")
        samples.add_column("URL", style="white")
        for sample in report.samples:
            samples.add_row(sample.id, sample.url)
        console.print(samples)

    logger.info(f"Preview frame verification finished: pending={report.pending}")
    return report


@app.command("thumbnail-integrity")
def audit_thumbnail_integrity(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Check whether stored thumbnails are real thumbnails or copies of the original."""
    logger = setup_cli_logging("audit", verbose=verbose)

    with Session(engine) as session:
        report = CompletenessAuditor(session).audit_thumbnail_integrity()

    if print_inline_error(console, report.error, "Thumbnail integrity"):
        return report

    table = Table(title="Thumbnail integrity sample")
    table.add_column("Filename", style="white")
    table.add_column("Original", style="dim")
    table.add_column("Thumbnail", style="dim")
    table.add_column("Verdict")
    for row in report.rows:
        verdict = f"[yellow]⚠ {row.reason}[/yellow]" if row.suspicious else "[green]✓ ok[/green]"
        table.add_row(row.filename, row.path or "", row.thumbnail_path, verdict)
    console.print(table)

    if report.suspicious:
        console.print("[yellow]Some thumbnails look like full-size originals. Run the thumbnail backfill.[/yellow]")

    logger.info(f"Thumbnail integrity check finished: suspicious={report.suspicious}")
    return report


@app.command("chat-attachments")
def audit_chat_attachments(
    limit: int = typer.Option(RECENT_MESSAGES_LIMIT, "--limit", "-l", help="Number of recent messages"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Show recent chat messages and their attachment references."""
    if limit <= 0:
        raise typer.BadParameter("Limit must be a positive integer.")
    logger = setup_cli_logging("audit", verbose=verbose)

    with Session(engine) as session:
        report = CompletenessAuditor(session).audit_chat_attachments(limit=limit)

    if print_inline_error(console, report.error, "Chat attachments"):
        return report

    if not report.rows:
        console.print("[yellow]No messages found.[/yellow]")
        return report

    table = Table(title=f"Last {len(report.rows)} messages")
    table.add_column("When", style="dim")
    table.add_column("Content", style="white")
    table.add_column("Attachment", style="white")
    table.add_column("State")
    for row in report.rows:
        attachment = f"{row.attachment_name or '?'} ({row.attachment_type or '?'})" if row.has_attachment else ""
        table.add_row(
            row.created_at.strftime("%Y-%m-%d %H:%M"),
            truncate(row.content, 50),
            attachment,
            row.reference_state.value if row.has_attachment else "",
        )
    console.print(table)
    console.print(f"Found {report.with_attachment} attachment(s) in the last {len(report.rows)} messages.")

    logger.info(f"Chat attachment check finished: with_attachment={report.with_attachment}")
    return report


@app.command("filenames")
def list_filenames(
    limit: int = typer.Option(FILENAME_LISTING_LIMIT, "--limit", "-l", help="Number of assets"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """List the first assets with their stored and original names."""
    if limit <= 0:
        raise typer.BadParameter("Limit must be a positive integer.")
    setup_cli_logging("audit", verbose=verbose)

    with Session(engine) as session:
        listing = CompletenessAuditor(session).list_filenames(limit=limit)

    if print_inline_error(console, listing.error, "Filenames"):
        return listing

    table = Table(title=f"First {len(listing.rows)} assets")
    table.add_column("ID", style="dim")
    table.add_column("Filename", style="white")
    table.add_column("Original name", style="cyan")
    for row in listing.rows:
        table.add_row(row.id, row.filename, row.original_name)
    console.print(table)
    return listing
