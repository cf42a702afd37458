"""Operator CLI for the clinic site data directory."""

import logging
import zipfile
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from clinicsite.archive import create_backup, restore_backup
from clinicsite.audit import AuditLog
from clinicsite.config import SiteConfig, load_config
from clinicsite.content.store import ContentStore
from clinicsite.contacts.routing import ContactRouter
from clinicsite.contacts.service import ContactService
from clinicsite.errors import GENERIC_SERVER_ERROR, ClinicSiteError
from clinicsite.validation import validate_contacts_query

app = typer.Typer(
    name="clinicsite",
    help="Manage clinic site content, backups and contact requests.",
)

console = Console()

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from clinicsite import __version__

        console.print(f"clinicsite {__version__}")
        raise typer.Exit()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _config(ctx: typer.Context) -> SiteConfig:
    return ctx.obj["config"]


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .clinicsite.toml file."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Clinic site content tools."""
    config = load_config(config_path)
    _setup_logging(config.logging.level)
    ctx.obj = {"config": config}


@app.command()
def init(ctx: typer.Context) -> None:
    """Create the data directories and seed files."""
    config = _config(ctx)
    try:
        ContentStore(config).initialize()
    except (ClinicSiteError, OSError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)
    console.print(f"[green]Data directory ready:[/green] {config.data_dir}")


@app.command()
def publish(ctx: typer.Context) -> None:
    """Copy the draft content to the published document."""
    config = _config(ctx)
    store = ContentStore(config)
    try:
        store.publish()
    except OSError as exc:
        console.print(f"[red]Error:[/red] Publish failed: {exc}")
        raise typer.Exit(1)
    AuditLog(config.audit_file).record("publish_content", user="cli")
    console.print("[green]Published draft content.[/green]")


@app.command()
def backup(ctx: typer.Context) -> None:
    """Zip the data and uploads directories."""
    out_file = create_backup(_config(ctx))
    console.print(f"[green]Backup created:[/green] {out_file}")


@app.command()
def restore(
    ctx: typer.Context,
    path: Annotated[
        Optional[Path],
        typer.Argument(help="Archive to restore. Defaults to the newest backup."),
    ] = None,
) -> None:
    """Restore data and uploads from a backup archive."""
    try:
        backup_file = restore_backup(_config(ctx), path)
    except (FileNotFoundError, zipfile.BadZipFile) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)
    console.print(f"[green]Restore completed from:[/green] {backup_file}")


@app.command()
def contacts(
    ctx: typer.Context,
    page: Annotated[int, typer.Option("--page", "-p", help="Page number.")] = 1,
    limit: Annotated[int, typer.Option("--limit", "-l", help="Rows per page (5-100).")] = 25,
    search: Annotated[str, typer.Option("--search", "-s", help="Free-text filter.")] = "",
) -> None:
    """List stored contact requests, newest first."""
    config = _config(ctx)
    service = ContactService(
        ContentStore(config),
        AuditLog(config.audit_file),
        ContactRouter(config.smtp),
    )
    query = validate_contacts_query({"page": page, "limit": limit, "search": search})
    try:
        items, pagination = service.list_contacts(query)
    except ClinicSiteError:
        logger.exception("Could not read contact requests")
        console.print(f"[red]Error:[/red] {GENERIC_SERVER_ERROR}")
        raise typer.Exit(1)

    if not items:
        console.print("[yellow]No contact requests found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Contact requests")
    table.add_column("Created")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Phone")
    table.add_column("Concern")
    for item in items:
        if not isinstance(item, dict):
            continue
        table.add_row(
            str(item.get("createdAt", ""))[:16].replace("T", " "),
            f"{item.get('firstName', '')} {item.get('lastName', '')}".strip(),
            str(item.get("email", "")),
            str(item.get("phone", "")),
            str(item.get("concern", "")),
        )
    console.print(table)
    console.print(
        f"Page {pagination.page} of {pagination.pages} ({pagination.total} total)"
    )


if __name__ == "__main__":
    app()
