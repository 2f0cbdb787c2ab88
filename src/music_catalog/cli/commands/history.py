"""Sync audit log commands."""

from datetime import datetime, timedelta

import click
from rich.console import Console

from ..display import display_sync_history
from .app import CatalogApp

console = Console()


@click.command("history")
@click.option(
    "--limit",
    "-n",
    default=10,
    show_default=True,
    type=click.IntRange(min=1),
    help="Number of runs to show",
)
@click.pass_obj
def history_command(app: CatalogApp, limit: int) -> None:
    """Show the most recent sync runs."""
    logs = app.db_service.get_recent_sync_logs(limit)
    display_sync_history(logs)


@click.command("prune-history")
@click.option(
    "--days",
    required=True,
    type=click.IntRange(min=0),
    help="Delete runs older than this many days",
)
@click.pass_obj
def prune_history_command(app: CatalogApp, days: int) -> None:
    """Delete old entries from the sync history."""
    cutoff = datetime.utcnow() - timedelta(days=days)
    deleted = app.db_service.delete_sync_logs_older_than(cutoff)
    console.print(f"[green]Deleted {deleted} sync history entries[/green]")
