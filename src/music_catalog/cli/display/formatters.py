"""Display formatters and UI helpers for CLI."""

import logging
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...core.sync import SyncResult, SyncStatus
from ...database.models import SyncLog, Track

console = Console()
logger = logging.getLogger(__name__)

STATUS_STYLES = {
    SyncStatus.COMPLETED.value: "green",
    SyncStatus.CANCELLED.value: "yellow",
    SyncStatus.ALREADY_RUNNING.value: "yellow",
    SyncStatus.ERROR.value: "red",
    SyncStatus.FOLDER_NOT_FOUND.value: "red",
}


def format_duration(duration_ms: Optional[int]) -> str:
    """Format milliseconds as m:ss, or h:mm:ss past one hour."""
    if not duration_ms:
        return "0:00"
    total_seconds = duration_ms // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def _styled_status(status: str) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def display_sync_result(result: SyncResult, folder: str) -> None:
    """Display the outcome of a sync run.

    Args:
        result: Sync result
        folder: Folder that was synchronized
    """
    headline = {
        SyncStatus.COMPLETED: "[bold green]Sync completed successfully[/bold green]",
        SyncStatus.CANCELLED: (
            "[bold yellow]Sync cancelled, catalog left unchanged[/bold yellow]"
        ),
        SyncStatus.ALREADY_RUNNING: (
            "[bold yellow]A sync is already running[/bold yellow]"
        ),
        SyncStatus.FOLDER_NOT_FOUND: (
            f"[bold red]Folder not found: {escape(folder)}[/bold red]"
        ),
        SyncStatus.ERROR: "[bold red]Sync failed, catalog left unchanged[/bold red]",
    }[result.status]
    console.print(f"\n{headline}\n")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan", width=20)
    table.add_column("Value", style="green", justify="right")

    table.add_row("Folder", escape(folder))
    table.add_row("Added", str(result.files_added))
    table.add_row("Updated", str(result.files_updated))
    table.add_row("Removed", str(result.files_removed))
    table.add_row("Unchanged", str(result.files_skipped))
    if result.errors:
        table.add_row("Errors", f"[red]{result.errors}[/red]")
    table.add_row("Duration", f"{result.duration_ms / 1000:.1f}s")
    table.add_row("Status", _styled_status(result.status.value))

    console.print(table)


def display_sync_history(logs: List[SyncLog]) -> None:
    """Display sync audit log rows, newest first."""
    if not logs:
        console.print("[yellow]No sync runs recorded yet[/yellow]")
        return

    table = Table(title="Sync History", show_header=True, header_style="bold magenta")
    table.add_column("Date", style="cyan")
    table.add_column("Folder")
    table.add_column("Added", justify="right")
    table.add_column("Updated", justify="right")
    table.add_column("Removed", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Status")

    for log in logs:
        table.add_row(
            log.sync_date.strftime("%Y-%m-%d %H:%M:%S"),
            escape(log.folder_path),
            str(log.files_added),
            str(log.files_updated),
            str(log.files_removed),
            str(log.files_skipped),
            str(log.errors),
            _styled_status(log.status),
        )

    console.print(table)


def display_tracks(tracks: List[Track], title: str = "Tracks") -> None:
    """Display tracks as a table."""
    if not tracks:
        console.print("[yellow]No tracks found[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Artist", style="cyan")
    table.add_column("Title")
    table.add_column("Album")
    table.add_column("Length", justify="right")
    table.add_column("Rating", justify="right")

    for track in tracks:
        table.add_row(
            str(track.id),
            escape(track.artist or ""),
            escape(track.title or ""),
            escape(track.album or ""),
            format_duration(track.duration),
            "★" * track.rating,
        )

    console.print(table)
    console.print(f"[dim]{len(tracks)} track(s)[/dim]")


def display_name_list(names: List[str], title: str) -> None:
    """Display a single-column list such as artists or albums."""
    if not names:
        console.print(f"[yellow]No {title.lower()} found[/yellow]")
        return

    table = Table(title=title, show_header=False)
    table.add_column(title, style="cyan")
    for name in names:
        table.add_row(escape(name))
    console.print(table)


def display_statistics(stats: Dict[str, Any], last_sync: Optional[SyncLog]) -> None:
    """Display catalog statistics and the most recent sync."""
    table = Table(title="Catalog", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Tracks", str(stats["tracks"]))
    table.add_row("Artists", str(stats["artists"]))
    table.add_row("Albums", str(stats["albums"]))
    table.add_row("Tags", str(stats["tags"]))
    table.add_row("Playlists", str(stats["playlists"]))
    table.add_row("Sync runs", str(stats["sync_runs"]))
    table.add_row("Database", escape(stats["database_path"]))

    if last_sync is not None:
        table.add_row(
            "Last sync",
            f"{last_sync.sync_date:%Y-%m-%d %H:%M} "
            f"({_styled_status(last_sync.status)})",
        )

    console.print(table)
