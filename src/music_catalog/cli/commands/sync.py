"""Library sync command."""

import logging
import os
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ...core.sync import (
    ConsoleProgressReporter,
    NullProgressReporter,
    ProgressCallback,
    SyncStatus,
    TqdmProgressReporter,
)
from ..display import display_sync_result
from .app import CatalogApp

console = Console()
logger = logging.getLogger(__name__)


def setup_progress_reporter(progress: bool, verbose: bool) -> ProgressCallback:
    """Pick a progress reporter for the requested output style.

    Args:
        progress: Whether to show a progress bar
        verbose: Whether to list every added, updated and removed file

    Returns:
        Progress callback for the sync engine
    """
    if verbose:
        return ConsoleProgressReporter(verbose=True)
    if progress:
        return TqdmProgressReporter()
    return NullProgressReporter()


@click.command("sync")
@click.argument(
    "folder",
    required=False,
    type=click.Path(file_okay=False, path_type=Path),
)
@click.option(
    "--progress/--no-progress",
    default=True,
    help="Show a progress bar",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="List every added, updated and removed file",
)
@click.pass_obj
def sync_command(
    app: CatalogApp, folder: Optional[Path], progress: bool, verbose: bool
) -> None:
    """Synchronize FOLDER with the catalog.

    New files are added, changed files are re-read and files that no longer
    exist are removed. Ratings and tags of unchanged tracks are kept.
    Press Ctrl+C to cancel; a cancelled sync leaves the catalog untouched.

    FOLDER defaults to MUSIC_CATALOG_LIBRARY_PATH.
    """
    # Normalized like stored track paths; symlinks are left unresolved
    target = Path(os.path.abspath(folder or app.config.library_path))
    reporter = setup_progress_reporter(progress, verbose)

    future = app.engine.sync_async(target, reporter)
    try:
        result = future.result()
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelling sync...[/yellow]")
        app.engine.cancel()
        result = future.result()

    display_sync_result(result, str(target))

    if result.status in (SyncStatus.ERROR, SyncStatus.FOLDER_NOT_FOUND):
        raise click.exceptions.Exit(1)
