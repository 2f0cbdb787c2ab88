"""Command-line interface for the music catalog application.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import (
    CatalogApp,
    albums_command,
    artists_command,
    history_command,
    prune_history_command,
    rate_command,
    search_command,
    stats_command,
    sync_command,
)


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level (defaults to MUSIC_CATALOG_LOG_LEVEL)",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.option(
    "--database",
    "database_path",
    type=click.Path(dir_okay=False),
    help="Catalog database file (defaults to MUSIC_CATALOG_DATABASE_PATH)",
)
@click.pass_context
def cli(
    ctx: Any,
    log_level: Optional[str],
    log_file: Optional[str],
    database_path: Optional[str],
) -> None:
    """Music Catalog.

    Keeps a local catalog of your audio files in sync with the folders they
    live in.
    """
    app = CatalogApp(database_path=Path(database_path) if database_path else None)

    setup_logging(
        log_level=log_level or app.config.log_level,
        log_file=Path(log_file) if log_file else app.config.log_file,
    )
    configure_third_party_loggers()

    ctx.obj = app
    ctx.call_on_close(app.close)


cli.add_command(sync_command)
cli.add_command(history_command)
cli.add_command(prune_history_command)
cli.add_command(stats_command)
cli.add_command(search_command)
cli.add_command(artists_command)
cli.add_command(albums_command)
cli.add_command(rate_command)


if __name__ == "__main__":
    cli()
