"""Catalog browsing commands."""

import click
from rich.console import Console
from rich.markup import escape

from ...database.models import MAX_RATING, MIN_RATING
from ..display import display_name_list, display_statistics, display_tracks
from .app import CatalogApp

console = Console()


@click.command("stats")
@click.pass_obj
def stats_command(app: CatalogApp) -> None:
    """Show catalog statistics and the last sync."""
    display_statistics(
        app.db_service.get_statistics(), app.db_service.get_last_sync_log()
    )


@click.command("search")
@click.argument("query")
@click.pass_obj
def search_command(app: CatalogApp, query: str) -> None:
    """Search track titles, artists and albums for QUERY."""
    tracks = app.db_service.search_tracks(query)
    display_tracks(tracks, title=f"Tracks matching '{query}'")


@click.command("artists")
@click.pass_obj
def artists_command(app: CatalogApp) -> None:
    """List every artist in the catalog."""
    display_name_list(app.db_service.get_all_artists(), "Artists")


@click.command("albums")
@click.pass_obj
def albums_command(app: CatalogApp) -> None:
    """List every album in the catalog."""
    display_name_list(app.db_service.get_all_albums(), "Albums")


@click.command("rate")
@click.argument("track_id", type=int)
@click.argument("rating", type=click.IntRange(MIN_RATING, MAX_RATING))
@click.pass_obj
def rate_command(app: CatalogApp, track_id: int, rating: int) -> None:
    """Set the RATING (0-5) of track TRACK_ID."""
    try:
        track = app.db_service.update_rating(track_id, rating)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    console.print(
        f"[green]Rated[/green] {escape(track.title or track.path)}: {track.rating}/5"
    )
