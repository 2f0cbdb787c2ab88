"""CLI command modules."""

from .app import CatalogApp
from .history import history_command, prune_history_command
from .library import (
    albums_command,
    artists_command,
    rate_command,
    search_command,
    stats_command,
)
from .sync import sync_command

__all__ = [
    "CatalogApp",
    "sync_command",
    "history_command",
    "prune_history_command",
    "stats_command",
    "search_command",
    "artists_command",
    "albums_command",
    "rate_command",
]
