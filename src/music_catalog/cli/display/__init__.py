"""CLI display and formatting utilities."""

from .formatters import (
    display_name_list,
    display_statistics,
    display_sync_history,
    display_sync_result,
    display_tracks,
    format_duration,
)

__all__ = [
    "display_name_list",
    "display_statistics",
    "display_sync_history",
    "display_sync_result",
    "display_tracks",
    "format_duration",
]
