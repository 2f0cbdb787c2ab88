"""Database package for the track catalog and sync audit log."""

from .catalog import TrackCatalog, TransactionError
from .models import (
    Base,
    Playlist,
    PlaylistTrack,
    SyncLog,
    Tag,
    Track,
    TrackTag,
)
from .service import DatabaseService

__all__ = [
    # Models
    "Base",
    "Track",
    "Tag",
    "TrackTag",
    "Playlist",
    "PlaylistTrack",
    "SyncLog",
    # Services
    "DatabaseService",
    "TrackCatalog",
    "TransactionError",
]
