"""Music Catalog.

Keeps a SQLite catalog of local audio files in step with the folders they live
in. Provides folder scanning, fingerprint-based change detection and a
transactional library synchronization engine.
"""

__version__ = "1.0.0"
__author__ = "Anton"
__email__ = ""

from .config import Config
from .core.sync import LibrarySyncEngine, SyncResult, SyncStatus
from .database import DatabaseService, TrackCatalog

__all__ = [
    "Config",
    "DatabaseService",
    "LibrarySyncEngine",
    "SyncResult",
    "SyncStatus",
    "TrackCatalog",
]
