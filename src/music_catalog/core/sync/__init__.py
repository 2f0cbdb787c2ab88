"""Library synchronization: fingerprinting, progress reporting, reconciliation."""

from .engine import LibrarySyncEngine
from .fingerprint import FingerprintError, FingerprintExtractor, read_tags
from .progress import (
    CancellationToken,
    ConsoleProgressReporter,
    FileProcessed,
    NullProgressReporter,
    ProgressCallback,
    ProgressEmitter,
    SyncCompleted,
    SyncError,
    SyncEvent,
    SyncStarted,
    TqdmProgressReporter,
    TrackAdded,
    TrackRemoved,
    TrackUpdated,
)
from .result import SyncResult, SyncStatus

__all__ = [
    # Engine
    "LibrarySyncEngine",
    # Extraction
    "FingerprintError",
    "FingerprintExtractor",
    "read_tags",
    # Progress & cancellation
    "CancellationToken",
    "ProgressCallback",
    "ProgressEmitter",
    "NullProgressReporter",
    "ConsoleProgressReporter",
    "TqdmProgressReporter",
    "SyncEvent",
    "SyncStarted",
    "FileProcessed",
    "TrackAdded",
    "TrackUpdated",
    "TrackRemoved",
    "SyncError",
    "SyncCompleted",
    # Result
    "SyncResult",
    "SyncStatus",
]
