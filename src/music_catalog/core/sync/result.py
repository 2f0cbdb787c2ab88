"""Outcome of one library synchronization run."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict


class SyncStatus(str, Enum):
    """Terminal status of a sync run."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ERROR = "error"
    ALREADY_RUNNING = "already_running"
    FOLDER_NOT_FOUND = "folder_not_found"


@dataclass(frozen=True)
class SyncResult:
    """Immutable summary of a sync run."""

    files_added: int = 0
    files_updated: int = 0
    files_removed: int = 0
    files_skipped: int = 0
    errors: int = 0
    duration_ms: int = 0
    status: SyncStatus = SyncStatus.COMPLETED

    @property
    def total_processed(self) -> int:
        """Files that caused a catalog write. Skips and errors are excluded."""
        return self.files_added + self.files_updated + self.files_removed

    @property
    def is_success(self) -> bool:
        """Whether the run committed."""
        return self.status == SyncStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary format."""
        data = asdict(self)
        data["status"] = self.status.value
        data["total_processed"] = self.total_processed
        return data

    def __str__(self) -> str:
        """String representation of the result."""
        return (
            f"SyncResult(added={self.files_added}, updated={self.files_updated}, "
            f"removed={self.files_removed}, skipped={self.files_skipped}, "
            f"errors={self.errors}, duration={self.duration_ms}ms, "
            f"status='{self.status.value}')"
        )
