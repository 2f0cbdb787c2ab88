"""Progress events and cooperative cancellation for library sync.

Every event is delivered synchronously on the thread running the sync. A
caller that drives a UI must hand events over to its own thread.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from rich.console import Console
from rich.markup import escape
from tqdm import tqdm  # type: ignore[import-untyped]

from .result import SyncResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncStarted:
    """Scan finished; ``total_files`` candidates will be processed."""

    total_files: int


@dataclass(frozen=True)
class FileProcessed:
    """The file at 1-based ``current`` of ``total`` is being processed."""

    current: int
    total: int
    file_name: str

    @property
    def percentage(self) -> float:
        """Calculate progress percentage."""
        if self.total == 0:
            return 0.0
        return (self.current / self.total) * 100.0


@dataclass(frozen=True)
class TrackAdded:
    """A new track was inserted for ``path``."""

    path: str


@dataclass(frozen=True)
class TrackUpdated:
    """The track at ``path`` changed fingerprint and was re-extracted."""

    path: str


@dataclass(frozen=True)
class TrackRemoved:
    """The track at ``path`` disappeared from disk and was deleted."""

    path: str


@dataclass(frozen=True)
class SyncError:
    """Processing ``path`` failed with ``message``."""

    path: str
    message: str


@dataclass(frozen=True)
class SyncCompleted:
    """The run reached a terminal state."""

    result: SyncResult


SyncEvent = Union[
    SyncStarted,
    FileProcessed,
    TrackAdded,
    TrackUpdated,
    TrackRemoved,
    SyncError,
    SyncCompleted,
]

# Type alias for progress callback function
ProgressCallback = Callable[[SyncEvent], None]


class NullProgressReporter:
    """Progress sink that ignores every event."""

    def __call__(self, event: SyncEvent) -> None:
        """Discard the event."""
        return None


class ProgressEmitter:
    """Delivers typed events to a callback, isolating callback failures."""

    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        """Initialize emitter.

        Args:
            callback: Function to call with each event
        """
        self.callback: ProgressCallback = callback or NullProgressReporter()

    def emit(self, event: SyncEvent) -> None:
        """Send an event to the callback."""
        try:
            self.callback(event)
        except Exception as e:
            logger.error("Error in progress callback for %s: %s", event, e)

    def started(self, total_files: int) -> None:
        """Report the number of files about to be processed."""
        self.emit(SyncStarted(total_files))

    def file_processed(self, current: int, total: int, file_name: str) -> None:
        """Report the file being processed."""
        self.emit(FileProcessed(current, total, file_name))

    def added(self, path: str) -> None:
        """Report an inserted track."""
        self.emit(TrackAdded(path))

    def updated(self, path: str) -> None:
        """Report an updated track."""
        self.emit(TrackUpdated(path))

    def removed(self, path: str) -> None:
        """Report a deleted track."""
        self.emit(TrackRemoved(path))

    def error(self, path: str, message: str) -> None:
        """Report a per-file failure."""
        self.emit(SyncError(path, message))

    def completed(self, result: SyncResult) -> None:
        """Report the terminal outcome."""
        self.emit(SyncCompleted(result))


class CancellationToken:
    """Thread-safe cancellation flag polled once per file by the engine.

    Cancellation cannot interrupt the read of a single file, so the worst-case
    latency is the time to fingerprint and tag one file.
    """

    def __init__(self) -> None:
        """Initialize an unset token."""
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    def reset(self) -> None:
        """Clear a previous request."""
        self._event.clear()

    @property
    def is_cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()


class ConsoleProgressReporter:
    """Rich console progress reporter."""

    def __init__(self, verbose: bool = False, console: Optional[Console] = None):
        """Initialize console reporter.

        Args:
            verbose: Whether to print every processed file
            console: Console to write to
        """
        self.verbose = verbose
        self.console = console or Console(stderr=True)

    def __call__(self, event: SyncEvent) -> None:
        """Handle a progress event."""
        if isinstance(event, SyncStarted):
            self.console.print(
                f"[bold cyan]Synchronizing {event.total_files} files[/bold cyan]"
            )
        elif isinstance(event, FileProcessed):
            if self.verbose:
                self.console.print(
                    f"  [{event.current}/{event.total}] "
                    f"({event.percentage:.1f}%) {event.file_name}",
                    markup=False,
                )
        elif isinstance(event, TrackAdded):
            if self.verbose:
                self.console.print(f"  [green]+[/green] {escape(event.path)}")
        elif isinstance(event, TrackUpdated):
            if self.verbose:
                self.console.print(f"  [yellow]~[/yellow] {escape(event.path)}")
        elif isinstance(event, TrackRemoved):
            if self.verbose:
                self.console.print(f"  [red]-[/red] {escape(event.path)}")
        elif isinstance(event, SyncError):
            self.console.print(
                f"  [red]Error:[/red] {escape(event.path)}: {escape(event.message)}"
            )
        elif isinstance(event, SyncCompleted):
            self.console.print(f"[bold]Finished:[/bold] {event.result.status.value}")


class TqdmProgressReporter:
    """Progress reporter using a tqdm bar over the per-file loop."""

    def __init__(self, **tqdm_kwargs: Any) -> None:
        """Initialize tqdm reporter.

        Args:
            **tqdm_kwargs: Extra arguments forwarded to ``tqdm``
        """
        self._tqdm_kwargs: Dict[str, Any] = {"unit": "file", "desc": "sync"}
        self._tqdm_kwargs.update(tqdm_kwargs)
        self._bar: Any = None
        self.error_count = 0

    def __call__(self, event: SyncEvent) -> None:
        """Handle a progress event."""
        if isinstance(event, SyncStarted):
            self.close()
            self._bar = tqdm(total=event.total_files, **self._tqdm_kwargs)
        elif isinstance(event, FileProcessed) and self._bar is not None:
            self._bar.n = event.current
            self._bar.set_postfix_str(event.file_name)
            self._bar.refresh()
        elif isinstance(event, SyncError):
            self.error_count += 1
            if self._bar is not None:
                self._bar.write(f"Error: {event.path}: {event.message}")
        elif isinstance(event, SyncCompleted):
            self.close()

    def close(self) -> None:
        """Close the progress bar if one is open."""
        if self._bar is not None:
            self._bar.close()
            self._bar = None
