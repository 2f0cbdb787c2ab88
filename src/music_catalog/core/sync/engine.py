"""Library synchronization engine.

Reconciles a folder tree of audio files with the track catalog:

1. Scan the folder for candidate files and load every catalog path once.
2. Inside one transaction, fingerprint each file in scan order and insert,
   update or skip its track (mark phase).
3. Delete every catalog track under the folder that was not seen (sweep
   phase), then commit.

Cancellation and any storage failure roll the transaction back, so the
catalog is never observed half-synchronized. Only one run may be active per
engine; a second request is rejected rather than queued.

The "under the folder" test for deletion is a plain string prefix match on
the folder argument as supplied. It is not a canonical-path containment
check, so syncing the same folder through two spellings (trailing
separator, symlink, relative path) can remove too much or too little.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Set, Union

from ...database import DatabaseService, Track, TrackCatalog
from ...models import TrackMetadata
from ..filesystem import FolderNotFoundError, FolderScanner
from .fingerprint import FingerprintExtractor
from .progress import CancellationToken, ProgressCallback, ProgressEmitter
from .result import SyncResult, SyncStatus

logger = logging.getLogger(__name__)


@dataclass
class _RunCounters:
    """Mutable tallies for the run in progress."""

    added: int = 0
    updated: int = 0
    removed: int = 0
    skipped: int = 0
    errors: int = 0

    def freeze(self, status: SyncStatus, duration_ms: int) -> SyncResult:
        return SyncResult(
            files_added=self.added,
            files_updated=self.updated,
            files_removed=self.removed,
            files_skipped=self.skipped,
            errors=self.errors,
            duration_ms=duration_ms,
            status=status,
        )


class LibrarySyncEngine:
    """Synchronizes folders with the track catalog, one run at a time."""

    def __init__(
        self,
        db_service: DatabaseService,
        catalog: Optional[TrackCatalog] = None,
        extractor: Optional[FingerprintExtractor] = None,
        scanner: Optional[FolderScanner] = None,
        record_history: bool = True,
    ) -> None:
        """Initialize the engine.

        Args:
            db_service: Database service, also used for the audit log
            catalog: Transactional track store. Defaults to one over db_service
            extractor: Fingerprint extractor. Defaults to the mutagen reader
            scanner: Folder scanner. Defaults to every supported format
            record_history: Whether to append each run to the sync audit log
        """
        self.db_service = db_service
        self.catalog = catalog or TrackCatalog(db_service)
        self.extractor = extractor or FingerprintExtractor()
        self.scanner = scanner or FolderScanner()
        self.record_history = record_history

        self._run_lock = threading.Lock()
        self._cancellation = CancellationToken()
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="library-sync"
        )

    def __enter__(self) -> "LibrarySyncEngine":
        """Enter context manager."""
        return self

    def __exit__(self, *exc_info: Any) -> None:
        """Shut the worker down on exit."""
        self.shutdown()

    # =========================================================================
    # Public API
    # =========================================================================

    def is_running(self) -> bool:
        """Check if a synchronization is in progress."""
        return self._run_lock.locked()

    def cancel(self) -> None:
        """Request cancellation of the running synchronization.

        The request is observed before the next file is processed. It has no
        effect once the run has committed.
        """
        if self.is_running():
            logger.info("Cancellation requested")
        self._cancellation.cancel()

    def sync(
        self,
        folder_path: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SyncResult:
        """Synchronize a folder with the catalog on the calling thread.

        Args:
            folder_path: Folder to synchronize
            progress_callback: Optional sink for progress events

        Returns:
            The outcome of the run
        """
        if not self._try_begin_run():
            return self._already_running(folder_path)
        try:
            return self._run(str(folder_path), progress_callback)
        finally:
            self._run_lock.release()

    def sync_async(
        self,
        folder_path: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> "Future[SyncResult]":
        """Synchronize a folder on the background worker.

        The single-run guard is taken before submission, so a request made
        while another run is active resolves immediately to
        ``already_running`` instead of waiting in the worker queue.

        Args:
            folder_path: Folder to synchronize
            progress_callback: Optional sink for progress events

        Returns:
            Future resolving to the outcome of the run
        """
        if not self._try_begin_run():
            future: "Future[SyncResult]" = Future()
            future.set_result(self._already_running(folder_path))
            return future

        try:
            return self._executor.submit(
                self._run_and_release, str(folder_path), progress_callback
            )
        except BaseException:
            self._run_lock.release()
            raise

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background worker.

        Args:
            wait: Whether to wait for a submitted run to finish
        """
        self._executor.shutdown(wait=wait)

    # =========================================================================
    # Run lifecycle
    # =========================================================================

    def _try_begin_run(self) -> bool:
        if not self._run_lock.acquire(blocking=False):
            return False
        self._cancellation.reset()
        return True

    def _already_running(self, folder_path: Union[str, Path]) -> SyncResult:
        logger.warning("Sync of %s rejected: a sync is already running", folder_path)
        return SyncResult(status=SyncStatus.ALREADY_RUNNING)

    def _run_and_release(
        self, folder: str, progress_callback: Optional[ProgressCallback]
    ) -> SyncResult:
        try:
            return self._run(folder, progress_callback)
        finally:
            self._run_lock.release()

    def _run(
        self, folder: str, progress_callback: Optional[ProgressCallback]
    ) -> SyncResult:
        """Execute one synchronization run. Caller holds the run lock."""
        emitter = ProgressEmitter(progress_callback)
        counters = _RunCounters()
        started_at = datetime.utcnow()
        start_time = time.monotonic()

        logger.info("Starting library sync of %s", folder)

        try:
            files = self.scanner.scan(folder)
        except FolderNotFoundError as e:
            logger.error("%s", e)
            return self._finish(
                folder,
                counters,
                SyncStatus.FOLDER_NOT_FOUND,
                start_time,
                started_at,
                emitter,
            )

        emitter.started(len(files))
        status = self._reconcile(folder, files, counters, emitter, started_at)
        return self._finish(folder, counters, status, start_time, started_at, emitter)

    def _reconcile(
        self,
        folder: str,
        files: List[Path],
        counters: _RunCounters,
        emitter: ProgressEmitter,
        started_at: datetime,
    ) -> SyncStatus:
        """Apply the add/update/delete diff inside one transaction."""
        total = len(files)
        seen: Set[str] = set()

        try:
            existing_paths = set(self.catalog.find_all_paths())
            self.catalog.begin_transaction()

            for index, file_path in enumerate(files, start=1):
                if self._cancellation.is_cancelled:
                    self.catalog.rollback()
                    logger.info(
                        "Sync of %s cancelled after %d of %d files",
                        folder,
                        index - 1,
                        total,
                    )
                    return SyncStatus.CANCELLED

                path = str(file_path)
                # Unreadable files still exist on disk and must survive the sweep
                seen.add(path)
                emitter.file_processed(index, total, file_path.name)

                try:
                    metadata = self.extractor.extract(file_path)
                except (OSError, ValueError) as e:
                    counters.errors += 1
                    logger.warning("Failed to process %s: %s", path, e)
                    emitter.error(path, str(e))
                    continue

                self._apply_file(path, metadata, counters, emitter)

            for existing_path in sorted(existing_paths):
                if existing_path.startswith(folder) and existing_path not in seen:
                    self.catalog.delete_by_path(existing_path)
                    counters.removed += 1
                    emitter.removed(existing_path)

            self.catalog.commit()
            return SyncStatus.COMPLETED

        except Exception:
            counters.errors += 1
            logger.exception(
                "Library sync of %s started at %s failed; rolling back",
                folder,
                started_at.isoformat(),
            )
            return SyncStatus.ERROR

        finally:
            self.catalog.rollback()

    def _apply_file(
        self,
        path: str,
        metadata: TrackMetadata,
        counters: _RunCounters,
        emitter: ProgressEmitter,
    ) -> None:
        """Insert, update or skip the track for one scanned file."""
        existing = self.catalog.find_by_path(path)

        if existing is None:
            self.catalog.insert(
                Track(
                    path=path,
                    title=metadata.title,
                    artist=metadata.artist,
                    album=metadata.album,
                    duration=metadata.duration_ms,
                    fingerprint=metadata.fingerprint,
                )
            )
            counters.added += 1
            emitter.added(path)
        elif existing.fingerprint != metadata.fingerprint:
            # Rating and tag links belong to the user and are left alone
            existing.title = metadata.title
            existing.artist = metadata.artist
            existing.album = metadata.album
            existing.duration = metadata.duration_ms
            existing.fingerprint = metadata.fingerprint
            self.catalog.update(existing)
            counters.updated += 1
            emitter.updated(path)
        else:
            counters.skipped += 1

    def _finish(
        self,
        folder: str,
        counters: _RunCounters,
        status: SyncStatus,
        start_time: float,
        started_at: datetime,
        emitter: ProgressEmitter,
    ) -> SyncResult:
        """Freeze the result, persist it to the audit log and report it."""
        duration_ms = int((time.monotonic() - start_time) * 1000)
        result = counters.freeze(status, duration_ms)

        logger.info("Library sync of %s finished: %s", folder, result)

        if self.record_history:
            self._record_history(folder, result, started_at)

        emitter.completed(result)
        return result

    def _record_history(
        self, folder: str, result: SyncResult, started_at: datetime
    ) -> None:
        try:
            self.db_service.record_sync(
                folder_path=folder,
                status=result.status.value,
                files_added=result.files_added,
                files_updated=result.files_updated,
                files_removed=result.files_removed,
                files_skipped=result.files_skipped,
                errors=result.errors,
                duration_ms=result.duration_ms,
                sync_date=started_at,
            )
        except Exception as e:
            logger.error("Failed to record sync history for %s: %s", folder, e)
