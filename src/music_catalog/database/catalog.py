"""Transactional track store used by library synchronization.

All writes made between ``begin_transaction`` and ``commit`` share one
session, so a rollback leaves the catalog exactly as it was.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .models import Track
from .service import DatabaseService

logger = logging.getLogger(__name__)


class TransactionError(RuntimeError):
    """Raised when a write is attempted outside an open transaction."""

    pass


class TrackCatalog:
    """Path-keyed access to the tracks table with explicit transactions."""

    def __init__(self, db_service: DatabaseService) -> None:
        """Initialize the catalog.

        Args:
            db_service: Database service providing sessions
        """
        self.db_service = db_service
        self._session: Optional[Session] = None

    @property
    def in_transaction(self) -> bool:
        """Whether a transaction is currently open."""
        return self._session is not None

    def begin_transaction(self) -> None:
        """Open the session every following write will share."""
        if self._session is not None:
            raise TransactionError("A transaction is already open")
        self._session = self.db_service.get_session()
        logger.debug("Catalog transaction opened")

    def commit(self) -> None:
        """Commit and close the open transaction."""
        session = self._require_session()
        try:
            session.commit()
            logger.debug("Catalog transaction committed")
        finally:
            session.close()
            self._session = None

    def rollback(self) -> None:
        """Discard the open transaction. A no-op when none is open."""
        if self._session is None:
            return
        try:
            self._session.rollback()
            logger.debug("Catalog transaction rolled back")
        finally:
            self._session.close()
            self._session = None

    def find_all_paths(self) -> List[str]:
        """Return the path of every track in the catalog."""
        if self._session is not None:
            return list(self._session.scalars(select(Track.path)).all())
        return self.db_service.get_all_paths()

    def find_by_path(self, path: str) -> Optional[Track]:
        """Look up a track by its absolute path."""
        if self._session is not None:
            return self._session.scalar(select(Track).where(Track.path == path))
        return self.db_service.get_track_by_path(path)

    def insert(self, track: Track) -> Track:
        """Add a new track to the open transaction."""
        session = self._require_session()
        now = datetime.utcnow()
        track.created_at = track.created_at or now
        track.updated_at = now
        session.add(track)
        session.flush()
        return track

    def update(self, track: Track) -> Track:
        """Write pending changes of a track loaded in this transaction."""
        session = self._require_session()
        track.updated_at = datetime.utcnow()
        session.add(track)
        session.flush()
        return track

    def delete_by_path(self, path: str) -> bool:
        """Delete the track stored under a path.

        Tag and playlist associations are removed by the database cascade.

        Returns:
            True if a row was deleted
        """
        session = self._require_session()
        result = session.execute(delete(Track).where(Track.path == path))
        return bool(result.rowcount)

    def _require_session(self) -> Session:
        if self._session is None:
            raise TransactionError("No open transaction; call begin_transaction()")
        return self._session
