"""Database service for the music catalog and its sync audit log."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, delete, event, func, inspect, or_, select
from sqlalchemy.orm import Session, sessionmaker

from .models import Base, Playlist, SyncLog, Tag, Track, clamp_rating

logger = logging.getLogger(__name__)


class DatabaseService:
    """Service for database operations and transaction management."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """Initialize database service.

        Args:
            db_path: Path to SQLite database file.
                    If None, uses default ~/.music-catalog/library.db
        """
        if db_path is None:
            db_path = Path.home() / ".music-catalog" / "library.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        db_exists = self.db_path.exists() and self.db_path.stat().st_size > 0

        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        self._enable_sqlite_foreign_keys()

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

        logger.info("Database initialized at: %s", self.db_path)

        if not db_exists:
            logger.info("New database detected, initializing schema...")
            self.init_db()

    def _enable_sqlite_foreign_keys(self) -> None:
        """Enable foreign key constraints on every SQLite connection.

        Deleting a track relies on ON DELETE CASCADE to drop its tag and
        playlist associations, which SQLite ignores unless asked.
        """

        @event.listens_for(self.engine, "connect")
        def set_sqlite_pragma(dbapi_conn: Any, _connection_record: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    def init_db(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema created successfully")

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            SQLAlchemy Session object

        Note:
            Caller is responsible for closing the session
        """
        return self.SessionLocal()

    def is_initialized(self) -> bool:
        """Check whether the catalog tables exist and are reachable."""
        try:
            inspector = inspect(self.engine)
            if not (inspector.has_table("tracks") and inspector.has_table("sync_log")):
                logger.debug("Required tables missing")
                return False

            with self.SessionLocal() as session:
                session.execute(select(1))
            return True
        except Exception as e:
            logger.debug("Database initialization check failed: %s", e)
            return False

    # =========================================================================
    # Track Operations
    # =========================================================================

    def get_track_by_id(self, track_id: int) -> Optional[Track]:
        """Get track by database ID.

        Args:
            track_id: Track database ID

        Returns:
            Track object or None if not found
        """
        with self.get_session() as session:
            return session.get(Track, track_id)

    def get_track_by_path(self, path: str) -> Optional[Track]:
        """Get track by its absolute file path."""
        with self.get_session() as session:
            return session.scalar(select(Track).where(Track.path == path))

    def get_all_tracks(self) -> List[Track]:
        """Get all tracks ordered by artist, album and title."""
        with self.get_session() as session:
            stmt = select(Track).order_by(Track.artist, Track.album, Track.title)
            return list(session.scalars(stmt).all())

    def get_all_paths(self) -> List[str]:
        """Get the file path of every track in the catalog."""
        with self.get_session() as session:
            return list(session.scalars(select(Track.path)).all())

    def search_tracks(self, query: str) -> List[Track]:
        """Search title, artist and album for a substring.

        Args:
            query: Text to search for

        Returns:
            Matching tracks ordered by artist, album, title
        """
        pattern = f"%{query}%"
        with self.get_session() as session:
            stmt = (
                select(Track)
                .where(
                    or_(
                        Track.title.like(pattern),
                        Track.artist.like(pattern),
                        Track.album.like(pattern),
                    )
                )
                .order_by(Track.artist, Track.album, Track.title)
            )
            return list(session.scalars(stmt).all())

    def get_tracks_by_artist(self, artist: str) -> List[Track]:
        """Get all tracks of an artist ordered by album and title."""
        with self.get_session() as session:
            stmt = (
                select(Track)
                .where(Track.artist == artist)
                .order_by(Track.album, Track.title)
            )
            return list(session.scalars(stmt).all())

    def get_tracks_by_album(self, album: str) -> List[Track]:
        """Get all tracks of an album ordered by title."""
        with self.get_session() as session:
            stmt = select(Track).where(Track.album == album).order_by(Track.title)
            return list(session.scalars(stmt).all())

    def get_all_artists(self) -> List[str]:
        """Get the distinct, non-null artist names in alphabetical order."""
        with self.get_session() as session:
            stmt = (
                select(Track.artist)
                .where(Track.artist.is_not(None))
                .distinct()
                .order_by(Track.artist)
            )
            return list(session.scalars(stmt).all())

    def get_all_albums(self) -> List[str]:
        """Get the distinct, non-null album names in alphabetical order."""
        with self.get_session() as session:
            stmt = (
                select(Track.album)
                .where(Track.album.is_not(None))
                .distinct()
                .order_by(Track.album)
            )
            return list(session.scalars(stmt).all())

    def count_tracks(self) -> int:
        """Count the tracks in the catalog."""
        with self.get_session() as session:
            return session.scalar(select(func.count()).select_from(Track)) or 0

    def update_rating(self, track_id: int, rating: int) -> Track:
        """Set the user rating of a track.

        Args:
            track_id: Track database ID
            rating: New rating, clamped to 0-5

        Returns:
            Updated Track object

        Raises:
            ValueError: If the track does not exist
        """
        with self.get_session() as session:
            track = session.get(Track, track_id)
            if not track:
                raise ValueError(f"Track not found: {track_id}")

            track.rating = clamp_rating(rating)
            track.updated_at = datetime.utcnow()
            session.commit()
            logger.debug("Updated rating of track %s to %s", track.id, track.rating)
            return track

    # =========================================================================
    # Sync Audit Log
    # =========================================================================

    def record_sync(
        self,
        folder_path: str,
        status: str,
        files_added: int = 0,
        files_updated: int = 0,
        files_removed: int = 0,
        files_skipped: int = 0,
        errors: int = 0,
        duration_ms: int = 0,
        sync_date: Optional[datetime] = None,
    ) -> SyncLog:
        """Append one row to the sync audit log.

        Args:
            folder_path: Folder as supplied to the sync run
            status: Terminal status of the run
            files_added: Number of tracks inserted
            files_updated: Number of tracks re-extracted
            files_removed: Number of tracks deleted
            files_skipped: Number of unchanged files
            errors: Number of per-file or storage errors
            duration_ms: Wall-clock run time
            sync_date: When the run started (defaults to now)

        Returns:
            The persisted SyncLog row
        """
        with self.get_session() as session:
            entry = SyncLog(
                folder_path=folder_path,
                status=status,
                files_added=files_added,
                files_updated=files_updated,
                files_removed=files_removed,
                files_skipped=files_skipped,
                errors=errors,
                duration_ms=duration_ms,
                sync_date=sync_date or datetime.utcnow(),
            )
            session.add(entry)
            session.commit()
            logger.debug("Recorded sync log %s for %s", entry.id, folder_path)
            return entry

    def get_sync_log_by_id(self, log_id: int) -> Optional[SyncLog]:
        """Get a sync log row by ID."""
        with self.get_session() as session:
            return session.get(SyncLog, log_id)

    def get_last_sync_log(self) -> Optional[SyncLog]:
        """Get the most recent sync log row."""
        with self.get_session() as session:
            stmt = (
                select(SyncLog)
                .order_by(SyncLog.sync_date.desc(), SyncLog.id.desc())
                .limit(1)
            )
            return session.scalar(stmt)

    def get_recent_sync_logs(self, limit: int = 10) -> List[SyncLog]:
        """Get the newest sync log rows, newest first."""
        with self.get_session() as session:
            stmt = (
                select(SyncLog)
                .order_by(SyncLog.sync_date.desc(), SyncLog.id.desc())
                .limit(limit)
            )
            return list(session.scalars(stmt).all())

    def get_all_sync_logs(self) -> List[SyncLog]:
        """Get every sync log row, newest first."""
        with self.get_session() as session:
            stmt = select(SyncLog).order_by(SyncLog.sync_date.desc(), SyncLog.id.desc())
            return list(session.scalars(stmt).all())

    def delete_sync_logs_older_than(self, cutoff: datetime) -> int:
        """Delete sync log rows dated before the cutoff.

        Returns:
            Number of rows deleted
        """
        with self.get_session() as session:
            result = session.execute(delete(SyncLog).where(SyncLog.sync_date < cutoff))
            session.commit()
            deleted = result.rowcount or 0
            logger.info("Deleted %d sync log entries older than %s", deleted, cutoff)
            return deleted

    # =========================================================================
    # Maintenance
    # =========================================================================

    def get_statistics(self) -> Dict[str, Any]:
        """Get database statistics.

        Returns:
            Dictionary with statistics
        """
        with self.get_session() as session:
            return {
                "tracks": session.scalar(select(func.count()).select_from(Track)),
                "artists": session.scalar(
                    select(func.count(func.distinct(Track.artist)))
                ),
                "albums": session.scalar(
                    select(func.count(func.distinct(Track.album)))
                ),
                "tags": session.scalar(select(func.count()).select_from(Tag)),
                "playlists": session.scalar(
                    select(func.count()).select_from(Playlist)
                ),
                "sync_runs": session.scalar(select(func.count()).select_from(SyncLog)),
                "database_path": str(self.db_path),
            }

    def close(self) -> None:
        """Close database connection."""
        if hasattr(self, "engine"):
            self.engine.dispose()
            logger.info("Database connection closed")
