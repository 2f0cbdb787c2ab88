"""SQLAlchemy database models for the music catalog."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

MIN_RATING = 0
MAX_RATING = 5


def clamp_rating(rating: int) -> int:
    """Clamp a user rating into the 0-5 range."""
    return max(MIN_RATING, min(MAX_RATING, rating))


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Track(Base):
    """A local audio file known to the catalog, keyed by absolute path."""

    __tablename__ = "tracks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    path: Mapped[str] = mapped_column(Text, unique=True, nullable=False)

    # Descriptive metadata read from tags
    title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    artist: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    album: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    duration: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )  # milliseconds

    # Change-detection token, digest of the file's leading bytes
    fingerprint: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # User-owned, never written by library sync
    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    track_tags: Mapped[List["TrackTag"]] = relationship(
        "TrackTag",
        back_populates="track",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    playlist_tracks: Mapped[List["PlaylistTrack"]] = relationship(
        "PlaylistTrack",
        back_populates="track",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_tracks_artist", "artist"),
        Index("idx_tracks_album", "album"),
    )

    def __repr__(self) -> str:
        """String representation of Track."""
        return f"<Track(id={self.id}, path='{self.path}', title='{self.title}')>"


class Tag(Base):
    """A user-defined label that can be attached to tracks."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    color: Mapped[str] = mapped_column(String(16), nullable=False, default="#808080")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    track_tags: Mapped[List["TrackTag"]] = relationship(
        "TrackTag",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        """String representation of Tag."""
        return f"<Tag(id={self.id}, name='{self.name}')>"


class TrackTag(Base):
    """Many-to-many relationship between tracks and tags."""

    __tablename__ = "track_tags"

    track_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tracks.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    track: Mapped["Track"] = relationship("Track", back_populates="track_tags")
    tag: Mapped["Tag"] = relationship("Tag", back_populates="track_tags")

    def __repr__(self) -> str:
        """String representation of TrackTag."""
        return f"<TrackTag(track_id={self.track_id}, tag_id={self.tag_id})>"


class Playlist(Base):
    """A named, ordered collection of tracks."""

    __tablename__ = "playlists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(500), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    playlist_tracks: Mapped[List["PlaylistTrack"]] = relationship(
        "PlaylistTrack",
        back_populates="playlist",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        """String representation of Playlist."""
        return f"<Playlist(id={self.id}, name='{self.name}')>"


class PlaylistTrack(Base):
    """Many-to-many relationship between playlists and tracks."""

    __tablename__ = "playlist_tracks"

    playlist_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True
    )
    track_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tracks.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    playlist: Mapped["Playlist"] = relationship(
        "Playlist", back_populates="playlist_tracks"
    )
    track: Mapped["Track"] = relationship("Track", back_populates="playlist_tracks")

    __table_args__ = (Index("idx_playlist_position", "playlist_id", "position"),)

    def __repr__(self) -> str:
        """String representation of PlaylistTrack."""
        return (
            f"<PlaylistTrack(playlist_id={self.playlist_id}, "
            f"track_id={self.track_id}, position={self.position})>"
        )


class SyncLog(Base):
    """Audit record of one library synchronization run."""

    __tablename__ = "sync_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sync_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )
    folder_path: Mapped[str] = mapped_column(Text, nullable=False)

    files_added: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    files_updated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    files_removed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    files_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    errors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # completed, cancelled, error, folder_not_found

    def __repr__(self) -> str:
        """String representation of SyncLog."""
        return (
            f"<SyncLog(id={self.id}, folder='{self.folder_path}', "
            f"status='{self.status}', sync_date='{self.sync_date}')>"
        )
