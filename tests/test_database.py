"""Tests for database models, service and the transactional track catalog."""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import select

from music_catalog.database import (
    DatabaseService,
    Playlist,
    PlaylistTrack,
    Tag,
    Track,
    TrackCatalog,
    TrackTag,
    TransactionError,
)
from music_catalog.database.models import clamp_rating


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as temp_dir:
        db_path = Path(temp_dir) / "test.db"
        db_service = DatabaseService(db_path)
        yield db_service
        db_service.close()


def add_track(
    db_service: DatabaseService,
    path: str,
    title: str = "Song",
    artist: str = "Artist",
    album: str = "Album",
    fingerprint: str = "abc",
) -> Track:
    """Insert a track directly through a session."""
    with db_service.get_session() as session:
        track = Track(
            path=path,
            title=title,
            artist=artist,
            album=album,
            duration=1000,
            fingerprint=fingerprint,
        )
        session.add(track)
        session.commit()
        return track


class TestDatabaseModels:
    """Test database models."""

    def test_track_model_creation(self):
        """Test Track model creation."""
        track = Track(
            path="/music/a.mp3",
            title="Test Track",
            artist="Test Artist",
            fingerprint="deadbeef",
        )
        assert track.path == "/music/a.mp3"
        assert track.title == "Test Track"
        assert "a.mp3" in repr(track)

    def test_clamp_rating(self):
        """Test rating clamping to 0-5."""
        assert clamp_rating(-3) == 0
        assert clamp_rating(3) == 3
        assert clamp_rating(9) == 5


class TestDatabaseService:
    """Test database service operations."""

    def test_init_db(self, temp_db):
        """Test database initialization."""
        assert temp_db.db_path.exists()
        assert temp_db.is_initialized()
        stats = temp_db.get_statistics()
        assert stats["tracks"] == 0
        assert stats["sync_runs"] == 0

    def test_init_on_empty_file(self, tmp_path):
        """Test that an existing zero-byte file still gets a schema."""
        db_path = tmp_path / "empty.db"
        db_path.touch()
        db_service = DatabaseService(db_path)
        try:
            assert db_service.is_initialized()
        finally:
            db_service.close()

    def test_get_track_by_path(self, temp_db):
        """Test retrieving a track by path."""
        created = add_track(temp_db, "/music/a.mp3")

        track = temp_db.get_track_by_path("/music/a.mp3")
        assert track is not None
        assert track.id == created.id
        assert temp_db.get_track_by_path("/music/missing.mp3") is None

    def test_get_track_by_id(self, temp_db):
        """Test retrieving a track by ID."""
        created = add_track(temp_db, "/music/a.mp3")
        assert temp_db.get_track_by_id(created.id).path == "/music/a.mp3"
        assert temp_db.get_track_by_id(9999) is None

    def test_get_all_paths(self, temp_db):
        """Test listing all catalog paths."""
        add_track(temp_db, "/music/a.mp3")
        add_track(temp_db, "/music/b.mp3")
        assert sorted(temp_db.get_all_paths()) == ["/music/a.mp3", "/music/b.mp3"]

    def test_search_tracks(self, temp_db):
        """Test substring search over title, artist and album."""
        add_track(temp_db, "/m/1.mp3", title="Around the World", artist="Daft Punk")
        add_track(temp_db, "/m/2.mp3", title="Teardrop", artist="Massive Attack")
        add_track(temp_db, "/m/3.mp3", title="Other", album="Punk Anthology")

        results = temp_db.search_tracks("punk")
        assert {t.path for t in results} == {"/m/1.mp3", "/m/3.mp3"}

    def test_get_tracks_by_artist_and_album(self, temp_db):
        """Test filtering by artist and album."""
        add_track(temp_db, "/m/1.mp3", title="B", artist="X", album="One")
        add_track(temp_db, "/m/2.mp3", title="A", artist="X", album="One")
        add_track(temp_db, "/m/3.mp3", title="C", artist="Y", album="Two")

        by_artist = temp_db.get_tracks_by_artist("X")
        assert [t.title for t in by_artist] == ["A", "B"]
        assert len(temp_db.get_tracks_by_album("Two")) == 1

    def test_distinct_artists_and_albums(self, temp_db):
        """Test distinct artist and album listings skip nulls."""
        add_track(temp_db, "/m/1.mp3", artist="Beta", album="Zeta")
        add_track(temp_db, "/m/2.mp3", artist="Alpha", album="Zeta")
        add_track(temp_db, "/m/3.mp3", artist="Alpha", album=None)

        assert temp_db.get_all_artists() == ["Alpha", "Beta"]
        assert temp_db.get_all_albums() == ["Zeta"]

    def test_count_tracks(self, temp_db):
        """Test counting tracks."""
        assert temp_db.count_tracks() == 0
        add_track(temp_db, "/m/1.mp3")
        assert temp_db.count_tracks() == 1

    def test_update_rating_clamps(self, temp_db):
        """Test updating a rating clamps it to 0-5."""
        track = add_track(temp_db, "/m/1.mp3")

        updated = temp_db.update_rating(track.id, 7)
        assert updated.rating == 5
        assert temp_db.get_track_by_id(track.id).rating == 5

    def test_update_rating_missing_track(self, temp_db):
        """Test updating the rating of an unknown track."""
        with pytest.raises(ValueError, match="Track not found"):
            temp_db.update_rating(12345, 3)


class TestSyncLog:
    """Test sync audit log operations."""

    def test_record_sync(self, temp_db):
        """Test recording a sync run."""
        entry = temp_db.record_sync(
            "/music",
            status="completed",
            files_added=3,
            files_skipped=2,
            duration_ms=150,
        )
        assert entry.id is not None

        stored = temp_db.get_sync_log_by_id(entry.id)
        assert stored.folder_path == "/music"
        assert stored.files_added == 3
        assert stored.files_skipped == 2
        assert stored.status == "completed"

    def test_recent_and_last_logs(self, temp_db):
        """Test newest-first ordering of audit rows."""
        now = datetime.utcnow()
        temp_db.record_sync("/a", "completed", sync_date=now - timedelta(hours=2))
        temp_db.record_sync("/b", "cancelled", sync_date=now - timedelta(hours=1))
        temp_db.record_sync("/c", "error", sync_date=now)

        recent = temp_db.get_recent_sync_logs(limit=2)
        assert [log.folder_path for log in recent] == ["/c", "/b"]
        assert temp_db.get_last_sync_log().folder_path == "/c"
        assert len(temp_db.get_all_sync_logs()) == 3

    def test_last_log_empty(self, temp_db):
        """Test last log when nothing was recorded."""
        assert temp_db.get_last_sync_log() is None

    def test_delete_older_than(self, temp_db):
        """Test pruning old audit rows."""
        now = datetime.utcnow()
        temp_db.record_sync("/old", "completed", sync_date=now - timedelta(days=40))
        temp_db.record_sync("/new", "completed", sync_date=now)

        deleted = temp_db.delete_sync_logs_older_than(now - timedelta(days=30))

        assert deleted == 1
        assert [log.folder_path for log in temp_db.get_all_sync_logs()] == ["/new"]


class TestTrackCatalog:
    """Test the transactional track catalog."""

    def test_write_requires_transaction(self, temp_db):
        """Test that writes outside a transaction are rejected."""
        catalog = TrackCatalog(temp_db)
        with pytest.raises(TransactionError):
            catalog.insert(Track(path="/m/a.mp3", fingerprint="x"))
        with pytest.raises(TransactionError):
            catalog.delete_by_path("/m/a.mp3")

    def test_nested_transaction_rejected(self, temp_db):
        """Test that a second begin is rejected."""
        catalog = TrackCatalog(temp_db)
        catalog.begin_transaction()
        try:
            with pytest.raises(TransactionError):
                catalog.begin_transaction()
        finally:
            catalog.rollback()

    def test_commit_persists(self, temp_db):
        """Test that committed inserts are visible."""
        catalog = TrackCatalog(temp_db)
        catalog.begin_transaction()
        catalog.insert(Track(path="/m/a.mp3", title="A", fingerprint="x"))
        catalog.commit()

        assert not catalog.in_transaction
        assert temp_db.get_all_paths() == ["/m/a.mp3"]
        stored = temp_db.get_track_by_path("/m/a.mp3")
        assert stored.created_at is not None
        assert stored.rating == 0

    def test_rollback_discards(self, temp_db):
        """Test that rolled back writes are not visible."""
        add_track(temp_db, "/m/keep.mp3")
        catalog = TrackCatalog(temp_db)

        catalog.begin_transaction()
        catalog.insert(Track(path="/m/new.mp3", fingerprint="x"))
        catalog.delete_by_path("/m/keep.mp3")
        assert sorted(catalog.find_all_paths()) == ["/m/new.mp3"]
        catalog.rollback()

        assert temp_db.get_all_paths() == ["/m/keep.mp3"]

    def test_rollback_without_transaction_is_noop(self, temp_db):
        """Test rollback when no transaction is open."""
        TrackCatalog(temp_db).rollback()

    def test_update_changes_fields(self, temp_db):
        """Test updating a track inside a transaction."""
        add_track(temp_db, "/m/a.mp3", title="Old", fingerprint="1")
        catalog = TrackCatalog(temp_db)

        catalog.begin_transaction()
        track = catalog.find_by_path("/m/a.mp3")
        track.title = "New"
        track.fingerprint = "2"
        catalog.update(track)
        catalog.commit()

        stored = temp_db.get_track_by_path("/m/a.mp3")
        assert stored.title == "New"
        assert stored.fingerprint == "2"

    def test_find_by_path_outside_transaction(self, temp_db):
        """Test lookups fall back to a fresh session."""
        add_track(temp_db, "/m/a.mp3")
        catalog = TrackCatalog(temp_db)
        assert catalog.find_by_path("/m/a.mp3") is not None
        assert catalog.find_all_paths() == ["/m/a.mp3"]

    def test_delete_cascades_associations(self, temp_db):
        """Test deleting a track removes its tag and playlist links."""
        track = add_track(temp_db, "/m/a.mp3")
        with temp_db.get_session() as session:
            tag = Tag(name="favourite")
            playlist = Playlist(name="Road trip")
            session.add_all([tag, playlist])
            session.flush()
            session.add(TrackTag(track_id=track.id, tag_id=tag.id))
            session.add(
                PlaylistTrack(playlist_id=playlist.id, track_id=track.id, position=0)
            )
            session.commit()

        catalog = TrackCatalog(temp_db)
        catalog.begin_transaction()
        assert catalog.delete_by_path("/m/a.mp3") is True
        assert catalog.delete_by_path("/m/missing.mp3") is False
        catalog.commit()

        with temp_db.get_session() as session:
            assert session.scalars(select(TrackTag)).all() == []
            assert session.scalars(select(PlaylistTrack)).all() == []
            assert len(session.scalars(select(Tag)).all()) == 1
            assert len(session.scalars(select(Playlist)).all()) == 1
