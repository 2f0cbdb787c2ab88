"""Basic tests for configuration and logging setup."""

import logging
from contextlib import contextmanager
from pathlib import Path

from music_catalog.config import DEFAULT_FINGERPRINT_BYTES, Config
from music_catalog.utils.logging_config import (
    ColoredFormatter,
    configure_third_party_loggers,
    set_log_level,
    setup_logging,
)


@contextmanager
def preserved_root_logger():
    """Restore root logger handlers and level on exit."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    try:
        yield root_logger
    finally:
        for handler in root_logger.handlers:
            if handler not in handlers:
                handler.close()
        root_logger.handlers[:] = handlers
        root_logger.setLevel(level)


class TestConfig:
    """Test configuration management."""

    def test_config_defaults(self, tmp_path, monkeypatch):
        """Test that config can be created with defaults."""
        monkeypatch.setenv("MUSIC_CATALOG_DATABASE_PATH", str(tmp_path / "c.db"))
        monkeypatch.delenv("MUSIC_CATALOG_FINGERPRINT_BYTES", raising=False)
        monkeypatch.delenv("MUSIC_CATALOG_LOG_LEVEL", raising=False)
        monkeypatch.delenv("MUSIC_CATALOG_LOG_FILE", raising=False)

        config = Config()

        assert config.fingerprint_bytes == DEFAULT_FINGERPRINT_BYTES == 1048576
        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_config_from_environment(self, tmp_path, monkeypatch):
        """Test environment variables override defaults."""
        db_path = tmp_path / "nested" / "catalog.db"
        monkeypatch.setenv("MUSIC_CATALOG_DATABASE_PATH", str(db_path))
        monkeypatch.setenv("MUSIC_CATALOG_LIBRARY_PATH", str(tmp_path / "music"))
        monkeypatch.setenv("MUSIC_CATALOG_FINGERPRINT_BYTES", "4096")
        monkeypatch.setenv("MUSIC_CATALOG_LOG_LEVEL", "debug")
        monkeypatch.setenv("MUSIC_CATALOG_LOG_FILE", str(tmp_path / "sync.log"))

        config = Config()

        assert config.database_path == db_path
        assert config.library_path == tmp_path / "music"
        assert config.fingerprint_bytes == 4096
        assert config.log_level == "DEBUG"
        assert config.log_file == tmp_path / "sync.log"
        assert db_path.parent.is_dir()


class TestLogging:
    """Test logging configuration."""

    def test_setup_logging_console_and_file(self, tmp_path):
        """Test handlers are installed for console and file output."""
        log_file = tmp_path / "logs" / "catalog.log"

        with preserved_root_logger() as root_logger:
            setup_logging(log_level="WARNING", log_file=log_file)

            assert root_logger.level == logging.WARNING
            assert len(root_logger.handlers) == 2
            logging.getLogger("music_catalog.test").warning("written to file")
            for handler in root_logger.handlers:
                handler.flush()

        assert "written to file" in log_file.read_text()

    def test_setup_logging_without_console(self):
        """Test disabling console output."""
        with preserved_root_logger() as root_logger:
            setup_logging(log_level="INFO", console_output=False)
            assert root_logger.handlers == []

    def test_colored_formatter_restores_levelname(self):
        """Test the formatter leaves the record unchanged."""
        formatter = ColoredFormatter(fmt="%(levelname)s %(location)s %(message)s")
        record = logging.LogRecord(
            "music_catalog", logging.ERROR, str(Path("engine.py")), 10, "boom", None, None
        )

        text = formatter.format(record)

        assert "\033[31m" in text
        assert "engine.py:10" in text
        assert record.levelname == "ERROR"

    def test_set_log_level_only_touches_app_loggers(self):
        """Test third-party loggers stay quiet."""
        app_logger = logging.getLogger("music_catalog.core")
        configure_third_party_loggers()

        with preserved_root_logger():
            set_log_level("DEBUG")

            assert app_logger.level == logging.DEBUG
            assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
            assert logging.getLogger("mutagen").level == logging.WARNING

        app_logger.setLevel(logging.NOTSET)
