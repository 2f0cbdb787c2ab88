"""Configuration management for the music catalog application."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from config directory or project root
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    load_dotenv()

DEFAULT_FINGERPRINT_BYTES = 1024 * 1024


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Library settings
        self.library_path = Path(
            os.getenv(
                "MUSIC_CATALOG_LIBRARY_PATH",
                str(Path.home() / "Music"),
            )
        )
        self.fingerprint_bytes = int(
            os.getenv(
                "MUSIC_CATALOG_FINGERPRINT_BYTES", str(DEFAULT_FINGERPRINT_BYTES)
            )
        )

        # Database settings
        default_db_path = str(Path.home() / ".music-catalog" / "library.db")
        self.database_path = Path(
            os.getenv("MUSIC_CATALOG_DATABASE_PATH", default_db_path)
        )

        # Logging settings
        self.log_level = os.getenv("MUSIC_CATALOG_LOG_LEVEL", "INFO").upper()
        log_file = os.getenv("MUSIC_CATALOG_LOG_FILE")
        self.log_file = Path(log_file) if log_file else None

        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """Ensure required directories exist."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


def get_config() -> Config:
    """Get application configuration."""
    return Config()
