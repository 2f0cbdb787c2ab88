"""Composition root shared by CLI commands."""

import logging
from pathlib import Path
from typing import Optional

from ...config import Config, get_config
from ...core.sync import FingerprintExtractor, LibrarySyncEngine
from ...database import DatabaseService

logger = logging.getLogger(__name__)


class CatalogApp:
    """Builds the database service and sync engine on first use."""

    def __init__(
        self,
        config: Optional[Config] = None,
        database_path: Optional[Path] = None,
    ) -> None:
        """Initialize the application.

        Args:
            config: Application configuration (read from env if None)
            database_path: Override for the configured database file
        """
        self.config = config or get_config()
        if database_path is not None:
            self.config.database_path = database_path
        self._db_service: Optional[DatabaseService] = None
        self._engine: Optional[LibrarySyncEngine] = None

    @property
    def db_service(self) -> DatabaseService:
        """Database service for the configured catalog file."""
        if self._db_service is None:
            self._db_service = DatabaseService(self.config.database_path)
        return self._db_service

    @property
    def engine(self) -> LibrarySyncEngine:
        """Library sync engine over the catalog."""
        if self._engine is None:
            self._engine = LibrarySyncEngine(
                self.db_service,
                extractor=FingerprintExtractor(
                    max_bytes=self.config.fingerprint_bytes
                ),
            )
        return self._engine

    def close(self) -> None:
        """Release the worker thread and database connections."""
        if self._engine is not None:
            self._engine.shutdown()
            self._engine = None
        if self._db_service is not None:
            self._db_service.close()
            self._db_service = None
