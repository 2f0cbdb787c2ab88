"""Folder scanner that enumerates candidate audio files for library sync.

The walk is recursive and never aborts on an unreadable entry: directories
that cannot be listed and broken symlinks are skipped with a debug log.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ...models import AudioFormat

logger = logging.getLogger(__name__)


class FolderNotFoundError(ValueError):
    """Raised when the scan root is missing or is not a directory."""

    def __init__(self, folder: Union[str, Path]) -> None:
        """Initialize with the offending folder."""
        self.folder = str(folder)
        super().__init__(f"Folder not found or not a directory: {self.folder}")


class FolderScanner:
    """Recursively lists files whose extension is a supported audio format."""

    def __init__(self, supported_extensions: Optional[Iterable[str]] = None) -> None:
        """Initialize folder scanner.

        Args:
            supported_extensions: Extensions to accept, with leading dot.
                Defaults to every AudioFormat.
        """
        extensions = supported_extensions or AudioFormat.supported_extensions()
        self.supported_extensions = frozenset(ext.lower() for ext in extensions)

    def scan(self, root: Union[str, Path]) -> List[Path]:
        """Enumerate audio files under root.

        Args:
            root: Directory to walk

        Returns:
            Absolute paths of matching files, in a stable sorted walk order

        Raises:
            FolderNotFoundError: If root does not exist or is not a directory
        """
        root_path = Path(root)
        if not root_path.is_dir():
            raise FolderNotFoundError(root)

        logger.info("Scanning folder: %s", root_path)
        audio_files: List[Path] = []

        for dirpath, dirnames, filenames in os.walk(
            root_path, onerror=self._on_walk_error
        ):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if self.is_candidate(file_path):
                    audio_files.append(Path(os.path.abspath(file_path)))

        logger.info("Found %d audio files in %s", len(audio_files), root_path)
        return audio_files

    def is_candidate(self, file_path: Path) -> bool:
        """Check extension and that the path resolves to a regular file."""
        if file_path.suffix.lower() not in self.supported_extensions:
            return False
        try:
            return file_path.is_file()
        except OSError as e:
            logger.debug("Skipping unreadable entry %s: %s", file_path, e)
            return False

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.debug("Skipping unreadable directory %s: %s", error.filename, error)
