"""Fingerprint and tag extraction for library synchronization.

A fingerprint is the MD5 digest of at most the first ``max_bytes`` of a file.
It is only a change-detection token: equal fingerprints mean "assume
unchanged", anything else triggers a re-extract. Tag rewrites land in the
header bytes, so the prefix catches them without reading whole files.
"""

import hashlib
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from mutagen import File as MutagenFile

from ...config import DEFAULT_FINGERPRINT_BYTES
from ...models import TrackMetadata

logger = logging.getLogger(__name__)

HASH_BUFFER_SIZE = 8192

TagReader = Callable[[Path], Dict[str, Any]]


class FingerprintError(OSError):
    """Raised when the bytes of a file cannot be read for fingerprinting."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        """Initialize with the offending path and reason."""
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot fingerprint {self.path}: {reason}")


def _first_tag_value(tags: Any, key: str) -> Optional[str]:
    """Return the first value of an easy-tag list, or None."""
    values = tags.get(key)
    if not values:
        return None
    if isinstance(values, (list, tuple)):
        values = values[0]
    return str(values)


def read_tags(file_path: Path) -> Dict[str, Any]:
    """Read title, artist, album and duration with mutagen.

    Args:
        file_path: Audio file to read

    Returns:
        Dictionary with any of ``title``, ``artist``, ``album``,
        ``duration_ms``. Empty when mutagen does not recognise the container.

    Raises:
        mutagen.MutagenError: If the container is recognised but corrupt
        OSError: If the file cannot be opened
    """
    audio_file = MutagenFile(file_path, easy=True)
    if audio_file is None:
        return {}

    result: Dict[str, Any] = {}
    tags = audio_file.tags
    if tags is not None:
        for key in ("title", "artist", "album"):
            value = _first_tag_value(tags, key)
            if value is not None:
                result[key] = value

    info = getattr(audio_file, "info", None)
    length = getattr(info, "length", None)
    if length:
        result["duration_ms"] = int(round(length * 1000))

    return result


class FingerprintExtractor:
    """Computes a bounded-prefix fingerprint plus descriptive tag fields."""

    def __init__(
        self,
        tag_reader: Optional[TagReader] = None,
        max_bytes: int = DEFAULT_FINGERPRINT_BYTES,
    ) -> None:
        """Initialize extractor.

        Args:
            tag_reader: Callable returning tag fields for a path.
                Defaults to the mutagen-backed ``read_tags``.
            max_bytes: Number of leading bytes hashed per file
        """
        if max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        self.tag_reader = tag_reader or read_tags
        self.max_bytes = max_bytes

    def extract(self, file_path: Union[str, Path]) -> TrackMetadata:
        """Fingerprint a file and read its tags.

        A tag-reading failure never propagates, and neither do tag values
        that cannot be coerced. The result then falls back to the file stem
        as title and empty values for everything else. A blank title also
        falls back to the stem.

        Args:
            file_path: Audio file to process

        Returns:
            TrackMetadata for the file

        Raises:
            FingerprintError: If the file bytes cannot be read
        """
        path = Path(file_path)
        fingerprint = self.compute_fingerprint(path)

        try:
            tags = self.tag_reader(path) or {}
        except Exception as e:
            logger.warning("Cannot read metadata for %s: %s", path, e)
            tags = {}

        try:
            return self._build_metadata(fingerprint, path, tags)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Ignoring unusable metadata for %s: %s", path, e)
            return self._build_metadata(fingerprint, path, {})

    @staticmethod
    def _build_metadata(
        fingerprint: str, path: Path, tags: Dict[str, Any]
    ) -> TrackMetadata:
        title = tags.get("title")
        if isinstance(title, str):
            title = title.strip()
        return TrackMetadata(
            fingerprint=fingerprint,
            title=title or path.stem,
            artist=tags.get("artist"),
            album=tags.get("album"),
            duration_ms=int(tags.get("duration_ms") or 0),
        )

    def compute_fingerprint(self, file_path: Path) -> str:
        """Hash at most ``max_bytes`` from the start of the file.

        Raises:
            FingerprintError: If the file cannot be opened or read
        """
        digest = hashlib.md5(usedforsecurity=False)
        remaining = self.max_bytes
        try:
            with open(file_path, "rb") as f:
                while remaining > 0:
                    chunk = f.read(min(HASH_BUFFER_SIZE, remaining))
                    if not chunk:
                        break
                    digest.update(chunk)
                    remaining -= len(chunk)
        except OSError as e:
            raise FingerprintError(file_path, e.strerror or str(e)) from e
        return digest.hexdigest()
