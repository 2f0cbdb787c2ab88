"""Data models for the music catalog application."""

from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator


class AudioFormat(str, Enum):
    """Audio containers the catalog recognises, keyed by file extension."""

    MP3 = "mp3"
    FLAC = "flac"
    OGG = "ogg"
    WAV = "wav"
    M4A = "m4a"
    AAC = "aac"
    WMA = "wma"
    AIFF = "aiff"
    AIF = "aif"
    OPUS = "opus"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> Optional["AudioFormat"]:
        """Detect the format from the last extension of a file name.

        Args:
            path: File path or bare file name

        Returns:
            Matching AudioFormat, or None when the extension is unsupported
        """
        suffix = Path(path).suffix.lower().lstrip(".")
        if not suffix:
            return None
        try:
            return cls(suffix)
        except ValueError:
            return None

    @classmethod
    def supported_extensions(cls) -> List[str]:
        """Return all supported extensions with a leading dot."""
        return [f".{fmt.value}" for fmt in cls]

    @classmethod
    def is_supported(cls, path: Union[str, Path]) -> bool:
        """Check if a file name carries a supported audio extension."""
        return cls.from_path(path) is not None


class TrackMetadata(BaseModel):
    """Fingerprint and descriptive fields extracted from one audio file."""

    model_config = ConfigDict(frozen=True)

    fingerprint: str
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    duration_ms: int = 0

    @field_validator("duration_ms")
    @classmethod
    def clamp_duration(cls, v: int) -> int:
        """Negative durations from broken headers are stored as zero."""
        return max(0, v)

    @field_validator("title", "artist", "album")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat whitespace-only tag values as missing."""
        if v is None:
            return None
        v = v.strip()
        return v or None
