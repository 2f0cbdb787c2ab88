"""Value models shared across the catalog."""

from .models import AudioFormat, TrackMetadata

__all__ = ["AudioFormat", "TrackMetadata"]
