"""Filesystem enumeration for library sync."""

from .scanner import FolderNotFoundError, FolderScanner

__all__ = ["FolderNotFoundError", "FolderScanner"]
