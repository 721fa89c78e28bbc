"""Custom exception hierarchy for iphotolib."""

from __future__ import annotations


class IPhotoLibError(Exception):
    """Base class for all custom errors raised by iphotolib."""


class LibraryNotFoundError(IPhotoLibError):
    """Raised when the requested library path does not exist."""


class NotALibraryError(IPhotoLibError):
    """Raised when the input is neither a library directory nor a readable archive."""


class MarkerNotFoundError(NotALibraryError):
    """Raised when an archive does not contain a ``Database/apdb`` directory."""


class EntryNotFoundError(IPhotoLibError, FileNotFoundError):
    """Raised when a path cannot be found in a storage backend."""


class IncompleteStoreError(IPhotoLibError):
    """Raised when one or more of the embedded database files are missing."""


class StagingError(IPhotoLibError):
    """Raised when the embedded databases cannot be copied to a staging directory."""


class ImportFailureError(IPhotoLibError):
    """Raised when reading the embedded databases fails."""


class ImageReadError(IPhotoLibError):
    """Raised when a master image cannot be inspected."""
