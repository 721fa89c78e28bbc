"""Read Apple iPhoto libraries stored as directories or inside zip archives.

Package structure:
    iphotolib/
    ├── app.py              # open_library entry point
    ├── cli.py              # Command-line interface
    ├── io/                 # Database import and image inspection
    ├── models/             # Photo/Event/Face/Place and the Catalog
    ├── storage/            # Directory and zip archive backends
    └── utils/              # Path normalisation, logging, optional deps
"""

from .app import open_library
from .errors import (
    EntryNotFoundError,
    ImageReadError,
    ImportFailureError,
    IncompleteStoreError,
    IPhotoLibError,
    LibraryNotFoundError,
    MarkerNotFoundError,
    NotALibraryError,
    StagingError,
)
from .models import Catalog, Event, EventKey, Face, FaceKey, LatLon, Photo, PhotoKey, Place, PlaceKey
from .storage import ArchiveBackend, DirectoryBackend, EntryInfo, StorageBackend

__all__ = [
    "open_library",
    # Models
    "Catalog",
    "Event",
    "EventKey",
    "Face",
    "FaceKey",
    "LatLon",
    "Photo",
    "PhotoKey",
    "Place",
    "PlaceKey",
    # Storage
    "ArchiveBackend",
    "DirectoryBackend",
    "EntryInfo",
    "StorageBackend",
    # Errors
    "EntryNotFoundError",
    "ImageReadError",
    "ImportFailureError",
    "IncompleteStoreError",
    "IPhotoLibError",
    "LibraryNotFoundError",
    "MarkerNotFoundError",
    "NotALibraryError",
    "StagingError",
]
