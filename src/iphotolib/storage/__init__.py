"""Storage backends giving uniform access to directory and zipped libraries."""

from .archive import ArchiveBackend, build_archive_index, find_store_root, iter_symlinks
from .base import EntryInfo, StorageBackend
from .directory import DirectoryBackend
from .extract import check_store_dir, find_store_entries, staged_store

__all__ = [
    "ArchiveBackend",
    "DirectoryBackend",
    "EntryInfo",
    "StorageBackend",
    "build_archive_index",
    "check_store_dir",
    "find_store_entries",
    "find_store_root",
    "iter_symlinks",
    "staged_store",
]
