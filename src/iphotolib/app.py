"""High-level entry point for opening iPhoto libraries."""

from __future__ import annotations

import os
import zipfile
from pathlib import Path
from typing import Union

from .config import APDB_PATH
from .errors import LibraryNotFoundError, NotALibraryError
from .io.importer import read_library_db
from .models.catalog import Catalog
from .storage.archive import ArchiveBackend, find_store_root
from .storage.base import StorageBackend
from .storage.directory import DirectoryBackend
from .storage.extract import check_store_dir, staged_store
from .utils.logging import get_logger

LOGGER = get_logger()


def open_library(path: Union[str, os.PathLike]) -> Catalog:
    """Read the library at *path* and return its :class:`Catalog`.

    *path* is either an iPhoto library directory or a zip archive containing
    one at any depth.  All data is imported eagerly; the returned catalog keeps
    the underlying storage open until it is closed.
    """

    root = Path(path)
    if not root.exists():
        raise LibraryNotFoundError(f"Library does not exist: {root}")
    if root.is_dir():
        return _open_directory(root)
    return _open_archive(root)


def _open_directory(root: Path) -> Catalog:
    LOGGER.debug("Opening library directory %s", root)
    store_dir = check_store_dir(root / APDB_PATH)
    records = read_library_db(store_dir)
    return Catalog(records, DirectoryBackend(root))


def _open_archive(path: Path) -> Catalog:
    LOGGER.debug("Opening library archive %s", path)
    try:
        zip_file = zipfile.ZipFile(path)
    except (zipfile.BadZipFile, OSError) as exc:
        raise NotALibraryError(f"Not a library directory or zip archive: {path}") from exc

    backend: StorageBackend | None = None
    try:
        root = find_store_root(zip_file.namelist())
        LOGGER.info("Found library root %r in %s", root or "/", path)
        backend = ArchiveBackend(zip_file, root)
        with staged_store(zip_file, root) as store_dir:
            records = read_library_db(store_dir)
        return Catalog(records, backend)
    except BaseException:
        if backend is not None:
            backend.close()
        else:
            zip_file.close()
        raise
