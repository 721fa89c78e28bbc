"""Locate the embedded databases and make them available to sqlite.

sqlite can only open real files, so for zipped libraries the three database
files are copied to a private staging directory that lives exactly as long as
the import reading from it.
"""

from __future__ import annotations

import shutil
import tempfile
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

from ..config import APDB_PATH, STAGING_DIR_PREFIX, STORE_FILES
from ..errors import IncompleteStoreError, StagingError
from ..utils.logging import get_logger
from ..utils.pathutils import to_slash

LOGGER = get_logger()


def _missing_message(found: set[str]) -> str:
    missing = [name for name in STORE_FILES if name not in found]
    return f"Library database is incomplete, missing: {', '.join(missing)}"


def find_store_entries(zip_file: zipfile.ZipFile, root: str) -> Dict[str, zipfile.ZipInfo]:
    """Return the archive entries of the three database files under *root*.

    Names must match exactly, directly below ``<root>/Database/apdb/``.
    """

    prefix = f"{root}/{APDB_PATH}/" if root else f"{APDB_PATH}/"
    entries: Dict[str, zipfile.ZipInfo] = {}
    for info in zip_file.infolist():
        name = to_slash(info.filename)
        if not name.startswith(prefix):
            continue
        if name[len(prefix):] in STORE_FILES:
            entries[name[len(prefix):]] = info
    if len(entries) != len(STORE_FILES):
        raise IncompleteStoreError(_missing_message(set(entries)))
    return entries


def check_store_dir(store_dir: Path) -> Path:
    """Ensure all database files exist in *store_dir* and return it."""

    found = {name for name in STORE_FILES if (store_dir / name).is_file()}
    if len(found) != len(STORE_FILES):
        raise IncompleteStoreError(_missing_message(found))
    return store_dir


def _extract(zip_file: zipfile.ZipFile, info: zipfile.ZipInfo, dest: Path) -> None:
    with zip_file.open(info) as source, dest.open("wb") as target:
        shutil.copyfileobj(source, target)


@contextmanager
def staged_store(zip_file: zipfile.ZipFile, root: str) -> Iterator[Path]:
    """Copy the database files of a zipped library to a temporary directory.

    The directory is yielded to the caller and removed again when the block
    exits, whether or not the block raised.
    """

    entries = find_store_entries(zip_file, root)
    try:
        staging = Path(tempfile.mkdtemp(prefix=STAGING_DIR_PREFIX))
    except OSError as exc:
        raise StagingError(f"Cannot create staging directory: {exc}") from exc
    LOGGER.debug("Staging library database in %s", staging)
    try:
        for name, info in entries.items():
            try:
                _extract(zip_file, info, staging / name)
            except (OSError, zipfile.BadZipFile) as exc:
                raise StagingError(f"Cannot extract {info.filename}: {exc}") from exc
        yield staging
    finally:
        shutil.rmtree(staging, ignore_errors=True)
        LOGGER.debug("Removed staging directory %s", staging)
