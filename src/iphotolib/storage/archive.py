"""Storage backend for libraries packed inside a zip archive.

A zipped library may sit at any depth inside the archive (for example
``Backups/iPhoto Library/Database/apdb``), so the library root is discovered
by searching the entry list for the ``Database/apdb`` marker.  Lookups are
case-insensitive and Unicode-normalised because archives created on macOS
frequently disagree with the database about both.
"""

from __future__ import annotations

import re
import stat
import zipfile
from datetime import datetime
from typing import BinaryIO, Dict, Iterable, Iterator, Tuple

from ..config import APDB_PATH, SYMLINK_READ_LIMIT
from ..errors import EntryNotFoundError, MarkerNotFoundError
from ..utils.logging import get_logger
from ..utils.pathutils import clean_root, normalize_path, to_slash
from .base import EntryInfo, StorageBackend

LOGGER = get_logger()

# The marker must span whole path components: ``XDatabase/apdb`` is no match.
_MARKER_RE = re.compile(r"(?:^|/)" + re.escape(APDB_PATH) + r"(?:/|$)")


def find_store_root(names: Iterable[str]) -> str:
    """Return the library root prefix within an archive's entry *names*.

    The first entry containing the marker decides the root.  An empty string
    means the library sits at the top level of the archive.
    """

    for name in names:
        path = to_slash(name)
        match = _MARKER_RE.search(path)
        if match is None:
            continue
        start = match.start()
        if path[start] == "/":
            start += 1
        return clean_root(path[:start])
    raise MarkerNotFoundError(f"Cannot find '{APDB_PATH}' within archive")


def _root_prefix(root: str) -> str:
    if not root:
        return ""
    return normalize_path(root) + "/"


def build_archive_index(
    infos: Iterable[zipfile.ZipInfo], root: str
) -> Dict[str, zipfile.ZipInfo]:
    """Map normalised root-relative paths to archive entries.

    Entries outside *root* are ignored.  When two entries normalise to the same
    key the later one replaces the earlier one and a warning is logged.
    """

    prefix = _root_prefix(root)
    index: Dict[str, zipfile.ZipInfo] = {}
    for info in infos:
        key = normalize_path(info.filename)
        if not key.startswith(prefix):
            continue
        key = key[len(prefix):]
        if key in ("", "."):
            continue
        previous = index.get(key)
        if previous is not None and previous.filename != info.filename:
            LOGGER.warning(
                "Archive entries %r and %r share lookup key %r; using the latter",
                previous.filename,
                info.filename,
                key,
            )
        index[key] = info
    return index


def _entry_info(info: zipfile.ZipInfo) -> EntryInfo:
    name = to_slash(info.filename).rstrip("/").rsplit("/", 1)[-1]
    try:
        modified = datetime(*info.date_time)
    except ValueError:
        modified = None
    return EntryInfo(
        name=name,
        size=info.file_size,
        is_dir=info.is_dir(),
        modified=modified,
    )


def is_symlink(info: zipfile.ZipInfo) -> bool:
    """Return ``True`` when *info* carries a Unix symlink mode."""

    return stat.S_ISLNK(info.external_attr >> 16)


def iter_symlinks(zip_file: zipfile.ZipFile) -> Iterator[Tuple[str, str]]:
    """Yield ``(name, target)`` for every symlink entry stored in *zip_file*."""

    for info in zip_file.infolist():
        if not is_symlink(info):
            continue
        with zip_file.open(info) as handle:
            target = handle.read(SYMLINK_READ_LIMIT)
        yield info.filename, target.decode("utf-8", errors="replace")


class ArchiveBackend(StorageBackend):
    """Serve library files straight out of an open :class:`zipfile.ZipFile`.

    The backend takes ownership of *zip_file* and closes it in :meth:`close`.
    """

    def __init__(self, zip_file: zipfile.ZipFile, root: str):
        self.root = root
        self._zip = zip_file
        self._index = build_archive_index(zip_file.infolist(), root)
        self._closed = False

    def _lookup(self, rel: str) -> zipfile.ZipInfo:
        info = self._index.get(normalize_path(rel))
        if info is None:
            raise EntryNotFoundError(f"No such file in archive: {rel}")
        return info

    def stat(self, rel: str) -> EntryInfo:
        return _entry_info(self._lookup(rel))

    def open(self, rel: str) -> BinaryIO:
        return self._zip.open(self._lookup(rel))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._zip.close()

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"ArchiveBackend({self._zip.filename!r}, root={self.root!r})"
