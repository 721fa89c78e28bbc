"""Storage backend for libraries stored as plain directories."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from ..errors import EntryNotFoundError
from .base import EntryInfo, StorageBackend


class DirectoryBackend(StorageBackend):
    """Resolve library paths below a base directory on the native filesystem.

    Paths are passed through unchanged; case and Unicode handling is left to
    the filesystem itself.
    """

    def __init__(self, base: Path):
        self.base = Path(base)

    def _resolve(self, rel: str) -> Path:
        return self.base / rel

    def stat(self, rel: str) -> EntryInfo:
        path = self._resolve(rel)
        try:
            info = path.stat()
        except FileNotFoundError as exc:
            raise EntryNotFoundError(f"No such file in library: {rel}") from exc
        return EntryInfo(
            name=path.name,
            size=info.st_size,
            is_dir=path.is_dir(),
            modified=datetime.fromtimestamp(info.st_mtime),
        )

    def open(self, rel: str) -> BinaryIO:
        try:
            return self._resolve(rel).open("rb")
        except FileNotFoundError as exc:
            raise EntryNotFoundError(f"No such file in library: {rel}") from exc

    def close(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"DirectoryBackend({str(self.base)!r})"
