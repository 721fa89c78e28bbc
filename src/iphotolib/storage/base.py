"""Common interface implemented by every library storage backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Optional


@dataclass(slots=True, frozen=True)
class EntryInfo:
    """Size and kind information about a file inside a library."""

    name: str
    size: int
    is_dir: bool
    modified: Optional[datetime]


class StorageBackend(ABC):
    """Read-only access to the files of an iPhoto library.

    Paths are relative to the library root and use forward slashes.  Backends
    never change state after construction, so :meth:`stat` and :meth:`open`
    may be called from several threads at once.
    """

    @abstractmethod
    def stat(self, rel: str) -> EntryInfo:
        """Return information about *rel* or raise :class:`EntryNotFoundError`."""

    @abstractmethod
    def open(self, rel: str) -> BinaryIO:
        """Open *rel* for binary reading.  The caller must close the stream."""

    @abstractmethod
    def close(self) -> None:
        """Release backend resources.  Calling it again has no effect."""

    def __enter__(self) -> "StorageBackend":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
