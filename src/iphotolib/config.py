"""Layout and format constants for iPhoto libraries."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Final

# Directory holding the embedded sqlite databases, relative to the library root.
APDB_PATH: Final[str] = "Database/apdb"
STORE_FILES: Final[tuple[str, str, str]] = ("Library.apdb", "Properties.apdb", "Faces.db")
# Schema aliases used when the store files are attached to one session.
STORE_ALIASES: Final[dict[str, str]] = {
    "Library.apdb": "L",
    "Properties.apdb": "P",
    "Faces.db": "F",
}

MASTERS_DIR: Final[str] = "Masters"
THUMBNAILS_DIR: Final[str] = "Thumbnails"

# iPhoto stores timestamps as seconds since 2001-01-01 00:00 UTC.
APPLE_EPOCH_OFFSET: Final[int] = 978307200
APPLE_EPOCH: Final[datetime] = datetime(2001, 1, 1, tzinfo=timezone.utc)

IPTC_CAPTION_KEY: Final[str] = "Caption/Abstract"

STAGING_DIR_PREFIX: Final[str] = "iphoto"

# Symlink entries in zip archives carry their target as file content.
SYMLINK_READ_LIMIT: Final[int] = 4096
