"""Utilities for optional third-party dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional


@dataclass(frozen=True)
class PillowSupport:
    """Container exposing Pillow objects when the library is available."""

    Image: Any
    UnidentifiedImageError: Any


@lru_cache(maxsize=1)
def load_pillow() -> Optional[PillowSupport]:
    """Return Pillow helpers when the dependency can be imported.

    Pillow is only needed to read the pixel dimensions of master images, so the
    catalog itself stays usable when it is missing or broken.  HEIC support is
    registered when ``pillow-heif`` happens to be installed.
    """

    try:
        from PIL import Image, UnidentifiedImageError
    except ImportError:  # pragma: no cover - optional dependency missing
        return None

    try:  # pragma: no cover - pillow-heif optional
        from pillow_heif import register_heif_opener
    except ImportError:  # pragma: no cover - pillow-heif not installed
        pass
    else:
        register_heif_opener()

    return PillowSupport(
        Image=Image,
        UnidentifiedImageError=UnidentifiedImageError,
    )
