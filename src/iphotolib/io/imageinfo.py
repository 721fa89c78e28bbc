"""Pixel dimension probing for master images."""

from __future__ import annotations

from typing import BinaryIO, Tuple

from ..errors import ImageReadError
from ..utils.deps import load_pillow


def read_image_size(stream: BinaryIO) -> Tuple[int, int]:
    """Return ``(width, height)`` of the image in *stream*.

    Only the header is decoded, which is enough for Pillow to report the size.
    """

    pillow = load_pillow()
    if pillow is None:
        raise ImageReadError("Pillow is not available")
    try:
        with pillow.Image.open(stream) as image:
            return image.size
    except (pillow.UnidentifiedImageError, OSError) as exc:
        raise ImageReadError(f"Cannot read image: {exc}") from exc
