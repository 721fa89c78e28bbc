"""Command-line interface for inspecting iPhoto libraries."""

from __future__ import annotations

import argparse
import sys
import zipfile
from typing import Callable, Optional, Sequence

from .app import open_library
from .errors import IPhotoLibError
from .io.imageinfo import read_image_size
from .models.catalog import Catalog
from .models.types import Photo
from .storage.archive import iter_symlinks
from .utils.logging import get_logger

LOGGER = get_logger()


def stats(path: str) -> None:
    """Print the number of photos, events, faces and places in a library."""

    with open_library(path) as catalog:
        print(f"{path}:")
        print(f"  Photos: {len(catalog.photos)}")
        print(f"  Events: {len(catalog.events)}")
        print(f"  Faces:  {len(catalog.faces)}")
        print(f"  Places: {len(catalog.places)}")


def _print_photo_size(catalog: Catalog, photo: Photo) -> None:
    try:
        with catalog.open_photo(photo) as stream:
            width, height = read_image_size(stream)
    except IPhotoLibError as exc:
        LOGGER.error("%s: %s", photo.path, exc)
        return
    print(f"{photo.path} {width} x {height}")


def list_photos(path: str) -> None:
    """Print every photo of a library with its pixel dimensions."""

    with open_library(path) as catalog:
        for photo in catalog.iter_photos():
            _print_photo_size(catalog, photo)


def show_links(path: str) -> None:
    """Print the symlink entries stored in a zip archive."""

    try:
        with zipfile.ZipFile(path) as zip_file:
            for name, target in iter_symlinks(zip_file):
                print(f"{name} -> {target}")
    except (zipfile.BadZipFile, OSError) as exc:
        raise IPhotoLibError(f"Cannot read archive {path}: {exc}") from exc


_COMMANDS: dict[str, Callable[[str], None]] = {
    "stats": stats,
    "list": list_photos,
    "links": show_links,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iphotolib",
        description="Inspect iPhoto libraries stored as folders or zip archives.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_stats = sub.add_parser("stats", help="Show item counts for each library")
    p_stats.add_argument("paths", nargs="+", help="Library folders or zip files")

    p_list = sub.add_parser("list", help="List photos with their pixel dimensions")
    p_list.add_argument("paths", nargs="+", help="Library folders or zip files")

    p_links = sub.add_parser("links", help="List symlinks stored in zip archives")
    p_links.add_argument("paths", nargs="+", help="Zip files")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return the exit code.

    Each path is processed independently; failures are reported and the
    remaining paths are still handled.
    """

    args = build_parser().parse_args(argv)
    command = _COMMANDS[args.command]
    status = 0
    for path in args.paths:
        try:
            command(path)
        except IPhotoLibError as exc:
            LOGGER.error("%s: %s", path, exc)
            status = 1
    return status


if __name__ == "__main__":  # pragma: no cover - manual launch
    sys.exit(main())
