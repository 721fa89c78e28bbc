"""Utilities for working with paths inside iPhoto libraries."""

from __future__ import annotations

import posixpath
import unicodedata


def nfc(text: str) -> str:
    """Return *text* in Unicode canonical composition form.

    iPhoto occasionally stores decomposed strings (HFS+ file names are NFD), so
    every piece of text taken from the library goes through this helper before
    it is compared against anything else.
    """

    return unicodedata.normalize("NFC", text)


def to_slash(path: str) -> str:
    """Return *path* using forward slashes as separators."""

    return path.replace("\\", "/")


def normalize_path(path: str) -> str:
    """Return the canonical lookup key for *path*.

    The key uses forward slashes, NFC composition and lower case, and has
    ``.``/``..`` components and redundant separators collapsed.  Applying the
    function to its own output returns the same string.
    """

    # Lower-casing can expose decomposed sequences, so compose once more after.
    key = nfc(nfc(to_slash(path)).lower())
    return posixpath.normpath(key)


def clean_root(prefix: str) -> str:
    """Return *prefix* cleaned for use as a library root, ``""`` for the top level."""

    cleaned = posixpath.normpath(to_slash(prefix)) if prefix else ""
    if cleaned in ("", ".", "/"):
        return ""
    return cleaned
