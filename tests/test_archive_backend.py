from __future__ import annotations

import logging
import zipfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from iphotolib.errors import EntryNotFoundError, MarkerNotFoundError
from iphotolib.storage.archive import (
    ArchiveBackend,
    build_archive_index,
    find_store_root,
    iter_symlinks,
)


@pytest.mark.parametrize(
    ("names", "expected"),
    [
        (["Database/apdb/Library.apdb"], ""),
        (["MyLibrary/Database/apdb/Library.apdb"], "MyLibrary"),
        (["a/b/c/My Library/Database/apdb/"], "a/b/c/My Library"),
        (["Photos/Database/apdb"], "Photos"),
        (["readme.txt", "Lib/Masters/x.jpg", "Lib/Database/apdb/Faces.db"], "Lib"),
        (["XDatabase/apdb/Library.apdb", "Real/Database/apdb/Library.apdb"], "Real"),
    ],
)
def test_find_store_root(names: list[str], expected: str) -> None:
    assert find_store_root(names) == expected


@pytest.mark.parametrize(
    "names",
    [
        [],
        ["XDatabase/apdb/Library.apdb"],
        ["Lib/Database/apdbX/Library.apdb"],
        ["Lib/MyDatabase/apdb/Library.apdb", "Lib/Masters/IMG.JPG"],
        ["Lib/database/APDB/Library.apdb"],
    ],
)
def test_find_store_root_rejects_partial_components(names: list[str]) -> None:
    with pytest.raises(MarkerNotFoundError):
        find_store_root(names)


def test_find_store_root_accepts_backslashes() -> None:
    assert find_store_root(["Backup\\Lib\\Database\\apdb\\Library.apdb"]) == "Backup/Lib"


def _infos(*names: str) -> list[zipfile.ZipInfo]:
    return [zipfile.ZipInfo(name) for name in names]


def test_build_archive_index_strips_root_and_normalises() -> None:
    index = build_archive_index(
        _infos(
            "My Library/Masters/2020/IMG_0001.JPG",
            "My Library/Thumbnails/Café.jpg",
            "Other/Masters/ignored.jpg",
            "My Library/",
        ),
        "My Library",
    )
    assert set(index) == {"masters/2020/img_0001.jpg", "thumbnails/café.jpg"}
    assert index["masters/2020/img_0001.jpg"].filename == "My Library/Masters/2020/IMG_0001.JPG"


def test_build_archive_index_later_duplicate_wins(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="iphotolib")
    index = build_archive_index(_infos("Lib/IMG.JPG", "Lib/img.jpg"), "Lib")
    assert index["img.jpg"].filename == "Lib/img.jpg"
    assert "share lookup key" in caplog.text


def _write_zip(path: Path, entries: dict[str, bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as zip_file:
        for name, data in entries.items():
            zip_file.writestr(name, data)
    return path


def test_archive_backend_lookups_ignore_case(tmp_path: Path) -> None:
    archive = _write_zip(
        tmp_path / "lib.zip",
        {
            "MyLibrary/Database/apdb/Library.apdb": b"db",
            "MyLibrary/Masters/2020/IMG.JPG": b"jpeg-bytes",
        },
    )
    backend = ArchiveBackend(zipfile.ZipFile(archive), "MyLibrary")
    try:
        info = backend.stat("masters/2020/img.jpg")
        assert info.name == "IMG.JPG"
        assert info.size == len(b"jpeg-bytes")
        assert info.is_dir is False
        with backend.open("Masters\\2020\\Img.Jpg") as handle:
            assert handle.read() == b"jpeg-bytes"
        assert len(backend) == 2
    finally:
        backend.close()


def test_archive_backend_missing_entry(tmp_path: Path) -> None:
    archive = _write_zip(tmp_path / "lib.zip", {"Lib/Database/apdb/Library.apdb": b""})
    with ArchiveBackend(zipfile.ZipFile(archive), "Lib") as backend:
        with pytest.raises(EntryNotFoundError):
            backend.stat("Masters/none.jpg")
        with pytest.raises(FileNotFoundError):
            backend.open("Masters/none.jpg")


def test_archive_backend_close_is_idempotent(tmp_path: Path) -> None:
    archive = _write_zip(tmp_path / "lib.zip", {"Lib/a.txt": b"a"})
    zip_file = zipfile.ZipFile(archive)
    backend = ArchiveBackend(zip_file, "Lib")
    backend.close()
    backend.close()
    assert zip_file.fp is None


def test_archive_backend_concurrent_open(tmp_path: Path) -> None:
    entries = {f"Lib/Masters/{i:03d}.bin": bytes([i]) * (1000 + i) for i in range(40)}
    archive = _write_zip(tmp_path / "lib.zip", entries)

    def _read(name: str) -> bytes:
        with backend.open(name.split("/", 1)[1]) as handle:
            return handle.read()

    with ArchiveBackend(zipfile.ZipFile(archive), "Lib") as backend:
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(_read, entries))
    assert results == list(entries.values())


def test_iter_symlinks(tmp_path: Path) -> None:
    archive = tmp_path / "links.zip"
    with zipfile.ZipFile(archive, "w") as zip_file:
        link = zipfile.ZipInfo("Lib/Masters/link.jpg")
        link.external_attr = (0o120777 << 16)
        zip_file.writestr(link, "../Originals/real.jpg")
        zip_file.writestr("Lib/Masters/plain.jpg", b"data")
    with zipfile.ZipFile(archive) as zip_file:
        assert list(iter_symlinks(zip_file)) == [("Lib/Masters/link.jpg", "../Originals/real.jpg")]
