import sqlite3
import sys
import zipfile
from pathlib import Path
from typing import Callable, Iterable

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make the sources importable without installing the package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


LIBRARY_SCHEMA = """
CREATE TABLE RKVersion (
    modelId INTEGER PRIMARY KEY, projectUuid TEXT, masterUuid TEXT,
    imageDate TIMESTAMP, fileName TEXT, name TEXT, mainRating INTEGER,
    isHidden INTEGER, isFlagged INTEGER, isOriginal INTEGER, isInTrash INTEGER
);
CREATE TABLE RKMaster (uuid TEXT, imagePath TEXT, fileSize INTEGER);
CREATE TABLE RKFolder (
    modelId INTEGER PRIMARY KEY, uuid TEXT, name TEXT,
    minImageDate TIMESTAMP, maxImageDate TIMESTAMP,
    isHidden INTEGER, isFavorite INTEGER, isInTrash INTEGER
);
CREATE TABLE RKPlaceForVersion (versionId INTEGER, placeId INTEGER);
CREATE TABLE RKVersionFaceContent (versionId INTEGER, faceKey INTEGER);
"""

PROPERTIES_SCHEMA = """
CREATE TABLE RKUniqueString (modelId INTEGER PRIMARY KEY, stringProperty TEXT);
CREATE TABLE RKIptcProperty (versionId INTEGER, propertyKey TEXT, stringId INTEGER);
CREATE TABLE RKPlace (
    modelId INTEGER PRIMARY KEY, defaultName TEXT,
    minLatitude REAL, minLongitude REAL, maxLatitude REAL, maxLongitude REAL,
    centroid TEXT
);
"""

FACES_SCHEMA = """
CREATE TABLE RKFaceName (faceKey INTEGER PRIMARY KEY, name TEXT, fullName TEXT, email TEXT);
"""

# "Café" written with a combining acute accent, as HFS+ stores it.
DECOMPOSED_CAFE = "Cafe\u0301"


def _populate_library(conn: sqlite3.Connection) -> None:
    conn.executescript(LIBRARY_SCHEMA)
    conn.executemany(
        "INSERT INTO RKFolder VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        [
            (10, "ev-summer", "Summer", 0.0, 86400.5, 0, 1, 0),
            (11, "ev-empty", None, None, None, 1, 0, 0),
        ],
    )
    conn.executemany(
        "INSERT INTO RKMaster VALUES (?, ?, ?)",
        [
            ("m1", "2020/IMG_0001.JPG", 1234),
            ("m2", "2020/IMG_0002.JPG", 2345),
            ("m3", "2021/IMG_0003.JPG", 3456),
        ],
    )
    conn.executemany(
        "INSERT INTO RKVersion VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        [
            (2, "ev-summer", "m2", 200.0, "IMG_0002.JPG", None, 3, 0, 1, 1, 0),
            (1, "ev-summer", "m1", 100.0, "IMG_0001.JPG", DECOMPOSED_CAFE, 5, 0, 0, 1, 0),
            (3, "ev-missing", "m3", 50.0, "IMG_0003.JPG", "Beach", 0, 1, 0, 0, 1),
        ],
    )
    conn.executemany(
        "INSERT INTO RKPlaceForVersion VALUES (?, ?)",
        [(1, 20), (2, 21)],
    )
    conn.executemany(
        "INSERT INTO RKVersionFaceContent VALUES (?, ?)",
        [(1, 30), (2, 30), (1, 31)],
    )


def _populate_properties(conn: sqlite3.Connection) -> None:
    conn.executescript(PROPERTIES_SCHEMA)
    conn.execute("INSERT INTO RKUniqueString VALUES (?, ?)", (500, "Sunset at the pier"))
    conn.executemany(
        "INSERT INTO RKIptcProperty VALUES (?, ?, ?)",
        [(1, "Caption/Abstract", 500), (2, "Keywords", 500)],
    )
    conn.executemany(
        "INSERT INTO RKPlace VALUES (?, ?, ?, ?, ?, ?, ?)",
        [
            (20, "Budapest", 47.3, 18.9, 47.6, 19.3, "47.49,19.04"),
            (21, None, 10.0, 20.0, 12.0, 24.0, "not a centroid"),
            (22, DECOMPOSED_CAFE, -1.0, -2.0, 1.0, 2.0, None),
        ],
    )


def _populate_faces(conn: sqlite3.Connection) -> None:
    conn.executescript(FACES_SCHEMA)
    conn.executemany(
        "INSERT INTO RKFaceName VALUES (?, ?, ?, ?)",
        [
            (30, "Anna", "Anna Smith", "anna@example.com"),
            (31, DECOMPOSED_CAFE, None, None),
        ],
    )


_POPULATORS = {
    "Library.apdb": _populate_library,
    "Properties.apdb": _populate_properties,
    "Faces.db": _populate_faces,
}


def write_store(store_dir: Path, omit: Iterable[str] = ()) -> None:
    store_dir.mkdir(parents=True, exist_ok=True)
    skipped = set(omit)
    for name, populate in _POPULATORS.items():
        if name in skipped:
            continue
        conn = sqlite3.connect(store_dir / name)
        try:
            populate(conn)
            conn.commit()
        finally:
            conn.close()


def create_image(path: Path, size: tuple[int, int] = (10, 10)) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color="red").save(path, format="JPEG")


@pytest.fixture
def make_library(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory creating a small library directory."""

    def _make(name: str = "Test Library", omit: Iterable[str] = ()) -> Path:
        root = tmp_path / name
        write_store(root / "Database" / "apdb", omit)
        create_image(root / "Masters" / "2020" / "IMG_0001.JPG", (12, 8))
        create_image(root / "Masters" / "2020" / "IMG_0002.JPG", (6, 4))
        create_image(root / "Thumbnails" / "2020" / "IMG_0001.JPG", (3, 2))
        return root

    return _make


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory zipping a library directory below *prefix*."""

    def _make(library: Path, prefix: str = "", name: str = "library.zip") -> Path:
        archive = tmp_path / name
        with zipfile.ZipFile(archive, "w") as zip_file:
            for path in sorted(library.rglob("*")):
                arcname = path.relative_to(library).as_posix()
                if prefix:
                    arcname = f"{prefix}/{arcname}"
                if path.is_dir():
                    arcname += "/"
                    zip_file.writestr(arcname, b"")
                else:
                    zip_file.write(path, arcname)
        return archive

    return _make


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    """Return a directory holding the three populated database files."""

    target = tmp_path / "apdb"
    write_store(target)
    return target
