"""Read the embedded iPhoto databases into plain Python records.

The library keeps its data in three sqlite files which are attached to a
single in-memory session as ``L`` (``Library.apdb``), ``P``
(``Properties.apdb``) and ``F`` (``Faces.db``).  Five fixed queries are run in
order; the first error aborts the whole import.
"""

from __future__ import annotations

import sqlite3
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, DefaultDict, Dict, List, Optional

from ..config import APPLE_EPOCH, IPTC_CAPTION_KEY, STORE_ALIASES
from ..errors import ImportFailureError
from ..models.types import (
    Event,
    EventKey,
    Face,
    FaceKey,
    LatLon,
    Photo,
    PhotoKey,
    Place,
    PlaceKey,
)
from ..utils.logging import get_logger
from ..utils.pathutils import nfc

LOGGER = get_logger()

# imageTimeZoneName is always GMT in the libraries seen so far, so dates are
# treated as UTC.
PHOTO_QUERY = f"""
SELECT
    V.modelId,
    COALESCE((SELECT E.modelId FROM L.RKFolder AS E WHERE E.uuid = V.projectUuid), 0),
    COALESCE((SELECT Q.placeId FROM L.RKPlaceForVersion AS Q WHERE Q.versionId = V.modelId), 0),
    M.imagePath, V.imageDate, M.fileSize,
    V.fileName, COALESCE(V.name, ''),
    COALESCE((SELECT U.stringProperty FROM P.RKUniqueString AS U
        WHERE U.modelId = (SELECT I.stringId FROM P.RKIptcProperty AS I
            WHERE I.versionId = V.modelId AND I.propertyKey = '{IPTC_CAPTION_KEY}')), ''),
    V.mainRating, V.isHidden, V.isFlagged, V.isOriginal, V.isInTrash
FROM L.RKVersion AS V
    INNER JOIN L.RKMaster AS M ON V.masterUuid = M.uuid
ORDER BY V.imageDate
"""

EVENT_QUERY = """
SELECT modelId,
    COALESCE(name, ''), COALESCE(minImageDate + 0, 0), COALESCE(maxImageDate + 0, 0),
    isHidden, isFavorite, isInTrash
FROM L.RKFolder
"""

PLACE_QUERY = """
SELECT modelId,
    COALESCE(defaultName, ''),
    minLatitude, minLongitude,
    maxLatitude, maxLongitude,
    centroid
FROM P.RKPlace
"""

FACE_QUERY = """
SELECT faceKey,
    COALESCE(name, ''),
    COALESCE(fullName, ''),
    COALESCE(email, '')
FROM F.RKFaceName
"""

FACE_PHOTO_QUERY = "SELECT versionId, faceKey FROM L.RKVersionFaceContent"


@dataclass
class LibraryRecords:
    """Everything read from the embedded databases, before freezing."""

    photos: Dict[PhotoKey, Photo] = field(default_factory=dict)
    photo_order: List[PhotoKey] = field(default_factory=list)
    events: Dict[EventKey, Event] = field(default_factory=dict)
    faces: Dict[FaceKey, Face] = field(default_factory=dict)
    places: Dict[PlaceKey, Place] = field(default_factory=dict)
    event_photos: DefaultDict[EventKey, List[PhotoKey]] = field(
        default_factory=lambda: defaultdict(list)
    )
    place_photos: DefaultDict[PlaceKey, List[PhotoKey]] = field(
        default_factory=lambda: defaultdict(list)
    )
    face_photos: DefaultDict[FaceKey, List[PhotoKey]] = field(
        default_factory=lambda: defaultdict(list)
    )
    photo_faces: DefaultDict[PhotoKey, List[FaceKey]] = field(
        default_factory=lambda: defaultdict(list)
    )


# ---------------------------------------------------------------------------
# Column conversion helpers
# ---------------------------------------------------------------------------


def apple_timestamp(value: float) -> datetime:
    """Convert seconds since the iPhoto epoch (2001-01-01 UTC) to a datetime."""

    try:
        return APPLE_EPOCH + timedelta(seconds=value)
    except (OverflowError, ValueError) as exc:
        raise ImportFailureError(f"Timestamp {value!r} is out of range") from exc


def _number(value: Any, column: str) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise ImportFailureError(f"Column {column} holds {value!r}, expected a number")


def _integer(value: Any, column: str) -> int:
    if isinstance(value, int):
        return value
    raise ImportFailureError(f"Column {column} holds {value!r}, expected an integer")


def _flag(value: Any, column: str) -> bool:
    return _integer(value, column) != 0


def _raw_text(value: Any, column: str) -> str:
    if not isinstance(value, str):
        raise ImportFailureError(f"Column {column} holds {value!r}, expected text")
    return value


def _text(value: Any, column: str) -> str:
    return nfc(_raw_text(value, column))


def _decode_text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _photo_date(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return apple_timestamp(_number(value, "RKVersion.imageDate"))


def parse_centroid(text: Optional[str], low: LatLon, high: LatLon) -> LatLon:
    """Parse a ``"lat,lon"`` centroid, falling back to the bounding box midpoint."""

    try:
        lat_text, lon_text = text.split(",")  # type: ignore[union-attr]
        return LatLon(float(lat_text), float(lon_text))
    except (AttributeError, ValueError):
        return LatLon((low.lat + high.lat) / 2, (low.lon + high.lon) / 2)


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _read_photos(conn: sqlite3.Connection, records: LibraryRecords) -> None:
    for row in conn.execute(PHOTO_QUERY):
        (
            model_id, event_id, place_id,
            image_path, image_date, file_size,
            file_name, name, caption,
            rating, hidden, flagged, original, in_trash,
        ) = row
        key = PhotoKey(_integer(model_id, "RKVersion.modelId"))
        event = EventKey(_integer(event_id, "RKFolder.modelId"))
        place = PlaceKey(_integer(place_id, "RKPlaceForVersion.placeId"))
        records.photos[key] = Photo(
            key=key,
            path=_raw_text(image_path, "RKMaster.imagePath"),
            date=_photo_date(image_date),
            file_size=_integer(file_size, "RKMaster.fileSize"),
            file_name=_text(file_name, "RKVersion.fileName"),
            name=_text(name, "RKVersion.name"),
            description=_text(caption, "RKUniqueString.stringProperty"),
            rating=_integer(rating, "RKVersion.mainRating"),
            event=event,
            place=place,
            hidden=_flag(hidden, "RKVersion.isHidden"),
            flagged=_flag(flagged, "RKVersion.isFlagged"),
            original=_flag(original, "RKVersion.isOriginal"),
            in_trash=_flag(in_trash, "RKVersion.isInTrash"),
        )
        records.photo_order.append(key)
        records.event_photos[event].append(key)
        records.place_photos[place].append(key)


def _read_events(conn: sqlite3.Connection, records: LibraryRecords) -> None:
    for model_id, name, min_date, max_date, hidden, favorite, in_trash in conn.execute(
        EVENT_QUERY
    ):
        key = EventKey(_integer(model_id, "RKFolder.modelId"))
        records.events[key] = Event(
            key=key,
            name=_text(name, "RKFolder.name"),
            min_date=apple_timestamp(_number(min_date, "RKFolder.minImageDate")),
            max_date=apple_timestamp(_number(max_date, "RKFolder.maxImageDate")),
            hidden=_flag(hidden, "RKFolder.isHidden"),
            favorite=_flag(favorite, "RKFolder.isFavorite"),
            in_trash=_flag(in_trash, "RKFolder.isInTrash"),
        )


def _read_places(conn: sqlite3.Connection, records: LibraryRecords) -> None:
    for model_id, name, min_lat, min_lon, max_lat, max_lon, centroid in conn.execute(
        PLACE_QUERY
    ):
        key = PlaceKey(_integer(model_id, "RKPlace.modelId"))
        low = LatLon(
            _number(min_lat, "RKPlace.minLatitude"),
            _number(min_lon, "RKPlace.minLongitude"),
        )
        high = LatLon(
            _number(max_lat, "RKPlace.maxLatitude"),
            _number(max_lon, "RKPlace.maxLongitude"),
        )
        records.places[key] = Place(
            key=key,
            name=_text(name, "RKPlace.defaultName"),
            min=low,
            max=high,
            centroid=parse_centroid(centroid, low, high),
        )


def _read_faces(conn: sqlite3.Connection, records: LibraryRecords) -> None:
    for face_key, name, full_name, email in conn.execute(FACE_QUERY):
        key = FaceKey(_integer(face_key, "RKFaceName.faceKey"))
        records.faces[key] = Face(
            key=key,
            name=_text(name, "RKFaceName.name"),
            full_name=_text(full_name, "RKFaceName.fullName"),
            email=_text(email, "RKFaceName.email"),
        )


def _read_face_photos(conn: sqlite3.Connection, records: LibraryRecords) -> None:
    for version_id, face_key in conn.execute(FACE_PHOTO_QUERY):
        photo = PhotoKey(_integer(version_id, "RKVersionFaceContent.versionId"))
        face = FaceKey(_integer(face_key, "RKVersionFaceContent.faceKey"))
        records.face_photos[face].append(photo)
        records.photo_faces[photo].append(face)


_STEPS = (
    ("photos", _read_photos),
    ("events", _read_events),
    ("places", _read_places),
    ("faces", _read_faces),
    ("face/photo pairs", _read_face_photos),
)


def _attach_uri(path: Path) -> str:
    return path.resolve().as_uri() + "?mode=ro"


def read_library_db(store_dir: Path) -> LibraryRecords:
    """Import every photo, event, place and face from the databases in *store_dir*.

    Raises :class:`ImportFailureError` on the first failing statement or row.
    """

    records = LibraryRecords()
    try:
        conn = sqlite3.connect(":memory:", uri=True)
    except sqlite3.Error as exc:
        raise ImportFailureError(f"Cannot open sqlite session: {exc}") from exc
    # Invalid UTF-8 in text columns is replaced, not rejected.
    conn.text_factory = _decode_text
    try:
        for file_name, alias in STORE_ALIASES.items():
            try:
                conn.execute(
                    f"ATTACH DATABASE ? AS {alias}", (_attach_uri(store_dir / file_name),)
                )
            except sqlite3.Error as exc:
                raise ImportFailureError(f"Cannot attach {file_name}: {exc}") from exc
        for label, step in _STEPS:
            try:
                step(conn, records)
            except sqlite3.Error as exc:
                raise ImportFailureError(f"Failed to read {label}: {exc}") from exc
    finally:
        conn.close()

    LOGGER.info(
        "Imported %d photos, %d events, %d places, %d faces from %s",
        len(records.photos),
        len(records.events),
        len(records.places),
        len(records.faces),
        store_dir,
    )
    return records
