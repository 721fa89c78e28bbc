"""Data models describing the contents of an iPhoto library."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import NewType, Optional

PhotoKey = NewType("PhotoKey", int)
EventKey = NewType("EventKey", int)
FaceKey = NewType("FaceKey", int)
PlaceKey = NewType("PlaceKey", int)

# Key used by photos that belong to no event or place.
UNASSIGNED = 0


@dataclass(slots=True, frozen=True)
class LatLon:
    lat: float
    lon: float


@dataclass(slots=True, frozen=True)
class Photo:
    key: PhotoKey
    path: str
    """Path of the master file relative to ``Masters/``."""

    date: Optional[datetime]
    file_size: int
    file_name: str
    name: str
    description: str
    rating: int
    event: EventKey
    place: PlaceKey
    hidden: bool
    flagged: bool
    original: bool
    in_trash: bool


@dataclass(slots=True, frozen=True)
class Event:
    key: EventKey
    name: str
    min_date: datetime
    max_date: datetime
    hidden: bool
    favorite: bool
    in_trash: bool


@dataclass(slots=True, frozen=True)
class Face:
    key: FaceKey
    name: str
    full_name: str
    email: str


@dataclass(slots=True, frozen=True)
class Place:
    key: PlaceKey
    name: str
    min: LatLon
    max: LatLon
    centroid: LatLon
