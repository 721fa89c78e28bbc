"""Catalog data models."""

from .catalog import Catalog
from .types import Event, EventKey, Face, FaceKey, LatLon, Photo, PhotoKey, Place, PlaceKey

__all__ = [
    "Catalog",
    "Event",
    "EventKey",
    "Face",
    "FaceKey",
    "LatLon",
    "Photo",
    "PhotoKey",
    "Place",
    "PlaceKey",
]
