"""In-memory catalog of an imported iPhoto library."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, BinaryIO, Iterator, List, Mapping, Tuple, TypeVar, Union

from ..config import MASTERS_DIR, THUMBNAILS_DIR
from ..errors import EntryNotFoundError
from ..storage.base import EntryInfo, StorageBackend
from .types import Event, EventKey, Face, FaceKey, Photo, PhotoKey, Place, PlaceKey

if TYPE_CHECKING:  # pragma: no cover - only for type checking
    from ..io.importer import LibraryRecords

K = TypeVar("K")
V = TypeVar("V")


def _freeze_index(index: Mapping[K, List[V]]) -> Mapping[K, Tuple[V, ...]]:
    return MappingProxyType({key: tuple(values) for key, values in index.items()})


class Catalog:
    """Photos, events, faces and places of one library plus their cross references.

    The catalog is read-only once built.  It keeps the storage backend used for
    the import open so that master images and thumbnails can be read at any
    later point; :meth:`close` releases it.
    """

    def __init__(self, records: "LibraryRecords", backend: StorageBackend):
        self.photos: Mapping[PhotoKey, Photo] = MappingProxyType(dict(records.photos))
        self.events: Mapping[EventKey, Event] = MappingProxyType(dict(records.events))
        self.faces: Mapping[FaceKey, Face] = MappingProxyType(dict(records.faces))
        self.places: Mapping[PlaceKey, Place] = MappingProxyType(dict(records.places))

        self.event_photos: Mapping[EventKey, Tuple[PhotoKey, ...]] = _freeze_index(
            records.event_photos
        )
        self.place_photos: Mapping[PlaceKey, Tuple[PhotoKey, ...]] = _freeze_index(
            records.place_photos
        )
        self.face_photos: Mapping[FaceKey, Tuple[PhotoKey, ...]] = _freeze_index(
            records.face_photos
        )
        self.photo_faces: Mapping[PhotoKey, Tuple[FaceKey, ...]] = _freeze_index(
            records.photo_faces
        )

        # Capture-date order; mapping iteration order carries no meaning.
        self.photo_order: Tuple[PhotoKey, ...] = tuple(records.photo_order)
        self._backend = backend

    # ------------------------------------------------------------------
    # Index lookups
    # ------------------------------------------------------------------
    def photos_in_event(self, key: EventKey) -> Tuple[PhotoKey, ...]:
        return self.event_photos.get(key, ())

    def photos_at_place(self, key: PlaceKey) -> Tuple[PhotoKey, ...]:
        return self.place_photos.get(key, ())

    def photos_with_face(self, key: FaceKey) -> Tuple[PhotoKey, ...]:
        return self.face_photos.get(key, ())

    def faces_in_photo(self, key: PhotoKey) -> Tuple[FaceKey, ...]:
        return self.photo_faces.get(key, ())

    def iter_photos(self) -> Iterator[Photo]:
        """Yield photos ordered by capture date."""

        for key in self.photo_order:
            yield self.photos[key]

    # ------------------------------------------------------------------
    # Media access
    # ------------------------------------------------------------------
    @property
    def backend(self) -> StorageBackend:
        return self._backend

    def _photo(self, photo: Union[Photo, PhotoKey]) -> Photo:
        if isinstance(photo, Photo):
            return photo
        try:
            return self.photos[photo]
        except KeyError:
            raise EntryNotFoundError(f"No photo with key {photo}") from None

    def stat_photo(self, photo: Union[Photo, PhotoKey]) -> EntryInfo:
        """Return file information for the photo's own library-relative path."""

        return self._backend.stat(self._photo(photo).path)

    def open_photo(self, photo: Union[Photo, PhotoKey]) -> BinaryIO:
        """Open the master image of *photo*.  The caller must close the stream."""

        return self._backend.open(f"{MASTERS_DIR}/{self._photo(photo).path}")

    def open_thumbnail(self, photo: Union[Photo, PhotoKey]) -> BinaryIO:
        """Open the thumbnail of *photo*.  The caller must close the stream."""

        return self._backend.open(f"{THUMBNAILS_DIR}/{self._photo(photo).path}")

    def close(self) -> None:
        self._backend.close()

    def __enter__(self) -> "Catalog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Catalog(photos={len(self.photos)}, events={len(self.events)}, "
            f"faces={len(self.faces)}, places={len(self.places)}, backend={self._backend!r})"
        )


__all__ = ["Catalog"]
