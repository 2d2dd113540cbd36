"""Favorite photos store.

The interface is async so a persistent store can slot in; the in-memory
implementation here completes without suspending.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from itertools import count
from typing import Protocol

import structlog
from pydantic import BaseModel, ConfigDict

from common.observable import ValueSubject
from photos.models import Photo

log = structlog.get_logger()


class PhotoSourceKind(Enum):
    LOCAL = "local"
    REMOTE = "remote"


class PhotoSource(BaseModel):
    """Where the full-size image is loaded from.

    Attributes:
        kind: Local file or remote URL.
        location: File path or URL string.
    """

    model_config = ConfigDict(frozen=True)

    kind: PhotoSourceKind
    location: str

    @classmethod
    def remote(cls, url: object) -> "PhotoSource":
        return cls(kind=PhotoSourceKind.REMOTE, location=str(url))


class DetailedPhoto(BaseModel):
    model_config = ConfigDict(frozen=True)

    photo: Photo
    is_liked: bool
    source: PhotoSource


class FavoritesRepository(Protocol):
    async def store_favorite(self, photo: Photo) -> None: ...

    async def delete_favorite(self, photo_id: str) -> None: ...

    async def fetch_favorite(self, photo_id: str) -> DetailedPhoto | None: ...

    async def fetch_favorites(self, page: int, per_page: int) -> list[DetailedPhoto]: ...

    def observe(self) -> ValueSubject[list[DetailedPhoto]]: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryFavoritesRepository:
    """Favorites kept in a dict, listed most recently stored first."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock
        self._photos: dict[str, Photo] = {}
        self._stored_at: dict[str, tuple[datetime, int]] = {}
        self._counter = count()
        self._subject: ValueSubject[list[DetailedPhoto]] = ValueSubject([])

    async def store_favorite(self, photo: Photo) -> None:
        """Store a photo; storing one that is already a favorite does nothing."""
        if photo.id in self._photos:
            return
        self._photos[photo.id] = photo
        self._stored_at[photo.id] = (self._clock(), next(self._counter))
        log.info("favorites.stored", photo_id=photo.id)
        self._publish()

    async def delete_favorite(self, photo_id: str) -> None:
        if self._photos.pop(photo_id, None) is None:
            return
        del self._stored_at[photo_id]
        log.info("favorites.deleted", photo_id=photo_id)
        self._publish()

    async def fetch_favorite(self, photo_id: str) -> DetailedPhoto | None:
        photo = self._photos.get(photo_id)
        if photo is None:
            return None
        return _detailed(photo)

    async def fetch_favorites(self, page: int, per_page: int) -> list[DetailedPhoto]:
        """Fetch one page of favorites; ``page`` is zero-based."""
        start = page * per_page
        return self._sorted()[start:start + per_page]

    def observe(self) -> ValueSubject[list[DetailedPhoto]]:
        return self._subject

    def _sorted(self) -> list[DetailedPhoto]:
        ordered = sorted(self._photos, key=lambda photo_id: self._stored_at[photo_id], reverse=True)
        return [_detailed(self._photos[photo_id]) for photo_id in ordered]

    def _publish(self) -> None:
        self._subject.send(self._sorted())


def _detailed(photo: Photo) -> DetailedPhoto:
    return DetailedPhoto(photo=photo, is_liked=True, source=PhotoSource.remote(photo.urls.regular))
