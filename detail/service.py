"""Photo detail: favorites-first loading, like/unlike, and the screen coordinator."""

import asyncio
from datetime import datetime

import structlog
from pydantic import BaseModel, ConfigDict

from common.navigation import PhotoDetailNavigationResponder, ResponderHandle, ResponderRegistry
from common.observable import ValueSubject
from favorites.repository import DetailedPhoto, FavoritesRepository, PhotoSource
from networking.errors import NetworkError
from photos.models import Photo, Resolution
from photos.repositories import PhotoRepository

log = structlog.get_logger()


class PhotoDetailService:
    """Loads a photo from favorites when stored there, otherwise from the API."""

    def __init__(self, photo_repository: PhotoRepository, favorites: FavoritesRepository) -> None:
        self._photo_repository = photo_repository
        self._favorites = favorites

    async def fetch_photo(self, photo_id: str) -> DetailedPhoto:
        """Fetch a photo with its liked flag.

        Args:
            photo_id: Photo identifier.

        Returns:
            The stored favorite, or the remote photo marked as not liked.

        Raises:
            NetworkError: If the photo is not a favorite and the request fails.
        """
        favorite = await self._favorites.fetch_favorite(photo_id)
        if favorite is not None:
            log.debug("detail.loaded_from_favorites", photo_id=photo_id)
            return favorite

        photo = await self._photo_repository.load_photo(photo_id)
        return DetailedPhoto(photo=photo, is_liked=False, source=PhotoSource.remote(photo.urls.regular))

    async def like_photo(self, photo: Photo) -> None:
        await self._favorites.store_favorite(photo)

    async def unlike_photo(self, photo_id: str) -> None:
        await self._favorites.delete_favorite(photo_id)


def format_photo_date(created_at: datetime) -> str:
    """Format as ``d Month, YYYY``, e.g. ``5 March, 2024``."""
    return f"{created_at.day} {created_at:%B, %Y}"


class PhotoDetailModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: PhotoSource
    color: str
    date: str
    resolution: Resolution


class PhotoDetailCoordinator:
    """Drives one photo detail screen.

    Publishes ``photo_detail`` (None until loaded) and ``is_liked``. A load
    failure dismisses the screen.
    """

    def __init__(
        self,
        photo_id: str,
        service: PhotoDetailService,
        registry: ResponderRegistry,
        responder_handle: ResponderHandle | None = None,
    ) -> None:
        self.photo_id = photo_id
        self.responder_handle = responder_handle
        self.photo_detail: ValueSubject[PhotoDetailModel | None] = ValueSubject(None)
        self.is_liked: ValueSubject[bool] = ValueSubject(False)

        self._service = service
        self._registry = registry
        self._photo: Photo | None = None
        self._load_task: asyncio.Task[None] | None = None

    def start(self) -> "asyncio.Task[None]":
        """Begin loading the photo on the running loop."""
        self._load_task = asyncio.get_running_loop().create_task(self._load())
        return self._load_task

    async def toggle_favorite(self) -> None:
        """Like or unlike the loaded photo; does nothing before it loads."""
        if self._photo is None:
            return

        liked = self.is_liked.value
        if liked:
            await self._service.unlike_photo(self.photo_id)
        else:
            await self._service.like_photo(self._photo)
        self.is_liked.send(not liked)

    def image_loading_failed(self) -> None:
        self._dismiss()

    def close(self) -> None:
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()

    async def _load(self) -> None:
        try:
            detailed = await self._service.fetch_photo(self.photo_id)
        except NetworkError as exc:
            log.warning("detail.load_failed", photo_id=self.photo_id, error_kind=exc.kind.value)
            self._dismiss()
            return

        self._photo = detailed.photo
        self.is_liked.send(detailed.is_liked)
        self.photo_detail.send(
            PhotoDetailModel(
                source=detailed.source,
                color=detailed.photo.color,
                date=format_photo_date(detailed.photo.created_at),
                resolution=detailed.photo.resolution,
            )
        )

    def _dismiss(self) -> None:
        responder: PhotoDetailNavigationResponder | None = self._registry.resolve(self.responder_handle)
        if responder is not None:
            responder.dismiss_scene()
