"""Photo and search repositories over the network client.

Repositories translate endpoint DTOs into domain models. They keep the
client's callback contract: one Result per call, plus a cancellable handle.
"""

from collections.abc import Callable
from typing import Any

from networking.client import NetworkClient
from networking.errors import NetworkError
from networking.tasks import RequestTask, Result
from photos.models import (
    Photo,
    PhotosSearchResult,
    photo_from_dto,
    photos_from_payloads,
    search_result_from_dto,
)
from search.query import SearchQuery
from unsplash.endpoints import get_photo_endpoint, get_photos_endpoint, search_photos_endpoint

PhotosCompletion = Callable[[Result[list[Photo]]], None]
PhotoCompletion = Callable[[Result[Photo]], None]
SearchCompletion = Callable[[Result[PhotosSearchResult]], None]


def _photo_result(result: Result[Any]) -> Result[Photo]:
    if result.error is not None:
        return Result.failure(result.error)
    photo = photo_from_dto(result.value)
    if photo is None:
        return Result.failure(NetworkError.invalid_data())
    return Result.success(photo)


class PhotoRepository:
    """Fetches the editorial feed and single photos."""

    def __init__(self, client: NetworkClient) -> None:
        self._client = client

    def fetch_photos(
        self,
        page: int,
        per_page: int,
        completion: PhotosCompletion,
    ) -> RequestTask | None:
        endpoint = get_photos_endpoint(page=page, per_page=per_page)
        return self._client.request(
            endpoint,
            lambda result: completion(result.map(photos_from_payloads)),
        )

    def fetch_photo(self, photo_id: str, completion: PhotoCompletion) -> RequestTask | None:
        endpoint = get_photo_endpoint(photo_id)
        return self._client.request(
            endpoint,
            lambda result: completion(_photo_result(result)),
        )

    async def load_photo(self, photo_id: str) -> Photo:
        """Awaitable single-photo fetch.

        Raises:
            NetworkError: On any failure, INVALID_DATA if the record cannot be mapped.
        """
        dto = await self._client.send(get_photo_endpoint(photo_id))
        photo = photo_from_dto(dto)
        if photo is None:
            raise NetworkError.invalid_data()
        return photo


class SearchRepository:
    """Runs photo searches."""

    def __init__(self, client: NetworkClient) -> None:
        self._client = client

    def search_photos(
        self,
        query: SearchQuery,
        page: int,
        per_page: int,
        completion: SearchCompletion,
    ) -> RequestTask | None:
        endpoint = search_photos_endpoint(query, page=page, per_page=per_page)
        return self._client.request(
            endpoint,
            lambda result: completion(result.map(search_result_from_dto)),
        )
