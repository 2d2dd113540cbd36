"""Page fetching for the feed, either editorial or search results."""

from collections.abc import Callable
from typing import Protocol

from networking.tasks import CancellableTask, Result
from photos.models import Photo, PhotosSearchResult
from photos.repositories import PhotoRepository, SearchRepository
from search.query import SearchQuery

PhotosCompletion = Callable[[Result[list[Photo]]], None]


class FetchPhotosUseCaseProtocol(Protocol):
    def execute(
        self,
        page: int,
        per_page: int,
        completion: PhotosCompletion,
        query: SearchQuery | None = None,
    ) -> CancellableTask | None: ...


class FetchPhotosUseCase:
    """Fetches one page of photos.

    With a query the page comes from search and only its photos are kept;
    without one it is the editorial feed.
    """

    def __init__(self, photo_repository: PhotoRepository, search_repository: SearchRepository) -> None:
        self._photo_repository = photo_repository
        self._search_repository = search_repository

    def execute(
        self,
        page: int,
        per_page: int,
        completion: PhotosCompletion,
        query: SearchQuery | None = None,
    ) -> CancellableTask | None:
        if query is None:
            return self._photo_repository.fetch_photos(page, per_page, completion)

        def _on_search(result: Result[PhotosSearchResult]) -> None:
            completion(result.map(lambda search_result: search_result.photos))

        return self._search_repository.search_photos(query, page, per_page, _on_search)
