"""Shared test fixtures for the photo feed client."""

from collections.abc import Callable
from typing import Any

import pytest

from common.banner import Banner
from common.navigation import ResponderRegistry
from config.settings import AppSettings
from networking.errors import NetworkError
from networking.tasks import Result
from photos.models import Photo, PhotosSearchResult, photo_from_payload
from search.query import SearchQuery

BASE_URL = "https://api.example.com"


def photo_payload(photo_id: str = "photo-1", **overrides: Any) -> dict[str, Any]:
    """A raw photo record as the API returns it."""
    payload: dict[str, Any] = {
        "id": photo_id,
        "created_at": "2024-03-05T10:15:00Z",
        "width": 4000,
        "height": 6000,
        "color": "#26402b",
        "description": "A forest at dawn",
        "urls": {
            "raw": f"https://images.example.com/{photo_id}/raw",
            "full": f"https://images.example.com/{photo_id}/full",
            "regular": f"https://images.example.com/{photo_id}/regular",
            "small": f"https://images.example.com/{photo_id}/small",
            "thumb": f"https://images.example.com/{photo_id}/thumb",
        },
        "user": {
            "id": f"user-{photo_id}",
            "username": "jdoe",
            "first_name": "Jane",
            "last_name": "Doe",
            "profile_image": {
                "small": "https://images.example.com/avatars/jdoe/small",
                "medium": "https://images.example.com/avatars/jdoe/medium",
                "large": "https://images.example.com/avatars/jdoe/large",
            },
        },
    }
    payload.update(overrides)
    return payload


def make_photo(photo_id: str = "photo-1", **overrides: Any) -> Photo:
    photo = photo_from_payload(photo_payload(photo_id, **overrides))
    assert photo is not None
    return photo


def make_photos(start: int, count: int) -> list[Photo]:
    return [make_photo(f"photo-{index}") for index in range(start, start + count)]


class CompletionRecorder:
    """Completion callback that keeps every Result it receives."""

    def __init__(self) -> None:
        self.results: list[Result[Any]] = []

    def __call__(self, result: Result[Any]) -> None:
        self.results.append(result)

    @property
    def last(self) -> Result[Any]:
        return self.results[-1]


class FakeTask:
    """Cancellable handle that only counts cancellations."""

    def __init__(self) -> None:
        self.cancel_count = 0

    def cancel(self) -> None:
        self.cancel_count += 1

    @property
    def cancelled(self) -> bool:
        return self.cancel_count > 0


class StubFetchPhotosUseCase:
    """Records page requests; tests complete them explicitly."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def execute(
        self,
        page: int,
        per_page: int,
        completion: Callable[[Result[list[Photo]]], None],
        query: SearchQuery | None = None,
    ) -> FakeTask:
        task = FakeTask()
        self.calls.append(
            {"page": page, "per_page": per_page, "query": query, "completion": completion, "task": task}
        )
        return task

    def succeed(self, photos: list[Photo], call: int = -1) -> None:
        self.calls[call]["completion"](Result.success(photos))

    def fail(self, error: NetworkError, call: int = -1) -> None:
        self.calls[call]["completion"](Result.failure(error))


class StubSearchRepository:
    """Records search probes; tests complete them explicitly."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def search_photos(
        self,
        query: SearchQuery,
        page: int,
        per_page: int,
        completion: Callable[[Result[PhotosSearchResult]], None],
    ) -> FakeTask:
        task = FakeTask()
        self.calls.append(
            {"query": query, "page": page, "per_page": per_page, "completion": completion, "task": task}
        )
        return task

    def succeed(self, total: int, call: int = -1) -> None:
        self.calls[call]["completion"](Result.success(PhotosSearchResult(total=total, photos=[])))

    def fail(self, error: NetworkError, call: int = -1) -> None:
        self.calls[call]["completion"](Result.failure(error))


class RecordingFeedResponder:
    def __init__(self) -> None:
        self.routed: list[str] = []
        self.preparing_finished_count = 0

    def route_to_detail(self, photo_id: str) -> None:
        self.routed.append(photo_id)

    def preparing_finished(self) -> None:
        self.preparing_finished_count += 1


class RecordingSearchResponder:
    def __init__(self) -> None:
        self.routed: list[SearchQuery] = []

    def route_to_search_results(self, query: SearchQuery) -> None:
        self.routed.append(query)


class RecordingBannerPresenter:
    def __init__(self) -> None:
        self.banners: list[Banner] = []

    def present_banner(self, banner: Banner) -> None:
        self.banners.append(banner)


class RecordingSearchBarOwner:
    def __init__(self) -> None:
        self.texts: list[str] = []

    def set_text(self, text: str) -> None:
        self.texts.append(text)


class RecordingDetailResponder:
    def __init__(self) -> None:
        self.dismiss_count = 0

    def dismiss_scene(self) -> None:
        self.dismiss_count += 1


@pytest.fixture
def settings() -> AppSettings:
    """Settings pointing at a test host with a fast debounce."""
    return AppSettings(
        api_base_url=BASE_URL,
        access_key="test-access-key",
        search_debounce_sec=0.01,
    )


@pytest.fixture
def registry() -> ResponderRegistry:
    return ResponderRegistry()


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    return photo_payload()
