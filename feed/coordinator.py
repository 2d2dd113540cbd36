"""Paginated photo feed coordinator.

Drives one feed screen: requests pages through the fetch use case, merges
them into an ordered, de-duplicated list and publishes ``FeedState``.

State machine::

    initial -> loading -> photos(items) | empty(title, subtitle)

``loading`` is re-entered, carrying the current items, on every page
request and on refresh. All methods and completions run on the event loop.
"""

from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, HttpUrl

from common.banner import Banner
from common.navigation import (
    BannerPresenter,
    PhotoFeedNavigationResponder,
    ResponderHandle,
    ResponderRegistry,
)
from common.observable import Signal, ValueSubject
from feed.use_case import FetchPhotosUseCaseProtocol
from networking.errors import NetworkError, NetworkErrorKind
from networking.tasks import CancellableTask, Result
from photos.models import Photo, Resolution
from search.query import SearchQuery

log = structlog.get_logger()

FIRST_PAGE = 1
DEFAULT_PAGE_SIZE = 20
DEFAULT_PREFETCH_THRESHOLD = 5
RATE_LIMIT_STATUS_CODES = frozenset({403, 429})


class FeedStateKind(Enum):
    INITIAL = "initial"
    LOADING = "loading"
    PHOTOS = "photos"
    EMPTY = "empty"


class FeedPhotoModel(BaseModel):
    """What a feed cell shows for one photo."""

    model_config = ConfigDict(frozen=True)

    id: str
    avatar: HttpUrl
    username: str
    photo: HttpUrl
    hex: str
    resolution: Resolution

    @classmethod
    def from_photo(cls, photo: Photo) -> "FeedPhotoModel":
        return cls(
            id=photo.id,
            avatar=photo.author.profile_image.small,
            username=f"@{photo.author.nickname}",
            photo=photo.urls.regular,
            hex=photo.color,
            resolution=photo.resolution,
        )


class FeedState(BaseModel):
    """Published feed state.

    Attributes:
        kind: Where the feed is in its state machine.
        items: Accumulated photos; also carried while loading.
        title: Headline for the empty state.
        subtitle: Explanation for the empty state.
    """

    model_config = ConfigDict(frozen=True)

    kind: FeedStateKind
    items: tuple[FeedPhotoModel, ...] = ()
    title: str = ""
    subtitle: str = ""

    @classmethod
    def initial(cls) -> "FeedState":
        return cls(kind=FeedStateKind.INITIAL)

    @classmethod
    def loading(cls, items: tuple[FeedPhotoModel, ...] = ()) -> "FeedState":
        return cls(kind=FeedStateKind.LOADING, items=items)

    @classmethod
    def photos(cls, items: tuple[FeedPhotoModel, ...]) -> "FeedState":
        return cls(kind=FeedStateKind.PHOTOS, items=items)

    @classmethod
    def empty(cls, title: str, subtitle: str) -> "FeedState":
        return cls(kind=FeedStateKind.EMPTY, title=title, subtitle=subtitle)


def banner_for_error(error: NetworkError) -> Banner:
    """Banner shown when a page fails while photos are already on screen."""
    if error.kind is NetworkErrorKind.CLIENT_ERROR and error.status_code in RATE_LIMIT_STATUS_CODES:
        return Banner.error(
            "The request limit has been reached",
            "Requests are updated at the beginning of each hour",
        )
    return Banner.error("Network error", "Please check your connection")


class PhotoFeedCoordinator:
    """Paginating coordinator for the editorial feed or a search results feed.

    Outputs:
        feed_state: Current ``FeedState``; replays to new subscribers.
        banner: Banners for failures that do not replace the list, emitted
            only when no banner presenter is registered.
        is_refreshing: True between ``refresh()`` and its first completion.
    """

    def __init__(
        self,
        use_case: FetchPhotosUseCaseProtocol,
        registry: ResponderRegistry,
        query: SearchQuery | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        prefetch_threshold: int = DEFAULT_PREFETCH_THRESHOLD,
        responder_handle: ResponderHandle | None = None,
        banner_presenter_handle: ResponderHandle | None = None,
    ) -> None:
        self.responder_handle = responder_handle
        self.banner_presenter_handle = banner_presenter_handle

        self.feed_state: ValueSubject[FeedState] = ValueSubject(FeedState.initial())
        self.banner: Signal[Banner] = Signal()
        self.is_refreshing: ValueSubject[bool] = ValueSubject(False)

        self._use_case = use_case
        self._registry = registry
        self._query = query
        self._page_size = page_size
        self._prefetch_threshold = prefetch_threshold

        self._photos: list[Photo] = []
        self._seen_ids: set[str] = set()
        self._page = FIRST_PAGE
        self._has_more = True
        self._is_fetching = False
        self._is_initial_loading = True
        self._current_task: CancellableTask | None = None
        self._generation = 0
        self._last_error_message: str | None = None

    @property
    def page(self) -> int:
        return self._page

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def is_fetching(self) -> bool:
        return self._is_fetching

    @property
    def photos(self) -> list[Photo]:
        return list(self._photos)

    def start(self) -> None:
        """Load the first page. Called once when the screen appears."""
        self._cancel_current()
        self._fetch()

    def load_more(self) -> None:
        """Request the next page unless one is in flight or the feed is exhausted."""
        if self._is_fetching or not self._has_more:
            return
        self._fetch()

    def refresh(self) -> None:
        """Drop everything and reload from the first page."""
        self.is_refreshing.send(True)
        self._cancel_current()
        self._page = FIRST_PAGE
        self._photos = []
        self._seen_ids = set()
        self._has_more = True
        self._last_error_message = None
        log.info("feed.refresh_requested", search=self._query is not None)
        self._fetch()

    def retry(self) -> None:
        """Re-issue the current page after a failure."""
        self._cancel_current()
        self._fetch()

    def cancel(self) -> None:
        """Cancel the in-flight page request, if any."""
        if self._current_task is not None:
            self._current_task.cancel()

    def will_display_item(self, index: int) -> None:
        """Prefetch when ``index`` is within the lookahead window of the end."""
        if index >= len(self._photos) - self._prefetch_threshold:
            self.load_more()

    def select_item(self, index: int) -> None:
        if not 0 <= index < len(self._photos):
            return
        responder: PhotoFeedNavigationResponder | None = self._registry.resolve(self.responder_handle)
        if responder is not None:
            responder.route_to_detail(self._photos[index].id)

    def photo_resolution(self, index: int) -> Resolution:
        return self._photos[index].resolution

    def _fetch(self) -> None:
        self._generation += 1
        generation = self._generation
        self._is_fetching = True
        self.feed_state.send(FeedState.loading(self._models()))

        log.debug(
            "feed.page_requested",
            page=self._page,
            per_page=self._page_size,
            generation=generation,
        )
        task = self._use_case.execute(
            self._page,
            self._page_size,
            lambda result: self._on_page(generation, result),
            query=self._query,
        )
        # A synchronous failure has already completed this generation.
        if generation == self._generation and self._is_fetching:
            self._current_task = task

    def _cancel_current(self) -> None:
        if self._current_task is not None:
            self._current_task.cancel()
            self._current_task = None
        # Any completion still on its way belongs to a superseded dispatch.
        self._generation += 1
        self._is_fetching = False

    def _on_page(self, generation: int, result: Result[list[Photo]]) -> None:
        if generation != self._generation:
            log.debug("feed.stale_completion_ignored", generation=generation, current=self._generation)
            return

        self._current_task = None
        self._is_fetching = False

        if result.error is None:
            self._merge(result.value or [])
        else:
            self._handle_error(result.error)

        if self.is_refreshing.value:
            self.is_refreshing.send(False)

        if self._is_initial_loading:
            self._is_initial_loading = False
            responder: PhotoFeedNavigationResponder | None = self._registry.resolve(self.responder_handle)
            if responder is not None:
                responder.preparing_finished()

    def _merge(self, incoming: list[Photo]) -> None:
        new_photos: list[Photo] = []
        for photo in incoming:
            if photo.id in self._seen_ids:
                continue
            self._seen_ids.add(photo.id)
            new_photos.append(photo)

        self._photos.extend(new_photos)
        if new_photos:
            self._page += 1
        else:
            self._has_more = False

        self._last_error_message = None
        log.info(
            "feed.page_merged",
            received=len(incoming),
            added=len(new_photos),
            total=len(self._photos),
            next_page=self._page,
            has_more=self._has_more,
        )
        self.feed_state.send(FeedState.photos(self._models()))

    def _handle_error(self, error: NetworkError) -> None:
        if error.is_cancelled:
            log.debug("feed.page_cancelled")
            if self._photos:
                self.feed_state.send(FeedState.photos(self._models()))
            else:
                self.feed_state.send(FeedState.initial())
            return

        log.warning("feed.page_failed", error_kind=error.kind.value, status_code=error.status_code)

        if not self._photos:
            self._last_error_message = error.message
            self.feed_state.send(FeedState.empty("Something went wrong", "Unable to load photos"))
            return

        self.feed_state.send(FeedState.photos(self._models()))
        if error.message == self._last_error_message:
            return
        self._last_error_message = error.message
        self._present(banner_for_error(error))

    def _present(self, banner: Banner) -> None:
        presenter: BannerPresenter | None = self._registry.resolve(self.banner_presenter_handle)
        if presenter is not None:
            presenter.present_banner(banner)
        else:
            self.banner.emit(banner)

    def _models(self) -> tuple[FeedPhotoModel, ...]:
        return tuple(FeedPhotoModel.from_photo(photo) for photo in self._photos)
