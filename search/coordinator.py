"""Search screen coordinator: debounced result-count probing and submission.

Every text or filter change produces a candidate query that goes through a
debounce (``loop.call_later``). When it fires, a probe search for one
result runs and only ``total`` is read, to label the search button.

Stale probes are dropped twice: before dispatch, if the text changed while
the debounce was pending, and before consuming the result, if the text
changed or a newer probe was dispatched. A new probe cancels the old one.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict

from common.banner import Banner
from common.navigation import (
    BannerPresenter,
    ResponderHandle,
    ResponderRegistry,
    SearchBarOwner,
    SearchNavigationResponder,
)
from common.observable import Signal, ValueSubject
from networking.tasks import CancellableTask, Result
from observability.telemetry import hash_text
from photos.models import PhotosSearchResult
from photos.repositories import SearchRepository
from search.filters import FilterGroup, FilterGroupsBuilder, SearchFilter
from search.query import SearchQuery, SearchQueryBuilder
from search.recents import RecentQueriesRepository, RecentQuery

log = structlog.get_logger()

DEFAULT_DEBOUNCE_SEC = 0.5
PROBE_PAGE = 1
DEFAULT_PROBE_PAGE_SIZE = 1


class SearchButtonStateKind(Enum):
    HIDDEN = "hidden"
    LOADING = "loading"
    RESULT_COUNT = "result_count"
    EMPTY = "empty"


class SearchButtonState(BaseModel):
    """State of the search button.

    Attributes:
        kind: Which affordance to show.
        count: Thousands-separated result total, set for RESULT_COUNT only.
    """

    model_config = ConfigDict(frozen=True)

    kind: SearchButtonStateKind
    count: str = ""

    @classmethod
    def hidden(cls) -> "SearchButtonState":
        return cls(kind=SearchButtonStateKind.HIDDEN)

    @classmethod
    def loading(cls) -> "SearchButtonState":
        return cls(kind=SearchButtonStateKind.LOADING)

    @classmethod
    def result_count(cls, total: int) -> "SearchButtonState":
        return cls(kind=SearchButtonStateKind.RESULT_COUNT, count=f"{total:,}")

    @classmethod
    def empty(cls) -> "SearchButtonState":
        return cls(kind=SearchButtonStateKind.EMPTY)


@dataclass(frozen=True)
class RecentQueryModel:
    id: str
    text: str


class SearchCoordinator:
    """Coordinates the search screen.

    Outputs:
        button_state: ``SearchButtonState`` driven by the probe lifecycle.
        filter_groups: Filter options with the current selection marked.
        recent_queries: Recent queries, most recent first.
        banner: Probe failures, emitted only when no banner presenter is
            registered.
    """

    def __init__(
        self,
        search_repository: SearchRepository,
        recent_queries: RecentQueriesRepository,
        registry: ResponderRegistry,
        debounce_sec: float = DEFAULT_DEBOUNCE_SEC,
        probe_page_size: int = DEFAULT_PROBE_PAGE_SIZE,
        responder_handle: ResponderHandle | None = None,
        banner_presenter_handle: ResponderHandle | None = None,
        search_bar_owner_handle: ResponderHandle | None = None,
    ) -> None:
        self.responder_handle = responder_handle
        self.banner_presenter_handle = banner_presenter_handle
        self.search_bar_owner_handle = search_bar_owner_handle

        self.button_state: ValueSubject[SearchButtonState] = ValueSubject(SearchButtonState.hidden())
        self.filter_groups: ValueSubject[list[FilterGroup]] = ValueSubject([])
        self.recent_queries: ValueSubject[list[RecentQueryModel]] = ValueSubject([])
        self.banner: Signal[Banner] = Signal()

        self._search_repository = search_repository
        self._recent_queries_repository = recent_queries
        self._registry = registry
        self._debounce_sec = debounce_sec
        self._probe_page_size = probe_page_size

        self._query_builder = SearchQueryBuilder()
        self._filter_groups_builder = FilterGroupsBuilder()
        self._current_text = ""
        self._recents: list[RecentQuery] = []
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._probe_task: CancellableTask | None = None
        self._dispatch_id = 0

        self._unsubscribe_recents = recent_queries.observe().subscribe(self._on_recents)
        self._publish_filter_groups(self._query_builder.build())

    @property
    def current_text(self) -> str:
        return self._current_text

    def update_text(self, text: str) -> None:
        """Search bar text changed."""
        self._current_text = text
        self._enqueue(self._query_builder.text(text).build())

    def select_filter(self, selected: SearchFilter) -> None:
        query = self._query_builder.filter(selected).build()
        self._enqueue(query)
        self._publish_filter_groups(query)

    def select_recent_query(self, identifier: str) -> None:
        """Restore a recent query, show its results and bump its recency."""
        recent = next((r for r in self._recents if r.identifier == identifier), None)
        if recent is None:
            return

        query = self._query_builder.query(recent.query).build()
        self._current_text = query.text
        self._enqueue(query)

        owner: SearchBarOwner | None = self._registry.resolve(self.search_bar_owner_handle)
        if owner is not None:
            owner.set_text(query.text)
        self._publish_filter_groups(query)

        self._route_to_results(query)
        self._recent_queries_repository.update(identifier)

    def delete_recent_query(self, identifier: str) -> None:
        self._recent_queries_repository.delete(identifier)

    def submit(self) -> None:
        """Open the results for the current query right away and remember it."""
        query = self._query_builder.build()
        if not query.text:
            return
        log.info("search.submitted", text_length=len(query.text), text_hash=hash_text(query.text))
        self._route_to_results(query)
        self._recent_queries_repository.create(query)

    def close(self) -> None:
        """Stop the pipeline and detach from the recent-queries store."""
        self._cancel_debounce()
        self._cancel_probe()
        self._unsubscribe_recents()

    def _enqueue(self, query: SearchQuery) -> None:
        self._cancel_debounce()
        if not query.text:
            self._cancel_probe()
            self.button_state.send(SearchButtonState.hidden())
            return

        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(self._debounce_sec, self._dispatch, query)

    def _dispatch(self, query: SearchQuery) -> None:
        self._debounce_handle = None
        if query.text != self._current_text:
            log.debug("search.probe_discarded", stage="dispatch")
            return

        self._cancel_probe()
        self._dispatch_id += 1
        dispatch_id = self._dispatch_id

        self.button_state.send(SearchButtonState.loading())
        log.debug("search.probe_dispatched", dispatch_id=dispatch_id, text_length=len(query.text))
        self._probe_task = self._search_repository.search_photos(
            query,
            PROBE_PAGE,
            self._probe_page_size,
            lambda result: self._on_probe(dispatch_id, query, result),
        )

    def _on_probe(
        self,
        dispatch_id: int,
        query: SearchQuery,
        result: Result[PhotosSearchResult],
    ) -> None:
        if dispatch_id != self._dispatch_id or query.text != self._current_text:
            log.debug("search.probe_discarded", stage="result", dispatch_id=dispatch_id)
            return

        self._probe_task = None
        if result.error is not None:
            if result.error.is_cancelled:
                return
            log.warning("search.probe_failed", error_kind=result.error.kind.value)
            self._present(Banner.error("Couldn't complete the search", "Try again later"))
            self.button_state.send(SearchButtonState.hidden())
            return

        total = result.value.total if result.value is not None else 0
        if total == 0:
            self.button_state.send(SearchButtonState.empty())
        else:
            self.button_state.send(SearchButtonState.result_count(total))

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _cancel_probe(self) -> None:
        if self._probe_task is not None:
            self._probe_task.cancel()
            self._probe_task = None
        # Invalidates whatever completion the cancelled probe still delivers.
        self._dispatch_id += 1

    def _on_recents(self, recents: list[RecentQuery]) -> None:
        self._recents = list(recents)
        self.recent_queries.send(
            [RecentQueryModel(id=recent.identifier, text=recent.query.text) for recent in recents]
        )

    def _publish_filter_groups(self, query: SearchQuery) -> None:
        self.filter_groups.send(self._filter_groups_builder.build_filter_groups(dict(query.filters)))

    def _route_to_results(self, query: SearchQuery) -> None:
        responder: SearchNavigationResponder | None = self._registry.resolve(self.responder_handle)
        if responder is not None:
            responder.route_to_search_results(query)

    def _present(self, banner: Banner) -> None:
        presenter: BannerPresenter | None = self._registry.resolve(self.banner_presenter_handle)
        if presenter is not None:
            presenter.present_banner(banner)
        else:
            self.banner.emit(banner)
