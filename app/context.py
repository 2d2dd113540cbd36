"""Application context, built once at startup and passed to every component.

Holds the configured network client, repositories, stores and responder
registry, and creates coordinators on demand.
"""

from dataclasses import dataclass, field

import httpx
import structlog

from common.navigation import ResponderHandle, ResponderRegistry
from config.logging import configure_logging
from config.settings import AppSettings
from detail.service import PhotoDetailCoordinator, PhotoDetailService
from favorites.repository import InMemoryFavoritesRepository
from feed.coordinator import PhotoFeedCoordinator
from feed.use_case import FetchPhotosUseCase
from networking.client import NetworkClient, NetworkClientConfiguration
from networking.middleware import MiddlewareChain
from observability.metrics import RequestMetrics
from observability.telemetry import SpanManager
from photos.repositories import PhotoRepository, SearchRepository
from search.coordinator import SearchCoordinator
from search.query import SearchQuery
from search.recents import InMemoryRecentQueriesRepository
from unsplash.middlewares import (
    AuthorizationMiddleware,
    DefaultHeaderMiddleware,
    RateLimitMiddleware,
)

log = structlog.get_logger()


@dataclass
class AppContext:
    """Everything the coordinators depend on.

    Attributes:
        settings: Loaded application settings.
        client: Shared network client.
        rate_limit: Response middleware holding the latest rate-limit reading.
        photo_repository: Editorial feed and single-photo access.
        search_repository: Photo search.
        favorites: Favorite photos store.
        recent_queries: Recent search queries store.
        registry: Navigation responders, looked up by handle.
        metrics: Per-route request metrics recorded by the client.
    """

    settings: AppSettings
    client: NetworkClient
    rate_limit: RateLimitMiddleware
    photo_repository: PhotoRepository
    search_repository: SearchRepository
    favorites: InMemoryFavoritesRepository
    recent_queries: InMemoryRecentQueriesRepository
    registry: ResponderRegistry = field(default_factory=ResponderRegistry)

    @property
    def metrics(self) -> RequestMetrics:
        return self.client.metrics

    def make_feed_coordinator(
        self,
        query: SearchQuery | None = None,
        responder_handle: ResponderHandle | None = None,
        banner_presenter_handle: ResponderHandle | None = None,
    ) -> PhotoFeedCoordinator:
        """Feed coordinator for the editorial feed, or for search results when given a query."""
        return PhotoFeedCoordinator(
            use_case=FetchPhotosUseCase(self.photo_repository, self.search_repository),
            registry=self.registry,
            query=query,
            page_size=self.settings.feed_page_size,
            prefetch_threshold=self.settings.prefetch_threshold,
            responder_handle=responder_handle,
            banner_presenter_handle=banner_presenter_handle,
        )

    def make_search_coordinator(
        self,
        responder_handle: ResponderHandle | None = None,
        banner_presenter_handle: ResponderHandle | None = None,
        search_bar_owner_handle: ResponderHandle | None = None,
    ) -> SearchCoordinator:
        return SearchCoordinator(
            search_repository=self.search_repository,
            recent_queries=self.recent_queries,
            registry=self.registry,
            debounce_sec=self.settings.search_debounce_sec,
            probe_page_size=self.settings.search_probe_page_size,
            responder_handle=responder_handle,
            banner_presenter_handle=banner_presenter_handle,
            search_bar_owner_handle=search_bar_owner_handle,
        )

    def make_detail_coordinator(
        self,
        photo_id: str,
        responder_handle: ResponderHandle | None = None,
    ) -> PhotoDetailCoordinator:
        return PhotoDetailCoordinator(
            photo_id=photo_id,
            service=PhotoDetailService(self.photo_repository, self.favorites),
            registry=self.registry,
            responder_handle=responder_handle,
        )

    async def aclose(self) -> None:
        await self.client.aclose()


def build_middleware_chain(settings: AppSettings, rate_limit: RateLimitMiddleware) -> MiddlewareChain:
    return MiddlewareChain.from_middlewares(
        request_middlewares=[
            DefaultHeaderMiddleware.for_api_version(settings.api_version),
            AuthorizationMiddleware(settings.access_key),
        ],
        response_middlewares=[rate_limit],
    )


def build_context(
    settings: AppSettings | None = None,
    http_client: httpx.AsyncClient | None = None,
    span_manager: SpanManager | None = None,
) -> AppContext:
    """Wire the application.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
        http_client: Transport to share; the client creates and owns one when omitted.
        span_manager: Tracing span factory; a default one when omitted.

    Returns:
        A ready AppContext. Call ``aclose()`` on shutdown.
    """
    settings = settings or AppSettings()
    configure_logging(settings.environment, settings.log_level)

    rate_limit = RateLimitMiddleware()
    client = NetworkClient(
        configuration=NetworkClientConfiguration.from_settings(settings),
        middleware_chain=build_middleware_chain(settings, rate_limit),
        http_client=http_client,
        span_manager=span_manager,
    )

    if not settings.access_key:
        log.warning("app.access_key_missing")
    log.info(
        "app.context_built",
        environment=settings.environment,
        api_base_url=settings.api_base_url,
        api_version=settings.api_version,
    )

    return AppContext(
        settings=settings,
        client=client,
        rate_limit=rate_limit,
        photo_repository=PhotoRepository(client),
        search_repository=SearchRepository(client),
        favorites=InMemoryFavoritesRepository(),
        recent_queries=InMemoryRecentQueriesRepository(limit=settings.recent_queries_limit),
    )
