"""Recent search queries, most recent first."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from itertools import count
from typing import Protocol

import structlog

from common.observable import ValueSubject
from search.query import SearchQuery

log = structlog.get_logger()

DEFAULT_RECENT_QUERIES_LIMIT = 50


@dataclass(frozen=True)
class RecentQuery:
    identifier: str
    timestamp: datetime
    query: SearchQuery


class RecentQueriesRepository(Protocol):
    def create(self, query: SearchQuery) -> RecentQuery: ...

    def update(self, identifier: str) -> None: ...

    def delete(self, identifier: str) -> None: ...

    def fetch(self, identifier: str) -> RecentQuery | None: ...

    def fetch_page(self, offset: int, limit: int) -> list[RecentQuery]: ...

    def observe(self) -> ValueSubject[list[RecentQuery]]: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRecentQueriesRepository:
    """Keeps at most ``limit`` queries; the least recently used are evicted.

    Every change republishes the full list through ``observe()``.
    """

    def __init__(
        self,
        limit: int = DEFAULT_RECENT_QUERIES_LIMIT,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._limit = limit
        self._clock = clock
        self._recents: dict[str, RecentQuery] = {}
        # Breaks timestamp ties so ordering follows call order.
        self._sequence: dict[str, int] = {}
        self._counter = count()
        self._subject: ValueSubject[list[RecentQuery]] = ValueSubject([])

    def create(self, query: SearchQuery) -> RecentQuery:
        recent = RecentQuery(identifier=str(uuid.uuid4()), timestamp=self._clock(), query=query)
        self._recents[recent.identifier] = recent
        self._sequence[recent.identifier] = next(self._counter)

        for stale in self._sorted()[self._limit:]:
            self._remove(stale.identifier)

        log.debug("recents.created", identifier=recent.identifier, text_length=len(query.text))
        self._publish()
        return recent

    def update(self, identifier: str) -> None:
        """Mark a query as just used. Unknown identifiers are ignored."""
        recent = self._recents.get(identifier)
        if recent is None:
            return
        self._recents[identifier] = replace(recent, timestamp=self._clock())
        self._sequence[identifier] = next(self._counter)
        self._publish()

    def delete(self, identifier: str) -> None:
        if identifier not in self._recents:
            return
        self._remove(identifier)
        log.debug("recents.deleted", identifier=identifier)
        self._publish()

    def fetch(self, identifier: str) -> RecentQuery | None:
        return self._recents.get(identifier)

    def fetch_page(self, offset: int, limit: int) -> list[RecentQuery]:
        return self._sorted()[offset:offset + limit]

    def observe(self) -> ValueSubject[list[RecentQuery]]:
        return self._subject

    def _remove(self, identifier: str) -> None:
        del self._recents[identifier]
        del self._sequence[identifier]

    def _sorted(self) -> list[RecentQuery]:
        return sorted(
            self._recents.values(),
            key=lambda recent: (recent.timestamp, self._sequence[recent.identifier]),
            reverse=True,
        )

    def _publish(self) -> None:
        self._subject.send(self._sorted())
