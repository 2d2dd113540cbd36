"""Request/response middleware for the photo API.

Authorization and default headers are injected as request middleware;
rate-limit headers are observed by response middleware and only reported.
"""

from collections.abc import Callable
from dataclasses import dataclass

import httpx
import structlog

from networking.request import PreparedRequest

log = structlog.get_logger()

RATE_LIMIT_HEADER = "X-Ratelimit-Limit"
RATE_LIMIT_REMAINING_HEADER = "X-Ratelimit-Remaining"


class AuthorizationMiddleware:
    """Sets ``Authorization: Client-ID <access key>`` on every request."""

    def __init__(self, access_key: str) -> None:
        self._access_key = access_key

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        return request.with_header("Authorization", f"Client-ID {self._access_key}")


class DefaultHeaderMiddleware:
    """Adds default headers the endpoint did not set itself."""

    def __init__(self, headers: dict[str, str]) -> None:
        self._headers = dict(headers)

    @classmethod
    def for_api_version(cls, version: str) -> "DefaultHeaderMiddleware":
        return cls({"Accept-Version": version, "Accept": "application/json"})

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        for name, value in self._headers.items():
            if request.header(name) is None:
                request = request.with_header(name, value)
        return request


@dataclass(frozen=True)
class RateLimit:
    limit: int
    remaining: int


class RateLimitMiddleware:
    """Reads rate-limit headers and reports them.

    Has no effect on the request outcome. ``last_rate_limit`` keeps the most
    recent observation for health reporting.
    """

    def __init__(self, on_rate_limit_change: Callable[[RateLimit], None] | None = None) -> None:
        self._on_rate_limit_change = on_rate_limit_change
        self.last_rate_limit: RateLimit | None = None

    def __call__(
        self,
        response: httpx.Response,
        body: bytes | None,
        request: PreparedRequest,
    ) -> None:
        rate_limit = parse_rate_limit(response.headers)
        if rate_limit is None:
            return

        self.last_rate_limit = rate_limit
        log.info(
            "rate_limit.observed",
            limit=rate_limit.limit,
            remaining=rate_limit.remaining,
        )
        if self._on_rate_limit_change is not None:
            self._on_rate_limit_change(rate_limit)


def parse_rate_limit(headers: httpx.Headers) -> RateLimit | None:
    """Parse rate-limit headers; None unless both are present and integral."""
    limit = headers.get(RATE_LIMIT_HEADER)
    remaining = headers.get(RATE_LIMIT_REMAINING_HEADER)
    if limit is None or remaining is None:
        return None
    try:
        return RateLimit(limit=int(limit), remaining=int(remaining))
    except ValueError:
        return None
