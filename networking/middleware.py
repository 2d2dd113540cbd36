"""Middleware chain: ordered request transforms and response observers.

Request middleware is a pure ``(PreparedRequest) -> PreparedRequest`` function
applied left-to-right in registration order. Response middleware observes a
completed response and cannot alter control flow; an exception raised by one
is logged and the remaining middleware still run.
"""

from collections.abc import Callable, Iterable

import httpx
import structlog

from networking.request import PreparedRequest

log = structlog.get_logger()

RequestMiddleware = Callable[[PreparedRequest], PreparedRequest]
ResponseMiddleware = Callable[[httpx.Response, bytes | None, PreparedRequest], None]


def _middleware_name(middleware: object) -> str:
    return getattr(middleware, "__name__", type(middleware).__name__)


class MiddlewareChain:
    """Append-only lists of request and response middleware.

    Configured once at startup; holds no per-request state, so one chain can
    be shared by concurrent requests.
    """

    def __init__(self) -> None:
        self._request_middlewares: list[RequestMiddleware] = []
        self._response_middlewares: list[ResponseMiddleware] = []

    @classmethod
    def from_middlewares(
        cls,
        request_middlewares: Iterable[RequestMiddleware] = (),
        response_middlewares: Iterable[ResponseMiddleware] = (),
    ) -> "MiddlewareChain":
        chain = cls()
        for request_middleware in request_middlewares:
            chain.add_request_middleware(request_middleware)
        for response_middleware in response_middlewares:
            chain.add_response_middleware(response_middleware)
        return chain

    @property
    def request_middlewares(self) -> tuple[RequestMiddleware, ...]:
        return tuple(self._request_middlewares)

    @property
    def response_middlewares(self) -> tuple[ResponseMiddleware, ...]:
        return tuple(self._response_middlewares)

    def add_request_middleware(self, middleware: RequestMiddleware) -> None:
        self._request_middlewares.append(middleware)

    def add_response_middleware(self, middleware: ResponseMiddleware) -> None:
        self._response_middlewares.append(middleware)

    def process_request(self, request: PreparedRequest) -> PreparedRequest:
        """Fold the request through every request middleware in order.

        Exceptions propagate: a broken request transform must not send a
        half-configured request.
        """
        current = request
        for middleware in self._request_middlewares:
            current = middleware(current)
        return current

    def process_response(
        self,
        response: httpx.Response,
        body: bytes | None,
        request: PreparedRequest,
    ) -> None:
        """Notify every response middleware in order."""
        for middleware in self._response_middlewares:
            try:
                middleware(response, body, request)
            except Exception as exc:
                log.warning(
                    "middleware.response_failed",
                    middleware=_middleware_name(middleware),
                    error_type=type(exc).__name__,
                    url=request.url.split("?", 1)[0],
                )
