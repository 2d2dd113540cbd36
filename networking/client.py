"""Network client: the single entry point for typed, cancellable requests.

``request()`` builds the request synchronously, dispatches it as an asyncio
task and delivers exactly one Result to the completion callback, always on
the event loop the caller runs on. ``send()`` is the awaitable form for
callers that prefer exceptions.
"""

import asyncio
from typing import Any

import httpx
import structlog
from pydantic import BaseModel

from config.settings import AppSettings
from networking.endpoint import Endpoint
from networking.errors import NetworkError, classify_status
from networking.middleware import MiddlewareChain
from networking.request import CachePolicy, PreparedRequest
from networking.request_builder import RequestBuilder
from networking.response_processor import ResponseProcessor
from networking.tasks import Completion, RequestTask, Result
from observability.metrics import ExecutionTimer, RequestMetrics
from observability.telemetry import SpanManager

log = structlog.get_logger()


class NetworkClientConfiguration(BaseModel):
    """Client-wide request defaults.

    Attributes:
        base_url: Absolute URL every endpoint path is joined onto.
        cache_policy: Default cache policy for requests.
        timeout_sec: Default transport timeout in seconds.
    """

    base_url: str
    cache_policy: CachePolicy = CachePolicy.RELOAD_IGNORING_CACHE
    timeout_sec: float = 30.0

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "NetworkClientConfiguration":
        return cls(
            base_url=settings.api_base_url,
            cache_policy=CachePolicy(settings.cache_policy),
            timeout_sec=settings.request_timeout_sec,
        )


def classify_transport_error(exc: Exception) -> NetworkError:
    """Map an exception raised while sending into the error taxonomy."""
    if isinstance(exc, httpx.TimeoutException):
        return NetworkError.timeout(exc)
    if isinstance(exc, httpx.ConnectError):
        return NetworkError.no_connection(exc)
    if isinstance(exc, httpx.TransportError):
        return NetworkError.transport_error(exc)
    return NetworkError.unknown(exc)


class NetworkClient:
    """Issues endpoint requests over a shared httpx.AsyncClient.

    Stateless per call apart from the append-only middleware chain, so one
    instance can serve many concurrent requests.
    """

    def __init__(
        self,
        configuration: NetworkClientConfiguration,
        middleware_chain: MiddlewareChain | None = None,
        http_client: httpx.AsyncClient | None = None,
        metrics: RequestMetrics | None = None,
        span_manager: SpanManager | None = None,
    ) -> None:
        self.configuration = configuration
        self.middleware_chain = middleware_chain or MiddlewareChain()
        self.metrics = metrics or RequestMetrics()
        self._http = http_client or httpx.AsyncClient()
        self._owns_http = http_client is None
        self._spans = span_manager or SpanManager()
        self._request_builder = RequestBuilder(configuration.base_url)
        self._response_processor = ResponseProcessor()

    def request(
        self,
        endpoint: Endpoint,
        completion: Completion,
        cache_policy: CachePolicy | None = None,
        timeout_sec: float | None = None,
    ) -> RequestTask | None:
        """Dispatch a request and deliver its Result to ``completion``.

        Must be called from a running event loop.

        Args:
            endpoint: What to request and how to decode it.
            completion: Called exactly once with the Result, on the event loop.
            cache_policy: Overrides the configured cache policy.
            timeout_sec: Overrides the configured timeout.

        Returns:
            A cancellable handle, or None if the request could not be built
            (the error was already delivered synchronously).
        """
        try:
            prepared = self._build(endpoint, cache_policy, timeout_sec)
        except NetworkError as exc:
            log.warning(
                "network.request_build_failed",
                route=endpoint.route_name,
                error_kind=exc.kind.value,
            )
            completion(Result.failure(exc))
            return None
        except Exception as exc:
            log.error(
                "network.request_build_failed",
                route=endpoint.route_name,
                error_type=type(exc).__name__,
            )
            completion(Result.failure(NetworkError.unknown(exc)))
            return None

        task = asyncio.get_running_loop().create_task(self._perform(endpoint, prepared))

        def _deliver(finished: "asyncio.Task[Result[Any]]") -> None:
            if finished.cancelled():
                log.debug("network.request_cancelled", route=endpoint.route_name)
                completion(Result.failure(NetworkError.cancelled()))
            elif (exc := finished.exception()) is not None:
                log.error(
                    "network.request_crashed",
                    route=endpoint.route_name,
                    error_type=type(exc).__name__,
                )
                completion(Result.failure(NetworkError.unknown(exc)))
            else:
                completion(finished.result())

        task.add_done_callback(_deliver)
        return RequestTask(task)

    async def send(
        self,
        endpoint: Endpoint,
        cache_policy: CachePolicy | None = None,
        timeout_sec: float | None = None,
    ) -> Any:
        """Perform a request and return the decoded value.

        Raises:
            NetworkError: For every classified failure.
        """
        try:
            prepared = self._build(endpoint, cache_policy, timeout_sec)
        except NetworkError:
            raise
        except Exception as exc:
            raise NetworkError.unknown(exc) from exc

        result = await self._perform(endpoint, prepared)
        return result.unwrap()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    def _build(
        self,
        endpoint: Endpoint,
        cache_policy: CachePolicy | None,
        timeout_sec: float | None,
    ) -> PreparedRequest:
        return self._request_builder.build_request(
            endpoint=endpoint,
            cache_policy=cache_policy or self.configuration.cache_policy,
            timeout_sec=timeout_sec if timeout_sec is not None else self.configuration.timeout_sec,
            middleware_chain=self.middleware_chain,
        )

    async def _perform(self, endpoint: Endpoint, prepared: PreparedRequest) -> Result[Any]:
        """Send, classify and decode. Returns a Result; only cancellation raises."""
        route = endpoint.route_name
        span = self._spans.create_request_span(prepared.method.value, route)
        status_code: int | None = None
        result: Result[Any]

        log.debug("network.request_dispatched", method=prepared.method.value, route=route)

        try:
            with ExecutionTimer() as timer:
                http_request = self._http.build_request(
                    prepared.method.value,
                    prepared.url,
                    headers=prepared.headers,
                    content=prepared.body,
                    timeout=prepared.timeout_sec,
                )
                try:
                    response = await self._http.send(http_request)
                except Exception as exc:
                    result = Result.failure(classify_transport_error(exc))
                else:
                    status_code = getattr(response, "status_code", None)
                    result = self._handle_response(endpoint, prepared, response)
        except asyncio.CancelledError:
            self._spans.record_result(span, error_kind="cancelled")
            span.end()
            raise

        outcome = "success" if result.error is None else result.error.kind.value
        self.metrics.record_request(route, timer.elapsed_ms, outcome)
        self._spans.record_result(
            span,
            status_code=status_code,
            error_kind=None if result.error is None else outcome,
        )
        span.end()

        if result.error is not None:
            log.warning(
                "network.request_failed",
                method=prepared.method.value,
                route=route,
                status_code=status_code,
                error_kind=outcome,
                latency_ms=round(timer.elapsed_ms, 1),
            )
        else:
            log.debug(
                "network.request_succeeded",
                method=prepared.method.value,
                route=route,
                status_code=status_code,
                latency_ms=round(timer.elapsed_ms, 1),
            )
        return result

    def _handle_response(
        self,
        endpoint: Endpoint,
        prepared: PreparedRequest,
        response: Any,
    ) -> Result[Any]:
        if not isinstance(response, httpx.Response):
            return Result.failure(NetworkError.invalid_response())

        body = response.content or None
        self.middleware_chain.process_response(response, body, prepared)

        status_error = classify_status(response.status_code)
        if status_error is not None:
            return Result.failure(status_error)

        return self._response_processor.process(body, endpoint.response_type)
