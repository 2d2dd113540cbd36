"""Unit tests for the network client."""

import asyncio
from collections.abc import AsyncIterator

import httpx
import pytest
from respx import MockRouter

from config.settings import AppSettings
from networking.client import NetworkClient, NetworkClientConfiguration, classify_transport_error
from networking.endpoint import Endpoint, EndpointBuilder
from networking.errors import NetworkError, NetworkErrorKind
from networking.middleware import MiddlewareChain
from networking.request import CachePolicy, PreparedRequest
from tests.conftest import BASE_URL, CompletionRecorder, photo_payload
from unsplash.dto import PhotoDTO

PHOTO_URL = f"{BASE_URL}/photos/abc"


def photo_endpoint() -> Endpoint:
    return EndpointBuilder().path("/photos/abc").build(PhotoDTO)


@pytest.fixture
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def client(http_client: httpx.AsyncClient) -> NetworkClient:
    return NetworkClient(NetworkClientConfiguration(base_url=BASE_URL), http_client=http_client)


def slow_client(delay_sec: float = 10.0) -> httpx.AsyncClient:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(delay_sec)
        return httpx.Response(200, json=photo_payload("abc"))

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestRequestSuccess:
    async def test_decodes_response(self, client: NetworkClient, respx_mock: MockRouter) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(200, json=photo_payload("abc")))
        recorder = CompletionRecorder()

        task = client.request(photo_endpoint(), recorder)
        assert task is not None
        await task.wait()

        assert len(recorder.results) == 1
        assert recorder.last.is_success
        assert isinstance(recorder.last.value, PhotoDTO)
        assert recorder.last.value.id == "abc"

    async def test_completion_is_asynchronous(self, client: NetworkClient, respx_mock: MockRouter) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(200, json=photo_payload("abc")))
        recorder = CompletionRecorder()

        task = client.request(photo_endpoint(), recorder)

        assert recorder.results == []
        await task.wait()
        assert len(recorder.results) == 1

    async def test_sends_prepared_headers(self, http_client: httpx.AsyncClient, respx_mock: MockRouter) -> None:
        route = respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(200, json=photo_payload("abc")))
        chain = MiddlewareChain.from_middlewares(
            request_middlewares=[lambda request: request.with_header("Authorization", "Client-ID key")]
        )
        client = NetworkClient(
            NetworkClientConfiguration(base_url=BASE_URL),
            middleware_chain=chain,
            http_client=http_client,
        )

        task = client.request(photo_endpoint(), CompletionRecorder())
        await task.wait()

        sent = route.calls.last.request
        assert sent.headers["Authorization"] == "Client-ID key"
        assert sent.headers["Cache-Control"] == "no-cache"

    async def test_cache_policy_override(self, client: NetworkClient, respx_mock: MockRouter) -> None:
        route = respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(200, json=photo_payload("abc")))

        task = client.request(
            photo_endpoint(),
            CompletionRecorder(),
            cache_policy=CachePolicy.RETURN_CACHE_DONT_LOAD,
        )
        await task.wait()

        assert route.calls.last.request.headers["Cache-Control"] == "only-if-cached"

    async def test_records_metrics(self, client: NetworkClient, respx_mock: MockRouter) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(200, json=photo_payload("abc")))

        task = client.request(photo_endpoint(), CompletionRecorder())
        await task.wait()

        stats = client.metrics.get_route_stats("/photos/abc")
        assert stats["total_requests"] == 1
        assert stats["success_count"] == 1


class TestStatusClassification:
    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (400, NetworkErrorKind.CLIENT_ERROR),
            (403, NetworkErrorKind.CLIENT_ERROR),
            (429, NetworkErrorKind.CLIENT_ERROR),
            (500, NetworkErrorKind.SERVER_ERROR),
            (503, NetworkErrorKind.SERVER_ERROR),
            (304, NetworkErrorKind.INVALID_RESPONSE),
        ],
    )
    async def test_non_success_status(
        self,
        client: NetworkClient,
        respx_mock: MockRouter,
        status: int,
        kind: NetworkErrorKind,
    ) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(status, json={"errors": ["nope"]}))
        recorder = CompletionRecorder()

        task = client.request(photo_endpoint(), recorder)
        await task.wait()

        assert recorder.last.error is not None
        assert recorder.last.error.kind is kind
        if kind is not NetworkErrorKind.INVALID_RESPONSE:
            assert recorder.last.error.status_code == status

    async def test_empty_body_is_invalid_data(self, client: NetworkClient, respx_mock: MockRouter) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(200))
        recorder = CompletionRecorder()

        task = client.request(photo_endpoint(), recorder)
        await task.wait()

        assert recorder.last.error.kind is NetworkErrorKind.INVALID_DATA

    async def test_undecodable_body(self, client: NetworkClient, respx_mock: MockRouter) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(200, content=b'{"id": 1}'))
        recorder = CompletionRecorder()

        task = client.request(photo_endpoint(), recorder)
        await task.wait()

        assert recorder.last.error.kind is NetworkErrorKind.DECODING_ERROR

    async def test_response_middleware_sees_error_responses(
        self,
        http_client: httpx.AsyncClient,
        respx_mock: MockRouter,
    ) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(429, headers={"X-Ratelimit-Remaining": "0"}))
        seen: list[int] = []
        chain = MiddlewareChain.from_middlewares(
            response_middlewares=[lambda response, body, request: seen.append(response.status_code)]
        )
        client = NetworkClient(
            NetworkClientConfiguration(base_url=BASE_URL),
            middleware_chain=chain,
            http_client=http_client,
        )

        task = client.request(photo_endpoint(), CompletionRecorder())
        await task.wait()

        assert seen == [429]

    async def test_failing_response_middleware_does_not_change_outcome(
        self,
        http_client: httpx.AsyncClient,
        respx_mock: MockRouter,
    ) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(200, json=photo_payload("abc")))

        def broken(response: httpx.Response, body: bytes | None, request: PreparedRequest) -> None:
            raise KeyError("missing")

        client = NetworkClient(
            NetworkClientConfiguration(base_url=BASE_URL),
            middleware_chain=MiddlewareChain.from_middlewares(response_middlewares=[broken]),
            http_client=http_client,
        )
        recorder = CompletionRecorder()

        task = client.request(photo_endpoint(), recorder)
        await task.wait()

        assert recorder.last.is_success


class TestTransportFailures:
    @pytest.mark.parametrize(
        ("exception", "kind"),
        [
            (httpx.ConnectError("refused"), NetworkErrorKind.NO_CONNECTION),
            (httpx.ReadTimeout("slow"), NetworkErrorKind.TIMEOUT),
            (httpx.ConnectTimeout("slow"), NetworkErrorKind.TIMEOUT),
            (httpx.RemoteProtocolError("garbled"), NetworkErrorKind.TRANSPORT_ERROR),
            (httpx.ReadError("connection reset"), NetworkErrorKind.TRANSPORT_ERROR),
            (httpx.WriteError("broken pipe"), NetworkErrorKind.TRANSPORT_ERROR),
        ],
    )
    async def test_classified(
        self,
        client: NetworkClient,
        respx_mock: MockRouter,
        exception: Exception,
        kind: NetworkErrorKind,
    ) -> None:
        respx_mock.get(PHOTO_URL).mock(side_effect=exception)
        recorder = CompletionRecorder()

        task = client.request(photo_endpoint(), recorder)
        await task.wait()

        assert len(recorder.results) == 1
        assert recorder.last.error.kind is kind

    def test_classify_unrelated_exception(self) -> None:
        assert classify_transport_error(RuntimeError("x")).kind is NetworkErrorKind.UNKNOWN

    async def test_failure_recorded_in_metrics(self, client: NetworkClient, respx_mock: MockRouter) -> None:
        respx_mock.get(PHOTO_URL).mock(side_effect=httpx.ConnectError("refused"))

        task = client.request(photo_endpoint(), CompletionRecorder())
        await task.wait()

        stats = client.metrics.get_route_stats("/photos/abc")
        assert stats["failure_count"] == 1
        assert stats["outcomes"] == {"no_connection": 1}


class TestBuildFailures:
    async def test_invalid_base_url_delivers_synchronously(self, http_client: httpx.AsyncClient) -> None:
        client = NetworkClient(NetworkClientConfiguration(base_url="not a url"), http_client=http_client)
        recorder = CompletionRecorder()

        task = client.request(photo_endpoint(), recorder)

        assert task is None
        assert len(recorder.results) == 1
        assert recorder.last.error.kind is NetworkErrorKind.INVALID_URL
        assert recorder.last.error.detail == "not a url"

    async def test_request_middleware_error_is_unknown(self, http_client: httpx.AsyncClient) -> None:
        def broken(request: PreparedRequest) -> PreparedRequest:
            raise RuntimeError("no token")

        client = NetworkClient(
            NetworkClientConfiguration(base_url=BASE_URL),
            middleware_chain=MiddlewareChain.from_middlewares(request_middlewares=[broken]),
            http_client=http_client,
        )
        recorder = CompletionRecorder()

        task = client.request(photo_endpoint(), recorder)

        assert task is None
        assert recorder.last.error.kind is NetworkErrorKind.UNKNOWN
        assert isinstance(recorder.last.error.cause, RuntimeError)


class TestCancellation:
    async def test_cancel_before_completion(self) -> None:
        async with slow_client() as http_client:
            client = NetworkClient(NetworkClientConfiguration(base_url=BASE_URL), http_client=http_client)
            recorder = CompletionRecorder()

            task = client.request(photo_endpoint(), recorder)
            await asyncio.sleep(0)
            task.cancel()
            await task.wait()

        assert len(recorder.results) == 1
        assert recorder.last.error.kind is NetworkErrorKind.CANCELLED
        assert task.cancelled

    async def test_cancel_is_idempotent(self) -> None:
        async with slow_client() as http_client:
            client = NetworkClient(NetworkClientConfiguration(base_url=BASE_URL), http_client=http_client)
            recorder = CompletionRecorder()

            task = client.request(photo_endpoint(), recorder)
            task.cancel()
            task.cancel()
            await task.wait()
            task.cancel()

        assert len(recorder.results) == 1
        assert recorder.last.error.is_cancelled

    async def test_cancel_after_completion_is_noop(self, client: NetworkClient, respx_mock: MockRouter) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(200, json=photo_payload("abc")))
        recorder = CompletionRecorder()

        task = client.request(photo_endpoint(), recorder)
        await task.wait()
        task.cancel()
        await asyncio.sleep(0)

        assert len(recorder.results) == 1
        assert recorder.last.is_success
        assert not task.cancelled

    async def test_concurrent_requests_complete_independently(self) -> None:
        async with slow_client(delay_sec=0.01) as http_client:
            client = NetworkClient(NetworkClientConfiguration(base_url=BASE_URL), http_client=http_client)
            first, second = CompletionRecorder(), CompletionRecorder()

            first_task = client.request(photo_endpoint(), first)
            second_task = client.request(photo_endpoint(), second)
            first_task.cancel()
            await first_task.wait()
            await second_task.wait()

        assert first.last.error.is_cancelled
        assert second.last.is_success


class TestSend:
    async def test_returns_value(self, client: NetworkClient, respx_mock: MockRouter) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(200, json=photo_payload("abc")))

        dto = await client.send(photo_endpoint())

        assert dto.id == "abc"

    async def test_raises_network_error(self, client: NetworkClient, respx_mock: MockRouter) -> None:
        respx_mock.get(PHOTO_URL).mock(return_value=httpx.Response(404, json={}))

        with pytest.raises(NetworkError) as exc_info:
            await client.send(photo_endpoint())

        assert exc_info.value.kind is NetworkErrorKind.CLIENT_ERROR
        assert exc_info.value.status_code == 404

    async def test_raises_build_error(self, http_client: httpx.AsyncClient) -> None:
        client = NetworkClient(NetworkClientConfiguration(base_url=""), http_client=http_client)

        with pytest.raises(NetworkError) as exc_info:
            await client.send(photo_endpoint())

        assert exc_info.value.kind is NetworkErrorKind.INVALID_URL

    async def test_cancellation_propagates(self) -> None:
        async with slow_client() as http_client:
            client = NetworkClient(NetworkClientConfiguration(base_url=BASE_URL), http_client=http_client)
            pending = asyncio.ensure_future(client.send(photo_endpoint()))
            await asyncio.sleep(0)
            pending.cancel()

            with pytest.raises(asyncio.CancelledError):
                await pending


class TestLifecycle:
    async def test_aclose_keeps_injected_client_open(self, http_client: httpx.AsyncClient) -> None:
        client = NetworkClient(NetworkClientConfiguration(base_url=BASE_URL), http_client=http_client)
        await client.aclose()
        assert not http_client.is_closed

    async def test_aclose_closes_owned_client(self) -> None:
        client = NetworkClient(NetworkClientConfiguration(base_url=BASE_URL))
        await client.aclose()
        assert client._http.is_closed

    def test_configuration_from_settings(self, settings: AppSettings) -> None:
        configuration = NetworkClientConfiguration.from_settings(settings)
        assert configuration.base_url == BASE_URL
        assert configuration.cache_policy is CachePolicy.RELOAD_IGNORING_CACHE
        assert configuration.timeout_sec == 30.0
