"""Unit tests for endpoint descriptors and the prepared request."""

from typing import Any

import pytest
from pydantic import ValidationError

from networking.endpoint import Endpoint, EndpointBuilder, HTTPMethod
from networking.request import CachePolicy, PreparedRequest


class TestEndpointBuilder:
    def test_defaults(self) -> None:
        endpoint = EndpointBuilder().path("/photos").build()
        assert endpoint.method is HTTPMethod.GET
        assert endpoint.params == {}
        assert endpoint.headers == {}
        assert endpoint.body is None
        assert endpoint.response_type is Any

    def test_fluent_configuration(self) -> None:
        endpoint = (
            EndpointBuilder()
            .path("/collections")
            .post()
            .add_param("page", 2)
            .add_param("featured", True)
            .content_type("application/json")
            .bearer_token("secret")
            .body(b'{"title": "x"}')
            .build(dict[str, Any])
        )
        assert endpoint.method is HTTPMethod.POST
        assert endpoint.params == {"page": "2", "featured": "true"}
        assert endpoint.headers["Content-Type"] == "application/json"
        assert endpoint.headers["Authorization"] == "Bearer secret"
        assert endpoint.body == b'{"title": "x"}'
        assert endpoint.response_type == dict[str, Any]

    def test_builder_is_immutable(self) -> None:
        base = EndpointBuilder().path("/photos")
        with_page = base.add_param("page", 1)
        assert base.build().params == {}
        assert with_page.build().params == {"page": "1"}

    @pytest.mark.parametrize(
        ("builder_method", "expected"),
        [
            ("get", HTTPMethod.GET),
            ("delete", HTTPMethod.DELETE),
        ],
    )
    def test_method_shortcuts(self, builder_method: str, expected: HTTPMethod) -> None:
        builder = getattr(EndpointBuilder().path("/x"), builder_method)()
        assert builder.build().method is expected


class TestEndpoint:
    def test_is_frozen(self) -> None:
        endpoint = Endpoint(path="/photos")
        with pytest.raises(ValidationError):
            endpoint.path = "/other"  # type: ignore[misc]

    def test_response_type_defaults_to_any(self) -> None:
        assert Endpoint(path="/photos").response_type is Any

    def test_route_name_defaults_to_path(self) -> None:
        assert Endpoint(path="/photos").route_name == "/photos"
        assert Endpoint(path="/photos/abc", route="/photos/{id}").route_name == "/photos/{id}"


class TestPreparedRequest:
    def _request(self) -> PreparedRequest:
        return PreparedRequest(
            url="https://api.example.com/photos",
            method=HTTPMethod.GET,
            headers={"Accept": "application/json"},
        )

    def test_header_lookup_is_case_insensitive(self) -> None:
        assert self._request().header("accept") == "application/json"
        assert self._request().header("X-Missing") is None

    def test_with_header_replaces_existing(self) -> None:
        request = self._request().with_header("ACCEPT", "text/plain")
        assert request.headers == {"ACCEPT": "text/plain"}

    def test_with_header_returns_copy(self) -> None:
        original = self._request()
        original.with_header("X-Trace", "1")
        assert original.header("X-Trace") is None

    def test_without_header(self) -> None:
        assert self._request().without_header("accept").headers == {}


class TestCachePolicy:
    def test_cache_control_values(self) -> None:
        assert CachePolicy.USE_PROTOCOL.cache_control is None
        assert CachePolicy.RELOAD_IGNORING_CACHE.cache_control == "no-cache"
        assert CachePolicy.RETURN_CACHE_ELSE_LOAD.cache_control == "max-stale"
        assert CachePolicy.RETURN_CACHE_DONT_LOAD.cache_control == "only-if-cached"
