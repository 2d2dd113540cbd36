"""Endpoint descriptors: transport-independent descriptions of REST calls.

An Endpoint is built once per request and never mutated. ``response_type``
is the type the response body is decoded into (any type pydantic's
TypeAdapter accepts).
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HTTPMethod(str, Enum):
    """HTTP methods supported by the client."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class Endpoint(BaseModel):
    """Immutable description of a REST call.

    Attributes:
        path: Path appended to the client's base URL.
        method: HTTP method.
        params: Query parameters; order is irrelevant.
        headers: Request headers specific to this call.
        body: Raw request body, sent verbatim.
        response_type: Type the response body is decoded into.
        route: Path template used for metrics and spans; defaults to ``path``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: str
    method: HTTPMethod = HTTPMethod.GET
    params: dict[str, str] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes | None = None
    response_type: Any = Field(default_factory=lambda: Any)
    route: str = ""

    @property
    def route_name(self) -> str:
        return self.route or self.path


def _param_value(value: str | int | float | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class EndpointBuilder:
    """Fluent, immutable builder for Endpoint descriptors.

    Every method returns a new builder, so partially configured builders can
    be shared safely.
    """

    _path: str = ""
    _method: HTTPMethod = HTTPMethod.GET
    _params: dict[str, str] = field(default_factory=dict)
    _headers: dict[str, str] = field(default_factory=dict)
    _body: bytes | None = None

    def path(self, path: str) -> "EndpointBuilder":
        return replace(self, _path=path)

    def method(self, method: HTTPMethod) -> "EndpointBuilder":
        return replace(self, _method=method)

    def get(self) -> "EndpointBuilder":
        return self.method(HTTPMethod.GET)

    def post(self) -> "EndpointBuilder":
        return self.method(HTTPMethod.POST)

    def delete(self) -> "EndpointBuilder":
        return self.method(HTTPMethod.DELETE)

    def add_param(self, key: str, value: str | int | float | bool) -> "EndpointBuilder":
        return replace(self, _params={**self._params, key: _param_value(value)})

    def add_header(self, key: str, value: str) -> "EndpointBuilder":
        return replace(self, _headers={**self._headers, key: value})

    def content_type(self, content_type: str) -> "EndpointBuilder":
        return self.add_header("Content-Type", content_type)

    def authorization(self, auth: str) -> "EndpointBuilder":
        return self.add_header("Authorization", auth)

    def bearer_token(self, token: str) -> "EndpointBuilder":
        return self.authorization(f"Bearer {token}")

    def body(self, body: bytes) -> "EndpointBuilder":
        return replace(self, _body=body)

    def build(self, response_type: Any = Any) -> Endpoint:
        return Endpoint(
            path=self._path,
            method=self._method,
            params=dict(self._params),
            headers=dict(self._headers),
            body=self._body,
            response_type=response_type,
        )
