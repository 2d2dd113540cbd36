"""Request builder: turns Endpoint descriptors into PreparedRequests.

The builder is the single point where middleware (auth, default headers)
touches an outgoing request.
"""

import httpx

from networking.endpoint import Endpoint
from networking.errors import NetworkError
from networking.middleware import MiddlewareChain
from networking.request import CachePolicy, PreparedRequest


class RequestBuilder:
    """Builds PreparedRequests against a fixed base URL."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url

    def build_request(
        self,
        endpoint: Endpoint,
        cache_policy: CachePolicy,
        timeout_sec: float,
        middleware_chain: MiddlewareChain,
    ) -> PreparedRequest:
        """Materialize an endpoint and run it through request middleware.

        Args:
            endpoint: The endpoint descriptor.
            cache_policy: Cache policy for this request.
            timeout_sec: Transport timeout in seconds.
            middleware_chain: Chain whose request middleware is applied last.

        Returns:
            The request exactly as it will be transmitted.

        Raises:
            NetworkError: INVALID_URL if no valid URL can be assembled.
        """
        url = self.build_url(endpoint)
        headers = {key: value for key, value in endpoint.headers.items() if key and value}

        request = PreparedRequest(
            url=url,
            method=endpoint.method,
            headers=headers,
            body=endpoint.body,
            cache_policy=cache_policy,
            timeout_sec=timeout_sec,
        )

        cache_control = cache_policy.cache_control
        if cache_control is not None and request.header("Cache-Control") is None:
            request = request.with_header("Cache-Control", cache_control)

        return middleware_chain.process_request(request)

    def build_url(self, endpoint: Endpoint) -> str:
        """Join the base URL with the endpoint path and non-empty query params."""
        try:
            base = httpx.URL(self.base_url)
        except httpx.InvalidURL as exc:
            raise NetworkError.invalid_url(self.base_url) from exc

        if not base.scheme or not base.host:
            raise NetworkError.invalid_url(self.base_url)

        path = endpoint.path if endpoint.path.startswith("/") else f"/{endpoint.path}"
        full_path = base.path.rstrip("/") + path
        params = {
            key: value for key, value in sorted(endpoint.params.items()) if key and value
        }

        try:
            url = base.copy_with(path=full_path, params=params or None, fragment=None)
        except httpx.InvalidURL as exc:
            attempted = f"{str(base).rstrip('/')}{path}"
            raise NetworkError.invalid_url(attempted) from exc

        return str(url)
