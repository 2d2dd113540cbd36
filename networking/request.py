"""Materialized requests produced by the RequestBuilder."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from networking.endpoint import HTTPMethod


class CachePolicy(Enum):
    """How intermediate and local caches may serve a request."""

    USE_PROTOCOL = "use_protocol"
    RELOAD_IGNORING_CACHE = "reload_ignoring_cache"
    RETURN_CACHE_ELSE_LOAD = "return_cache_else_load"
    RETURN_CACHE_DONT_LOAD = "return_cache_dont_load"

    @property
    def cache_control(self) -> str | None:
        """Cache-Control header value expressing this policy, if any."""
        return _CACHE_CONTROL[self]


_CACHE_CONTROL: dict[CachePolicy, str | None] = {
    CachePolicy.USE_PROTOCOL: None,
    CachePolicy.RELOAD_IGNORING_CACHE: "no-cache",
    CachePolicy.RETURN_CACHE_ELSE_LOAD: "max-stale",
    CachePolicy.RETURN_CACHE_DONT_LOAD: "only-if-cached",
}


class PreparedRequest(BaseModel):
    """A fully resolved request, ready for transmission.

    Immutable: middleware returns modified copies via ``with_header`` and
    ``without_header``.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    method: HTTPMethod
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes | None = None
    cache_policy: CachePolicy = CachePolicy.RELOAD_IGNORING_CACHE
    timeout_sec: float = 30.0

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def with_header(self, name: str, value: str) -> "PreparedRequest":
        """Return a copy with ``name`` set to ``value``, replacing any casing of it."""
        lowered = name.lower()
        headers = {k: v for k, v in self.headers.items() if k.lower() != lowered}
        headers[name] = value
        return self.model_copy(update={"headers": headers})

    def without_header(self, name: str) -> "PreparedRequest":
        lowered = name.lower()
        headers = {k: v for k, v in self.headers.items() if k.lower() != lowered}
        return self.model_copy(update={"headers": headers})
