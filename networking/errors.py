"""Network error taxonomy.

Every failure the networking layer can report is a NetworkError tagged with
one NetworkErrorKind. The set is closed: callers may switch on ``kind``
exhaustively.
"""

from enum import Enum


class NetworkErrorKind(Enum):
    """Kinds of network failures."""

    INVALID_URL = "invalid_url"

    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    NO_CONNECTION = "no_connection"
    TRANSPORT_ERROR = "transport_error"

    INVALID_RESPONSE = "invalid_response"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"

    INVALID_DATA = "invalid_data"
    DECODING_ERROR = "decoding_error"

    UNKNOWN = "unknown"


_TRANSPORT_KINDS = frozenset(
    {
        NetworkErrorKind.TIMEOUT,
        NetworkErrorKind.CANCELLED,
        NetworkErrorKind.NO_CONNECTION,
        NetworkErrorKind.TRANSPORT_ERROR,
    }
)


class NetworkError(Exception):
    """A classified failure from building, sending or decoding a request.

    Attributes:
        kind: The failure category.
        status_code: HTTP status for CLIENT_ERROR and SERVER_ERROR.
        detail: Extra context, e.g. the attempted URL for INVALID_URL.
        cause: The underlying exception, when there is one.
    """

    def __init__(
        self,
        kind: NetworkErrorKind,
        *,
        status_code: int | None = None,
        detail: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        self.detail = detail
        self.cause = cause
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Human-readable description, stable for a given kind and payload."""
        kind = self.kind
        if kind == NetworkErrorKind.INVALID_URL:
            return f"Invalid URL: {self.detail}"
        if kind == NetworkErrorKind.TIMEOUT:
            return "Request timed out"
        if kind == NetworkErrorKind.CANCELLED:
            return "Request was cancelled"
        if kind == NetworkErrorKind.NO_CONNECTION:
            return "No connection"
        if kind == NetworkErrorKind.TRANSPORT_ERROR:
            return f"Network error: {self.cause}"
        if kind == NetworkErrorKind.INVALID_RESPONSE:
            return "Invalid response received from server"
        if kind == NetworkErrorKind.CLIENT_ERROR:
            return f"Client error {self.status_code}"
        if kind == NetworkErrorKind.SERVER_ERROR:
            return f"Server error {self.status_code}"
        if kind == NetworkErrorKind.INVALID_DATA:
            return "Invalid data received from server"
        if kind == NetworkErrorKind.DECODING_ERROR:
            return f"Failed to decode response: {self.cause}"
        return "Unknown error occurred"

    @property
    def is_cancelled(self) -> bool:
        return self.kind == NetworkErrorKind.CANCELLED

    @property
    def is_transport(self) -> bool:
        """True for failures raised before any HTTP response was received."""
        return self.kind in _TRANSPORT_KINDS

    def __repr__(self) -> str:
        return f"NetworkError({self.kind.value!r}, message={self.message!r})"

    # Constructors, one per kind

    @classmethod
    def invalid_url(cls, url: str) -> "NetworkError":
        return cls(NetworkErrorKind.INVALID_URL, detail=url)

    @classmethod
    def timeout(cls, cause: BaseException | None = None) -> "NetworkError":
        return cls(NetworkErrorKind.TIMEOUT, cause=cause)

    @classmethod
    def cancelled(cls) -> "NetworkError":
        return cls(NetworkErrorKind.CANCELLED)

    @classmethod
    def no_connection(cls, cause: BaseException | None = None) -> "NetworkError":
        return cls(NetworkErrorKind.NO_CONNECTION, cause=cause)

    @classmethod
    def transport_error(cls, cause: BaseException) -> "NetworkError":
        return cls(NetworkErrorKind.TRANSPORT_ERROR, cause=cause)

    @classmethod
    def invalid_response(cls) -> "NetworkError":
        return cls(NetworkErrorKind.INVALID_RESPONSE)

    @classmethod
    def client_error(cls, status_code: int) -> "NetworkError":
        return cls(NetworkErrorKind.CLIENT_ERROR, status_code=status_code)

    @classmethod
    def server_error(cls, status_code: int) -> "NetworkError":
        return cls(NetworkErrorKind.SERVER_ERROR, status_code=status_code)

    @classmethod
    def invalid_data(cls) -> "NetworkError":
        return cls(NetworkErrorKind.INVALID_DATA)

    @classmethod
    def decoding_error(cls, cause: BaseException) -> "NetworkError":
        return cls(NetworkErrorKind.DECODING_ERROR, cause=cause)

    @classmethod
    def unknown(cls, cause: BaseException | None = None) -> "NetworkError":
        return cls(NetworkErrorKind.UNKNOWN, cause=cause)


def classify_status(status_code: int) -> NetworkError | None:
    """Map an HTTP status code to a NetworkError, or None for 2xx.

    Statuses outside 2xx/4xx/5xx (informational, redirects) are reported as
    INVALID_RESPONSE since the client cannot decode them.
    """
    if 200 <= status_code <= 299:
        return None
    if 400 <= status_code <= 499:
        return NetworkError.client_error(status_code)
    if 500 <= status_code <= 599:
        return NetworkError.server_error(status_code)
    return NetworkError.invalid_response()
