"""OpenTelemetry span management for outgoing requests.

One span per request, named after the endpoint route. Query strings are
never recorded; search text can contain personal data.
"""

import hashlib

from opentelemetry import trace


def hash_text(text: str) -> str:
    """Create a short SHA-256 digest of free text for log correlation.

    Args:
        text: The text to hash.

    Returns:
        First 16 hex characters of the SHA-256 digest.
    """
    return hashlib.sha256(text.encode()).hexdigest()[:16]


class SpanManager:
    """Manages OpenTelemetry spans for network requests.

    The network client uses this to instrument requests; without a
    configured SDK the tracer is a no-op.
    """

    def __init__(self, service_name: str = "photo-feed-client") -> None:
        self.tracer = trace.get_tracer(service_name)

    def create_request_span(self, method: str, route: str) -> trace.Span:
        """Create a span for a single request.

        Args:
            method: The HTTP method.
            route: The endpoint route (path without query).

        Returns:
            An OpenTelemetry span.
        """
        return self.tracer.start_span(
            name=f"{method} {route}",
            kind=trace.SpanKind.CLIENT,
            attributes={
                "http.method": method,
                "http.route": route,
            },
        )

    @staticmethod
    def record_result(
        span: trace.Span,
        status_code: int | None = None,
        error_kind: str | None = None,
    ) -> None:
        """Record the request outcome on a span.

        Args:
            span: The span to annotate.
            status_code: HTTP status, when a response was received.
            error_kind: NetworkErrorKind value, when the request failed.
        """
        if status_code is not None:
            span.set_attribute("http.status_code", status_code)
        if error_kind:
            span.set_attribute("error.kind", error_kind)
            span.set_status(trace.Status(trace.StatusCode.ERROR, error_kind))
