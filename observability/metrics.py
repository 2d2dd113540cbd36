"""Request metrics for API monitoring.

Tracks request latency and outcome counts per endpoint route.
Designed for development use; production should use the OpenTelemetry metrics SDK.
"""

import time
from collections import defaultdict
from typing import Any


class RequestMetrics:
    """In-memory metrics collection for network requests.

    Latency is recorded per route (the endpoint path template, not the
    resolved URL) together with a count of each outcome: "success" or a
    NetworkErrorKind value.
    """

    def __init__(self) -> None:
        self._latencies: dict[str, list[float]] = defaultdict(list)
        self._outcomes: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))

    def record_request(self, route: str, latency_ms: float, outcome: str) -> None:
        """Record metrics for a single request.

        Args:
            route: The endpoint route, e.g. "/photos".
            latency_ms: Time from dispatch to classification in milliseconds.
            outcome: "success" or the failure kind.
        """
        self._latencies[route].append(latency_ms)
        self._outcomes[route][outcome] += 1

    def get_route_stats(self, route: str) -> dict[str, Any]:
        """Get aggregated statistics for a specific route.

        Args:
            route: The route to get stats for.

        Returns:
            Dict with latency percentiles and outcome counts.
        """
        latencies = self._latencies.get(route, [])
        outcomes = dict(self._outcomes.get(route, {}))

        return {
            "route": route,
            "total_requests": sum(outcomes.values()),
            "success_count": outcomes.get("success", 0),
            "failure_count": sum(n for kind, n in outcomes.items() if kind != "success"),
            "outcomes": outcomes,
            "latency": self._compute_percentiles(latencies) if latencies else {},
        }

    def get_all_stats(self) -> dict[str, Any]:
        """Get aggregated statistics for all routes."""
        return {route: self.get_route_stats(route) for route in sorted(self._outcomes)}

    @staticmethod
    def _compute_percentiles(values: list[float]) -> dict[str, float]:
        """Compute p50, p95, p99 percentiles for a list of values."""
        if not values:
            return {}

        sorted_vals = sorted(values)
        n = len(sorted_vals)

        return {
            "p50": sorted_vals[int(n * 0.50)],
            "p95": sorted_vals[min(int(n * 0.95), n - 1)],
            "p99": sorted_vals[min(int(n * 0.99), n - 1)],
            "mean": sum(sorted_vals) / n,
            "min": sorted_vals[0],
            "max": sorted_vals[-1],
        }


class ExecutionTimer:
    """Context manager for timing requests."""

    def __init__(self) -> None:
        self.start_time: float = 0.0
        self.end_time: float = 0.0

    def __enter__(self) -> "ExecutionTimer":
        self.start_time = time.monotonic()
        return self

    def __exit__(self, *args: Any) -> None:
        self.end_time = time.monotonic()

    @property
    def elapsed_ms(self) -> float:
        """Return elapsed time in milliseconds."""
        return (self.end_time - self.start_time) * 1000
