"""Networking core: endpoints, middleware, request building and the client."""

from networking.client import NetworkClient, NetworkClientConfiguration
from networking.endpoint import Endpoint, EndpointBuilder, HTTPMethod
from networking.errors import NetworkError, NetworkErrorKind
from networking.middleware import MiddlewareChain, RequestMiddleware, ResponseMiddleware
from networking.request import CachePolicy, PreparedRequest
from networking.tasks import CancellableTask, Completion, RequestTask, Result

__all__ = [
    "CachePolicy",
    "CancellableTask",
    "Completion",
    "Endpoint",
    "EndpointBuilder",
    "HTTPMethod",
    "MiddlewareChain",
    "NetworkClient",
    "NetworkClientConfiguration",
    "NetworkError",
    "NetworkErrorKind",
    "PreparedRequest",
    "RequestMiddleware",
    "RequestTask",
    "ResponseMiddleware",
    "Result",
]
