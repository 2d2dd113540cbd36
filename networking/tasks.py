"""Completion results and cancellable task handles."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from networking.errors import NetworkError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a request: exactly one of ``value`` or ``error`` is meaningful."""

    value: T | None = None
    error: NetworkError | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: NetworkError) -> "Result[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the stored NetworkError on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def map(self, transform: Callable[[T], U]) -> "Result[U]":
        if self.error is not None:
            return Result(error=self.error)
        return Result(value=transform(self.value))  # type: ignore[arg-type]


Completion = Callable[[Result[Any]], None]


class CancellableTask(Protocol):
    """Handle for an in-flight request."""

    def cancel(self) -> None: ...


class RequestTask:
    """Cancellable handle over the asyncio task running one request.

    ``cancel()`` is idempotent and does nothing once the request finished.
    """

    def __init__(self, task: "asyncio.Task[Any]") -> None:
        self._task = task

    def cancel(self) -> None:
        if not self._task.done():
            self._task.cancel()

    @property
    def done(self) -> bool:
        return self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._task.cancelled()

    async def wait(self) -> None:
        """Wait until the request finished and its completion was delivered."""
        await asyncio.wait({self._task})
        # Completion runs as a done-callback scheduled before our wakeup.
        await asyncio.sleep(0)
