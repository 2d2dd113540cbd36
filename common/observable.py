"""Minimal observables for coordinator outputs.

``Signal`` forwards events to current subscribers only. ``ValueSubject``
also holds the latest value and replays it to each new subscriber.
Subscribers are called synchronously, in subscription order, on whatever
context calls ``emit``/``send`` (the event loop, for coordinators).
"""

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class Signal(Generic[T]):
    """Pass-through event stream."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        """Register ``callback``; returns a function that removes it again."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def emit(self, value: T) -> None:
        for callback in list(self._subscribers):
            callback(value)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


class ValueSubject(Signal[T]):
    """Signal that remembers its current value."""

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value = value

    @property
    def value(self) -> T:
        return self._value

    def send(self, value: T) -> None:
        self._value = value
        self.emit(value)

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        unsubscribe = super().subscribe(callback)
        callback(self._value)
        return unsubscribe
