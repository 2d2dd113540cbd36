"""Navigation contracts and the registry that resolves responders.

Coordinators never hold their navigators directly. They keep an opaque
handle and resolve it through the ``ResponderRegistry`` each time they
route, so a navigator that went away simply resolves to None.
"""

from itertools import count
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from common.banner import Banner

if TYPE_CHECKING:
    from search.query import SearchQuery

log = structlog.get_logger()


class PhotoFeedNavigationResponder(Protocol):
    def route_to_detail(self, photo_id: str) -> None: ...

    def preparing_finished(self) -> None: ...


class SearchNavigationResponder(Protocol):
    def route_to_search_results(self, query: "SearchQuery") -> None: ...


class PhotoDetailNavigationResponder(Protocol):
    def dismiss_scene(self) -> None: ...


class BannerPresenter(Protocol):
    def present_banner(self, banner: Banner) -> None: ...


class SearchBarOwner(Protocol):
    def set_text(self, text: str) -> None: ...


class ResponderHandle(int):
    """Opaque key for a registered responder."""


class ResponderRegistry:
    """Maps handles to live responders."""

    def __init__(self) -> None:
        self._responders: dict[ResponderHandle, Any] = {}
        self._ids = count(1)

    def register(self, responder: Any) -> ResponderHandle:
        handle = ResponderHandle(next(self._ids))
        self._responders[handle] = responder
        log.debug("navigation.responder_registered", handle=int(handle), type=type(responder).__name__)
        return handle

    def resolve(self, handle: ResponderHandle | None) -> Any | None:
        """Return the responder for ``handle``; None if absent or unregistered."""
        if handle is None:
            return None
        return self._responders.get(handle)

    def unregister(self, handle: ResponderHandle) -> None:
        if self._responders.pop(handle, None) is not None:
            log.debug("navigation.responder_unregistered", handle=int(handle))

    def __len__(self) -> int:
        return len(self._responders)
