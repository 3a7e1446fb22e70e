"""One pass over a category's watch set."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum

from cocevents.events import EventBus
from cocevents.handlers import UpdateHandler
from cocevents.models import FetchResult
from cocevents.tags import encode_tag
from cocevents.watch import WatchSet

_logger = logging.getLogger(__name__)

Dispatch = Callable[[str], Awaitable[FetchResult]]


class Category(StrEnum):
    CLAN = "clan"
    PLAYER = "player"
    WAR = "war"

    def path(self, tag: str) -> str:
        """API path polled for *tag* in this category."""
        encoded = encode_tag(tag)
        if self is Category.CLAN:
            return f"/clans/{encoded}"
        if self is Category.PLAYER:
            return f"/players/{encoded}"
        return f"/clans/{encoded}/currentwar"


class SweepLoop:
    """Fetch and hand over every watched tag of one category, in order.

    Tags are processed strictly one after another; the request pipeline
    behind *dispatch* interleaves them with the other categories.
    """

    def __init__(
        self,
        category: Category,
        watch: WatchSet,
        dispatch: Dispatch,
        handler: UpdateHandler,
        bus: EventBus,
    ) -> None:
        self.category = category
        self.watch = watch
        self._dispatch = dispatch
        self._handler = handler
        self._bus = bus

    async def run_pass(self) -> int:
        """Run one pass and return the number of tags fetched."""
        state = self.watch.state
        # A clear() issued between passes already emptied the set.
        state.reset()
        fetched = 0
        for tag in self.watch.keys():
            if state.abort_requested:
                break
            result = await self._dispatch(self.category.path(tag))
            fetched += 1
            try:
                self._handler(self._bus, self.watch, tag, result)
            except Exception:
                _logger.exception("%s handler failed for %s", self.category.value, tag)

        if state.abort_requested:
            _logger.debug("%s pass aborted after %d tags", self.category.value, fetched)
            self.watch.clear()
            state.reset()
        return fetched
