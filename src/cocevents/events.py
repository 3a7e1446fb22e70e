"""Typed event channel.

Every event the library can emit is enumerated in :class:`EventName`;
subscribers register per name on an :class:`EventBus`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_logger = logging.getLogger(__name__)


class EventName(StrEnum):
    MAINTENANCE_START = "maintenanceStart"
    MAINTENANCE_END = "maintenanceEnd"
    CLAN_UPDATE = "clanUpdate"
    CLAN_MEMBER_JOIN = "clanMemberJoin"
    CLAN_MEMBER_LEAVE = "clanMemberLeave"
    PLAYER_UPDATE = "playerUpdate"
    WAR_UPDATE = "warUpdate"
    WAR_STATE_CHANGE = "warStateChange"


class Event(BaseModel):
    """One detected change."""

    model_config = ConfigDict(frozen=True)

    name: EventName
    tag: str | None = Field(default=None, description="Watched tag the event relates to")
    old: dict[str, Any] = Field(default_factory=dict, description="Previous snapshot")
    new: dict[str, Any] = Field(default_factory=dict, description="Fresh snapshot")
    detail: dict[str, Any] = Field(
        default_factory=dict,
        description="Event-specific payload, e.g. the member that joined",
    )
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


EventCallback = Callable[[Event], None]


class EventBus:
    """Fan events out to the callbacks subscribed to their name.

    A failing callback is logged and does not prevent delivery to the
    remaining subscribers.
    """

    def __init__(self) -> None:
        self._subscribers: dict[EventName, list[EventCallback]] = {name: [] for name in EventName}

    def subscribe(self, name: EventName | str, callback: EventCallback) -> Callable[[], None]:
        """Register *callback* for *name* and return a function that unregisters it.

        Raises :class:`ValueError` for a name that is not an :class:`EventName`.
        """
        event_name = EventName(name)
        callbacks = self._subscribers[event_name]
        callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return _unsubscribe

    def subscriber_count(self, name: EventName | str) -> int:
        return len(self._subscribers[EventName(name)])

    def emit(self, event: Event) -> None:
        _logger.debug("Emitting %s tag=%s", event.name.value, event.tag)
        for callback in list(self._subscribers[event.name]):
            try:
                callback(event)
            except Exception:
                _logger.warning("%s callback failed", event.name.value, exc_info=True)
