"""Edge-triggered maintenance detection."""

from __future__ import annotations

import logging
import secrets

from cocevents._constants import (
    OK_STATUS,
    PROBE_MIN_MEMBERS_LOW,
    PROBE_MIN_MEMBERS_SPAN,
)
from cocevents.events import Event, EventBus, EventName
from cocevents.sweep import Dispatch

_logger = logging.getLogger(__name__)


def probe_path() -> str:
    """Cheap search request; the random filter keeps it from being served from cache."""
    min_members = PROBE_MIN_MEMBERS_LOW + secrets.randbelow(PROBE_MIN_MEMBERS_SPAN)
    return f"/clans?limit=1&minMembers={min_members}"


class MaintenanceProbe:
    """Track whether the API is in a maintenance window.

    A 503 while up starts maintenance, a 200 while down ends it; every other
    status, or one that matches the current state, changes nothing.
    """

    def __init__(self, dispatch: Dispatch, bus: EventBus) -> None:
        self._dispatch = dispatch
        self._bus = bus
        self._in_maintenance = False

    @property
    def in_maintenance(self) -> bool:
        return self._in_maintenance

    async def check(self) -> bool:
        """Probe once and return the (possibly updated) maintenance flag."""
        result = await self._dispatch(probe_path())
        if result.in_maintenance and not self._in_maintenance:
            self._in_maintenance = True
            _logger.info("API maintenance started")
            self._bus.emit(Event(name=EventName.MAINTENANCE_START))
        elif result.status == OK_STATUS and self._in_maintenance:
            self._in_maintenance = False
            _logger.info("API maintenance ended")
            self._bus.emit(Event(name=EventName.MAINTENANCE_END))
        return self._in_maintenance
