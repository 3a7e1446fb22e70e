"""High-level async event poller for the Clash of Clans API."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import aiohttp

from cocevents import _paths
from cocevents._queue import FetchQueue
from cocevents._rotator import CredentialRotator
from cocevents._scheduler import LoopScheduler, next_delay
from cocevents._throttle import RequestThrottle
from cocevents._transport import HttpTransport, Transport
from cocevents.config import EventsConfig
from cocevents.events import EventBus, EventCallback, EventName
from cocevents.exceptions import CocNotInitializedError
from cocevents.handlers import (
    UpdateHandler,
    handle_clan_update,
    handle_player_update,
    handle_war_update,
)
from cocevents.maintenance import MaintenanceProbe
from cocevents.models import FetchResult
from cocevents.sweep import Category, SweepLoop
from cocevents.tags import validate_tag
from cocevents.watch import WatchSet

_logger = logging.getLogger(__name__)

_MAINTENANCE_LOOP = "maintenance"

_DEFAULT_HANDLERS: dict[Category, UpdateHandler] = {
    Category.CLAN: handle_clan_update,
    Category.PLAYER: handle_player_update,
    Category.WAR: handle_war_update,
}


def _as_list(tags: str | Iterable[str]) -> list[str]:
    if isinstance(tags, str):
        return [tags]
    return list(tags)


class ClashEvents:
    """Poll watched clans, players and wars and emit change events.

    Usage::

        async with ClashEvents(EventsConfig(tokens=("...",))) as events:
            events.on(EventName.CLAN_MEMBER_JOIN, print)
            events.add_clans(["#2PP", "#8QU8J9LP"])
            await events.init()
            await asyncio.Event().wait()

    All requests, from every loop, go through one FIFO queue and one
    throttle, so the configured rate holds globally.
    """

    def __init__(
        self,
        config: EventsConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        handlers: Mapping[Category, UpdateHandler] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._external_transport = transport is not None
        self._clock = clock

        self._bus = EventBus()
        self._rotator = CredentialRotator(config.tokens)
        self._throttle = RequestThrottle(config.requests_per_second, clock=clock)
        self._queue = FetchQueue()
        self._scheduler = LoopScheduler()

        self.clans = WatchSet()
        self.players = WatchSet()
        self.wars = WatchSet()
        watches = {
            Category.CLAN: self.clans,
            Category.PLAYER: self.players,
            Category.WAR: self.wars,
        }
        resolved_handlers = {**_DEFAULT_HANDLERS, **(handlers or {})}
        self._sweeps: dict[Category, SweepLoop] = {
            category: SweepLoop(category, watches[category], self.dispatch, resolved_handlers[category], self._bus)
            for category in Category
        }
        self._probe = MaintenanceProbe(self.dispatch, self._bus)
        self._initialized = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ClashEvents:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Stop all loops and release the HTTP session if we own it."""
        await self._scheduler.close()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None
        _logger.debug("Event loops stopped")

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> EventsConfig:
        return self._config

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def is_in_maintenance(self) -> bool:
        return self._probe.in_maintenance

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def on(self, name: EventName | str, callback: EventCallback) -> Callable[[], None]:
        """Subscribe *callback* to an event; returns an unsubscribe function."""
        return self._bus.subscribe(name, callback)

    # ------------------------------------------------------------------
    # Watch-set mutation
    # ------------------------------------------------------------------

    @staticmethod
    def _add(watch: WatchSet, tags: str | Iterable[str]) -> list[str]:
        added: list[str] = []
        for raw in _as_list(tags):
            tag = validate_tag(raw)
            if tag is not None and watch.add(tag):
                added.append(tag)
        return added

    @staticmethod
    def _remove(watch: WatchSet, tags: str | Iterable[str]) -> list[str]:
        removed: list[str] = []
        for raw in _as_list(tags):
            tag = validate_tag(raw)
            if tag is not None and watch.remove(tag):
                removed.append(tag)
        return removed

    def add_clans(self, tags: str | Iterable[str]) -> list[str]:
        """Watch clans; invalid tags are ignored. Returns the tags newly added."""
        return self._add(self.clans, tags)

    def remove_clans(self, tags: str | Iterable[str]) -> list[str]:
        return self._remove(self.clans, tags)

    def clear_clans(self) -> None:
        self.clans.clear()

    def add_players(self, tags: str | Iterable[str]) -> list[str]:
        """Watch players; invalid tags are ignored. Returns the tags newly added."""
        return self._add(self.players, tags)

    def remove_players(self, tags: str | Iterable[str]) -> list[str]:
        return self._remove(self.players, tags)

    def clear_players(self) -> None:
        self.players.clear()

    def add_wars(self, tags: str | Iterable[str]) -> list[str]:
        """Watch the current war of clans; invalid tags are ignored."""
        return self._add(self.wars, tags)

    def remove_wars(self, tags: str | Iterable[str]) -> list[str]:
        return self._remove(self.wars, tags)

    def clear_wars(self) -> None:
        self.wars.clear()

    # ------------------------------------------------------------------
    # Loops
    # ------------------------------------------------------------------

    async def init(self) -> list[Any] | None:
        """Start the three sweep loops and the maintenance probe.

        Waits for the first run of each loop and returns their outcomes
        (results or exceptions, in the order war, clan, maintenance,
        player). Later runs are scheduled in the background. Calling
        ``init`` again is a no-op and returns ``None``.
        """
        if self._initialized:
            return None
        self._require_transport()
        self._initialized = True
        _logger.info("Starting event loops (%s)", self._config)
        tasks = [
            self._scheduler.start(Category.WAR.value, lambda: self._run_sweep(Category.WAR)),
            self._scheduler.start(Category.CLAN.value, lambda: self._run_sweep(Category.CLAN)),
            self._scheduler.start(_MAINTENANCE_LOOP, self._run_probe),
            self._scheduler.start(Category.PLAYER.value, lambda: self._run_sweep(Category.PLAYER)),
        ]
        return await asyncio.gather(*tasks, return_exceptions=True)

    async def sweep(self, category: Category) -> int:
        """Run a single pass of *category* now, without rescheduling."""
        self._require_transport()
        return await self._sweeps[category].run_pass()

    async def _run_sweep(self, category: Category) -> int:
        started = self._clock()
        fetched = 0
        try:
            if self._probe.in_maintenance:
                _logger.debug("Skipping %s pass during maintenance", category.value)
            else:
                fetched = await self._sweeps[category].run_pass()
        finally:
            elapsed = self._clock() - started
            delay = next_delay(self._config.refresh_rate, elapsed)
            self._scheduler.call_later(category.value, delay, lambda: self._run_sweep(category))
        _logger.debug("%s pass fetched %d tags in %.3fs", category.value, fetched, elapsed)
        return fetched

    async def _run_probe(self) -> bool:
        try:
            return await self._probe.check()
        finally:
            self._scheduler.call_later(_MAINTENANCE_LOOP, self._config.maintenance_interval, self._run_probe)

    # ------------------------------------------------------------------
    # Request pipeline
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise CocNotInitializedError("Client not initialized. Use 'async with ClashEvents(...) as events:'")
        return self._transport

    async def dispatch(self, path: str) -> FetchResult:
        """Fetch ``base_url + path`` through the shared queue, rotator and throttle.

        Never raises for HTTP or network failures; see :class:`FetchResult`.
        """
        transport = self._require_transport()
        await self._queue.wait()
        try:
            return await transport.fetch(
                f"{self._config.base_url}{path}",
                self._rotator.next(),
                self._config.timeout,
            )
        finally:
            try:
                await self._throttle.throttle()
            finally:
                self._queue.release()

    # ------------------------------------------------------------------
    # One-off reads
    # ------------------------------------------------------------------

    async def get_clan(self, tag: str) -> FetchResult:
        return await self.dispatch(_paths.clan(tag))

    async def get_clans(self, name: str | None = None, **options: Any) -> FetchResult:
        """Search clans by *name* and/or filters such as ``min_members`` or ``label_ids``."""
        return await self.dispatch(_paths.clan_search(name, options))

    async def get_clan_members(self, tag: str, **options: Any) -> FetchResult:
        return await self.dispatch(_paths.clan_members(tag, options))

    async def get_clan_war_log(self, tag: str, **options: Any) -> FetchResult:
        return await self.dispatch(_paths.clan_war_log(tag, options))

    async def get_current_war(self, tag: str) -> FetchResult:
        return await self.dispatch(_paths.current_war(tag))

    async def get_clan_war_league_group(self, tag: str) -> FetchResult:
        return await self.dispatch(_paths.clan_war_league_group(tag))

    async def get_clan_war_league_war(self, war_tag: str) -> FetchResult:
        return await self.dispatch(_paths.clan_war_league_war(war_tag))

    async def get_player(self, tag: str) -> FetchResult:
        return await self.dispatch(_paths.player(tag))

    async def get_leagues(self, **options: Any) -> FetchResult:
        return await self.dispatch(_paths.leagues(options))

    async def get_league(self, league_id: str | int) -> FetchResult:
        return await self.dispatch(_paths.league(league_id))

    async def get_league_seasons(self, league_id: str | int, **options: Any) -> FetchResult:
        return await self.dispatch(_paths.league_seasons(league_id, options))

    async def get_league_season_rankings(
        self, league_id: str | int, season_id: str, **options: Any
    ) -> FetchResult:
        return await self.dispatch(_paths.league_season_rankings(league_id, season_id, options))

    async def get_war_leagues(self, **options: Any) -> FetchResult:
        return await self.dispatch(_paths.war_leagues(options))

    async def get_war_league(self, league_id: str | int) -> FetchResult:
        return await self.dispatch(_paths.war_league(league_id))

    async def get_locations(self, **options: Any) -> FetchResult:
        return await self.dispatch(_paths.locations(options))

    async def get_location(self, location_id: str | int) -> FetchResult:
        return await self.dispatch(_paths.location(location_id))

    async def get_location_clan_rankings(self, location_id: str | int, **options: Any) -> FetchResult:
        return await self.dispatch(_paths.location_rankings(location_id, "clans", options))

    async def get_location_player_rankings(self, location_id: str | int, **options: Any) -> FetchResult:
        return await self.dispatch(_paths.location_rankings(location_id, "players", options))

    async def get_location_clan_versus_rankings(
        self, location_id: str | int, **options: Any
    ) -> FetchResult:
        return await self.dispatch(_paths.location_rankings(location_id, "clans-versus", options))

    async def get_location_player_versus_rankings(
        self, location_id: str | int, **options: Any
    ) -> FetchResult:
        return await self.dispatch(_paths.location_rankings(location_id, "players-versus", options))

    async def get_clan_labels(self, **options: Any) -> FetchResult:
        return await self.dispatch(_paths.clan_labels(options))

    async def get_player_labels(self, **options: Any) -> FetchResult:
        return await self.dispatch(_paths.player_labels(options))
