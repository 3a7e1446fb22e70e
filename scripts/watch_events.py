#!/usr/bin/env python3
"""Watch clans, players and wars and print every change event.

Usage
-----
Set environment variables and run::

    export COC_TOKENS="token-one,token-two"
    python scripts/watch_events.py --clan "#2PP" --player "#8QU8J9LP"

Options::

    --clan TAG           Watch a clan (repeatable)
    --player TAG         Watch a player (repeatable)
    --war TAG            Watch the current war of a clan (repeatable)
    --refresh SECONDS    Seconds between sweeps of a category
    --rate-limit N       Requests per second per token
    --json               Print events as JSON lines
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from cocevents import ClashEvents, CocConfigError, Event, EventName, EventsConfig  # noqa: E402


def _print_event(event: Event, *, json_mode: bool) -> None:
    if json_mode:
        print(event.model_dump_json(), flush=True)
        return
    line = f"{event.observed_at:%H:%M:%S} {event.name.value:<16}"
    if event.tag:
        line += f" {event.tag}"
    if event.detail:
        line += f" {event.detail}"
    print(line, flush=True)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Print change events for watched Clash of Clans entities.")
    parser.add_argument("--clan", action="append", default=[], help="Clan tag to watch")
    parser.add_argument("--player", action="append", default=[], help="Player tag to watch")
    parser.add_argument("--war", action="append", default=[], help="Clan tag whose current war to watch")
    parser.add_argument("--refresh", type=float, help="Seconds between sweeps of a category")
    parser.add_argument("--rate-limit", type=float, help="Requests per second per token")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Print events as JSON lines")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    overrides: dict[str, Any] = {}
    if args.refresh is not None:
        overrides["refresh_rate"] = args.refresh
    if args.rate_limit is not None:
        overrides["rate_limit"] = args.rate_limit

    try:
        config = EventsConfig.from_env(**overrides)
    except CocConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    async with ClashEvents(config) as events:
        for name in EventName:
            events.on(name, lambda event: _print_event(event, json_mode=args.json_mode))

        watched = events.add_clans(args.clan) + events.add_players(args.player) + events.add_wars(args.war)
        if not watched:
            print("error: no valid tag to watch", file=sys.stderr)
            return 2

        await events.init()
        await asyncio.Event().wait()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass
