"""Default update handlers.

A handler receives the fresh result for one watched tag, compares it with
the snapshot stored in the watch set, emits change events and stores the
fresh payload. The first successful fetch of a tag only seeds the snapshot.
Non-ok results are treated as "no change" and leave the snapshot alone, so
the tag is simply retried on the next pass.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from cocevents.events import Event, EventBus, EventName
from cocevents.models import FetchResult
from cocevents.watch import WatchSet

UpdateHandler = Callable[[EventBus, WatchSet, str, FetchResult], None]


def _member_tags(snapshot: dict[str, Any]) -> dict[str, dict[str, Any]]:
    members = snapshot.get("memberList")
    if not isinstance(members, list):
        return {}
    return {m["tag"]: m for m in members if isinstance(m, dict) and isinstance(m.get("tag"), str)}


def _refresh(watch: WatchSet, tag: str, result: FetchResult) -> dict[str, Any] | None:
    """Store the fresh payload; return the previous snapshot if there is something to diff."""
    if not result.ok or tag not in watch:
        return None
    old = watch.get(tag)
    watch.update(tag, result.data)
    if not old:
        return None
    return old


def handle_clan_update(bus: EventBus, watch: WatchSet, tag: str, result: FetchResult) -> None:
    old = _refresh(watch, tag, result)
    if old is None or old == result.data:
        return
    new = result.data

    old_members = _member_tags(old)
    new_members = _member_tags(new)
    for member_tag, member in new_members.items():
        if member_tag not in old_members:
            bus.emit(Event(name=EventName.CLAN_MEMBER_JOIN, tag=tag, old=old, new=new, detail=member))
    for member_tag, member in old_members.items():
        if member_tag not in new_members:
            bus.emit(Event(name=EventName.CLAN_MEMBER_LEAVE, tag=tag, old=old, new=new, detail=member))

    bus.emit(Event(name=EventName.CLAN_UPDATE, tag=tag, old=old, new=new))


def handle_player_update(bus: EventBus, watch: WatchSet, tag: str, result: FetchResult) -> None:
    old = _refresh(watch, tag, result)
    if old is None or old == result.data:
        return
    bus.emit(Event(name=EventName.PLAYER_UPDATE, tag=tag, old=old, new=result.data))


def handle_war_update(bus: EventBus, watch: WatchSet, tag: str, result: FetchResult) -> None:
    # The war payload names both clans; the watched tag says whose side we track.
    old = _refresh(watch, tag, result)
    if old is None or old == result.data:
        return
    new = result.data

    old_state = old.get("state")
    new_state = new.get("state")
    if old_state != new_state:
        bus.emit(
            Event(
                name=EventName.WAR_STATE_CHANGE,
                tag=tag,
                old=old,
                new=new,
                detail={"from": old_state, "to": new_state},
            )
        )
    bus.emit(Event(name=EventName.WAR_UPDATE, tag=tag, old=old, new=new))
