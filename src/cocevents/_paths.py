"""Path builders for the read endpoints of :class:`cocevents.client.ClashEvents`.

These functions keep `client.py` small: each returns the path, with its
query string, that the client hands to ``dispatch``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urlencode

from pydantic.alias_generators import to_camel

from cocevents.tags import encode_tag, validate_tag


def query(options: Mapping[str, Any]) -> str:
    """Encode keyword options as a query string (``?`` included, empty if none).

    Keys are converted to the API's camelCase (``min_members`` becomes
    ``minMembers``), ``None`` values are dropped and sequences such as
    ``label_ids`` are joined with commas.
    """
    params: dict[str, str] = {}
    for key, value in options.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            value = ",".join(str(v) for v in value)
        elif isinstance(value, bool):
            value = str(value).lower()
        params[to_camel(key)] = str(value)
    if not params:
        return ""
    return f"?{urlencode(params)}"


def tag_segment(tag: str) -> str:
    """Validated, percent-encoded tag path segment.

    Raises :class:`ValueError` for a tag that cannot be normalized.
    """
    normalized = validate_tag(tag)
    if normalized is None:
        raise ValueError(f"Invalid tag: {tag!r}")
    return encode_tag(normalized)


def id_segment(value: str | int) -> str:
    return quote(str(value), safe="")


def clan_search(name: str | None, options: Mapping[str, Any]) -> str:
    return f"/clans{query({'name': name, **options})}"


def clan(tag: str) -> str:
    return f"/clans/{tag_segment(tag)}"


def clan_members(tag: str, options: Mapping[str, Any]) -> str:
    return f"/clans/{tag_segment(tag)}/members{query(options)}"


def clan_war_log(tag: str, options: Mapping[str, Any]) -> str:
    return f"/clans/{tag_segment(tag)}/warlog{query(options)}"


def current_war(tag: str) -> str:
    return f"/clans/{tag_segment(tag)}/currentwar"


def clan_war_league_group(tag: str) -> str:
    return f"/clans/{tag_segment(tag)}/currentwar/leaguegroup"


def clan_war_league_war(war_tag: str) -> str:
    return f"/clanwarleagues/wars/{tag_segment(war_tag)}"


def player(tag: str) -> str:
    return f"/players/{tag_segment(tag)}"


def leagues(options: Mapping[str, Any]) -> str:
    return f"/leagues{query(options)}"


def league(league_id: str | int) -> str:
    return f"/leagues/{id_segment(league_id)}"


def league_seasons(league_id: str | int, options: Mapping[str, Any]) -> str:
    return f"/leagues/{id_segment(league_id)}/seasons{query(options)}"


def league_season_rankings(league_id: str | int, season_id: str, options: Mapping[str, Any]) -> str:
    return f"/leagues/{id_segment(league_id)}/seasons/{id_segment(season_id)}{query(options)}"


def war_leagues(options: Mapping[str, Any]) -> str:
    return f"/warleagues{query(options)}"


def war_league(league_id: str | int) -> str:
    return f"/warleagues/{id_segment(league_id)}"


def locations(options: Mapping[str, Any]) -> str:
    return f"/locations{query(options)}"


def location(location_id: str | int) -> str:
    return f"/locations/{id_segment(location_id)}"


def location_rankings(location_id: str | int, ranking: str, options: Mapping[str, Any]) -> str:
    """``ranking`` is one of ``clans``, ``players``, ``clans-versus``, ``players-versus``."""
    return f"/locations/{id_segment(location_id)}/rankings/{ranking}{query(options)}"


def clan_labels(options: Mapping[str, Any]) -> str:
    return f"/labels/clans{query(options)}"


def player_labels(options: Mapping[str, Any]) -> str:
    return f"/labels/players{query(options)}"
