from __future__ import annotations

import asyncio
import contextlib
import json
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest

from cocevents._transport import HttpTransport, parse_max_age

URL = "https://api.example/v1/clans/%232PP"


@dataclass
class _FakeResponse:
    status: int
    body: str | bytes
    headers: dict[str, str] = field(default_factory=dict)

    async def read(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")


@dataclass
class _FakeSession:
    response: _FakeResponse | None = None
    error: BaseException | None = None
    requests: list[dict[str, Any]] = field(default_factory=list)

    @contextlib.asynccontextmanager
    async def get(self, url: str, *, headers: dict[str, str], timeout: aiohttp.ClientTimeout):
        self.requests.append({"url": url, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        yield self.response


@pytest.mark.asyncio
async def test_success_is_augmented_with_status_ok_and_max_age() -> None:
    session = _FakeSession(
        response=_FakeResponse(200, json.dumps({"tag": "#2PP"}), {"Cache-Control": "public max-age=120"})
    )
    result = await HttpTransport(session).fetch(URL, "tok", 5.0)  # type: ignore[arg-type]

    assert result.ok
    assert result.status == 200
    assert result.max_age == 120
    assert result.data == {"tag": "#2PP"}

    sent = session.requests[0]
    assert sent["url"] == URL
    assert sent["headers"] == {"Authorization": "Bearer tok", "Accept": "application/json"}
    assert sent["timeout"].total == 5.0


@pytest.mark.asyncio
async def test_missing_cache_control_gives_no_max_age() -> None:
    session = _FakeSession(response=_FakeResponse(200, "{}"))
    result = await HttpTransport(session).fetch(URL, "tok", None)  # type: ignore[arg-type]
    assert result.ok
    assert result.max_age is None
    assert session.requests[0]["timeout"].total is None


@pytest.mark.asyncio
async def test_error_status_with_json_body_is_not_ok() -> None:
    session = _FakeSession(response=_FakeResponse(403, json.dumps({"reason": "accessDenied"})))
    result = await HttpTransport(session).fetch(URL, "tok", None)  # type: ignore[arg-type]
    assert not result.ok
    assert result.status == 403
    assert result.data == {"reason": "accessDenied"}


@pytest.mark.asyncio
async def test_unparseable_body_keeps_http_status() -> None:
    session = _FakeSession(response=_FakeResponse(503, "<html>maintenance</html>"))
    result = await HttpTransport(session).fetch(URL, "tok", None)  # type: ignore[arg-type]
    assert not result.ok
    assert result.status == 503
    assert result.in_maintenance


@pytest.mark.asyncio
async def test_non_object_body_is_not_ok() -> None:
    session = _FakeSession(response=_FakeResponse(200, "[1, 2]"))
    result = await HttpTransport(session).fetch(URL, "tok", None)  # type: ignore[arg-type]
    assert not result.ok
    assert result.status == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()],
)
async def test_transport_failure_collapses_to_504(error: BaseException) -> None:
    session = _FakeSession(error=error)
    result = await HttpTransport(session).fetch(URL, "tok", 1.0)  # type: ignore[arg-type]
    assert not result.ok
    assert result.status == 504
    assert result.data == {}


def test_parse_max_age() -> None:
    assert parse_max_age("max-age=60") == 60
    assert parse_max_age("public, MAX-AGE=5") == 5
    assert parse_max_age("no-cache") is None
    assert parse_max_age(None) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b'{"name": "\xc3\x28"}', b"\x80\x81\x82"])
async def test_undecodable_body_keeps_http_status(body: bytes) -> None:
    session = _FakeSession(response=_FakeResponse(200, body))
    result = await HttpTransport(session).fetch(URL, "tok", None)  # type: ignore[arg-type]
    assert not result.ok
    assert result.status == 200
    assert result.data == {}
