"""HTTP fetch primitive.

Every outbound request of the library ends in :meth:`Transport.fetch`.
The contract is that it never raises: callers only inspect the returned
:class:`FetchResult`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Protocol

import aiohttp

from cocevents._constants import OK_STATUS
from cocevents._redact import redact_headers
from cocevents.exceptions import CocTransportError
from cocevents.models import FetchResult

_logger = logging.getLogger(__name__)

_MAX_AGE_PATTERN = re.compile(r"max-age=(\d+)", re.IGNORECASE)


class Transport(Protocol):
    """Structural transport interface used by the dispatcher.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def fetch(self, url: str, token: str, timeout: float | None) -> FetchResult:
        ...


def parse_max_age(cache_control: str | None) -> int | None:
    """Extract ``max-age`` seconds from a Cache-Control header value."""
    if not cache_control:
        return None
    match = _MAX_AGE_PATTERN.search(cache_control)
    if match is None:
        return None
    return int(match.group(1))


class HttpTransport:
    """aiohttp-backed implementation of :class:`Transport`."""

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session

    async def fetch(self, url: str, token: str, timeout: float | None) -> FetchResult:
        try:
            return await self._get(url, token, timeout)
        except CocTransportError as exc:
            _logger.debug("GET %s failed: %s", url, exc)
            if exc.status_code is None:
                return FetchResult.failure()
            return FetchResult.failure(exc.status_code)

    async def _get(self, url: str, token: str, timeout: float | None) -> FetchResult:
        headers: dict[str, str] = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        client_timeout = aiohttp.ClientTimeout(total=timeout)

        _logger.debug("GET %s headers=%s", url, redact_headers(headers))

        try:
            async with self._http.get(url, headers=headers, timeout=client_timeout) as resp:
                status = resp.status
                cache_control = resp.headers.get("Cache-Control")
                body = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise CocTransportError(f"Request to {url} failed: {exc!r}", url=url) from exc

        try:
            parsed: Any = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise CocTransportError(
                f"Invalid JSON from {url}: {body[:200]!r}",
                status_code=status,
                url=url,
            ) from exc

        if not isinstance(parsed, dict):
            raise CocTransportError(
                f"JSON body from {url} is not an object",
                status_code=status,
                url=url,
            )

        return FetchResult(
            status=status,
            ok=status == OK_STATUS,
            max_age=parse_max_age(cache_control),
            data=parsed,
        )
