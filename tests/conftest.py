from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from cocevents.models import FetchResult


@dataclass
class FakeClock:
    """Manually advanced monotonic clock with a matching async sleep."""

    now: float = 0.0
    sleeps: list[float] = field(default_factory=list)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


@dataclass
class FakeApi:
    """In-memory stand-in for the HTTP transport."""

    calls: list[tuple[str, str]] = field(default_factory=list)
    responses: dict[str, FetchResult] = field(default_factory=dict)
    on_fetch: Callable[[str], None] | None = None

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]

    @property
    def tokens(self) -> list[str]:
        return [token for _, token in self.calls]

    async def fetch(self, url: str, token: str, timeout: float | None) -> FetchResult:
        self.calls.append((url, token))
        if self.on_fetch is not None:
            self.on_fetch(url)
        await asyncio.sleep(0)
        result = self.responses.get(url)
        if result is not None:
            return result
        return FetchResult(status=200, ok=True, data={"url": url, "n": len(self.calls)})


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
