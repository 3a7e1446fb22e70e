from __future__ import annotations

import asyncio

import pytest

from cocevents._throttle import RequestThrottle
from cocevents.exceptions import CocConfigError


@pytest.mark.asyncio
async def test_consecutive_releases_are_spaced_by_interval(fake_clock) -> None:
    throttle = RequestThrottle(10, clock=fake_clock, sleep=fake_clock.sleep)
    assert throttle.interval == pytest.approx(0.1)

    releases = []
    for _ in range(5):
        await throttle.throttle()
        releases.append(fake_clock())

    gaps = [b - a for a, b in zip(releases, releases[1:])]
    assert all(gap >= 0.1 - 1e-9 for gap in gaps)
    # The first call has nothing to wait for.
    assert releases[0] == 0.0


@pytest.mark.asyncio
async def test_only_remaining_deficit_is_waited(fake_clock) -> None:
    throttle = RequestThrottle(10, clock=fake_clock, sleep=fake_clock.sleep)
    await throttle.throttle()

    fake_clock.advance(0.04)
    await throttle.throttle()
    assert fake_clock.sleeps == [pytest.approx(0.06)]

    fake_clock.advance(1.0)
    await throttle.throttle()
    assert len(fake_clock.sleeps) == 1


@pytest.mark.asyncio
async def test_concurrent_callers_are_served_in_order(fake_clock) -> None:
    throttle = RequestThrottle(20, clock=fake_clock, sleep=fake_clock.sleep)
    order: list[tuple[int, float]] = []

    async def caller(i: int) -> None:
        await throttle.throttle()
        order.append((i, fake_clock()))

    await asyncio.gather(*(caller(i) for i in range(4)))

    assert [i for i, _ in order] == [0, 1, 2, 3]
    times = [t for _, t in order]
    assert all(b - a >= 0.05 - 1e-9 for a, b in zip(times, times[1:]))


@pytest.mark.asyncio
async def test_real_clock_spacing() -> None:
    loop = asyncio.get_running_loop()
    throttle = RequestThrottle(50)
    stamps = []
    for _ in range(3):
        await throttle.throttle()
        stamps.append(loop.time())
    assert stamps[2] - stamps[0] >= 0.04 - 0.005


def test_non_positive_rate_rejected() -> None:
    with pytest.raises(CocConfigError):
        RequestThrottle(0)
