from __future__ import annotations

import asyncio

import pytest

from cocevents._scheduler import LoopScheduler, next_delay


def test_next_delay_never_negative() -> None:
    assert next_delay(1.0, 1.5) == 0.0
    assert next_delay(1.0, 1.0) == 0.0
    assert next_delay(1.0, 0.2) == pytest.approx(0.8)
    assert next_delay(0.0, 0.3) == 0.0


@pytest.mark.asyncio
async def test_call_later_runs_after_delay() -> None:
    scheduler = LoopScheduler()
    ran = asyncio.Event()

    async def job() -> None:
        ran.set()

    scheduler.call_later("job", 0.01, job)
    assert scheduler.pending("job")
    await asyncio.wait_for(ran.wait(), timeout=1.0)
    assert not scheduler.pending("job")
    await scheduler.close()


@pytest.mark.asyncio
async def test_close_cancels_pending_timers_and_running_tasks() -> None:
    scheduler = LoopScheduler()
    ran = []
    started = asyncio.Event()

    async def late() -> None:
        ran.append("late")

    async def forever() -> None:
        started.set()
        await asyncio.sleep(3600)

    scheduler.call_later("late", 0.05, late)
    task = scheduler.start("forever", forever)
    await started.wait()

    await scheduler.close()
    await asyncio.sleep(0.1)

    assert ran == []
    assert task.cancelled()
    assert scheduler.closed

    # A closed scheduler refuses new timers.
    scheduler.call_later("late", 0, late)
    assert not scheduler.pending("late")


@pytest.mark.asyncio
async def test_rescheduling_replaces_previous_timer() -> None:
    scheduler = LoopScheduler()
    ran = []

    async def job() -> None:
        ran.append(1)

    scheduler.call_later("job", 0.05, job)
    scheduler.call_later("job", 0.01, job)
    await asyncio.sleep(0.1)
    assert ran == [1]
    await scheduler.close()
