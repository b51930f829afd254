"""Tests for polling_engine_helpers.timer module."""

import asyncio

import pytest

from railwatch.polling_engine_helpers.timer import PollTimer
from tests.helpers.status_fakes import wait_until


@pytest.mark.asyncio
async def test_fires_repeatedly_until_stopped() -> None:
    ticks = []

    async def _tick() -> None:
        ticks.append(1)

    timer = PollTimer(_tick, 0.01)
    timer.start()
    assert await wait_until(lambda: len(ticks) >= 3)

    await timer.stop()
    count = len(ticks)
    await asyncio.sleep(0.05)

    assert len(ticks) == count
    assert not timer.running


@pytest.mark.asyncio
async def test_rearm_applies_new_interval_immediately() -> None:
    ticks = []

    async def _tick() -> None:
        ticks.append(1)

    timer = PollTimer(_tick, 60.0)
    timer.start()
    await asyncio.sleep(0.01)

    timer.rearm(0.01)

    assert await wait_until(lambda: len(ticks) >= 1)
    assert timer.interval == 0.01
    await timer.stop()


@pytest.mark.asyncio
async def test_callback_errors_do_not_stop_timer() -> None:
    calls = []

    async def _tick() -> None:
        calls.append(1)
        raise RuntimeError("boom")

    timer = PollTimer(_tick, 0.01)
    timer.start()

    assert await wait_until(lambda: len(calls) >= 2)
    assert timer.running
    await timer.stop()


@pytest.mark.asyncio
async def test_rearm_after_stop_is_ignored() -> None:
    async def _tick() -> None:
        return None

    timer = PollTimer(_tick, 0.5)
    timer.start()
    await timer.stop()

    timer.rearm(5.0)

    assert timer.interval == 0.5
    assert not timer.running


@pytest.mark.asyncio
async def test_stop_from_inside_callback() -> None:
    ticks = []
    timer = None

    async def _tick() -> None:
        ticks.append(1)
        await timer.stop()

    timer = PollTimer(_tick, 0.01)
    timer.start()

    assert await wait_until(lambda: ticks and not timer.running)
    await asyncio.sleep(0.03)
    assert ticks == [1]
