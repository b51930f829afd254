"""Tests for async_helpers module."""

import asyncio
import logging

import pytest

from railwatch.async_helpers import schedule_background


@pytest.mark.asyncio
async def test_schedules_coroutine_and_tracks_pending():
    pending = set()
    done = []

    async def work():
        done.append(True)

    task = schedule_background(work(), pending=pending)

    assert task in pending
    await task
    await asyncio.sleep(0)
    assert done == [True]
    assert pending == set()


@pytest.mark.asyncio
async def test_accepts_factory():
    async def work():
        return 42

    task = schedule_background(lambda: work())

    assert await task == 42


@pytest.mark.asyncio
async def test_failure_is_logged(caplog):
    async def boom():
        raise RuntimeError("kaput")

    with caplog.at_level(logging.ERROR):
        task = schedule_background(boom(), description="probe task")
        await asyncio.gather(task, return_exceptions=True)
        await asyncio.sleep(0)

    assert "probe task failed: kaput" in caplog.text


@pytest.mark.asyncio
async def test_factory_must_return_coroutine():
    with pytest.raises(TypeError):
        schedule_background(lambda: 42)
    with pytest.raises(TypeError):
        schedule_background(42)


def test_without_running_loop_returns_none(caplog):
    async def work():
        return None

    coro = work()
    with caplog.at_level(logging.WARNING):
        assert schedule_background(coro, description="orphan") is None

    assert "dropping orphan" in caplog.text
    assert coro.cr_frame is None
