from __future__ import annotations

"""Utility helpers for running coroutines in the background without awaiting them."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, MutableSet, Optional, Union

logger = logging.getLogger(__name__)

CoroutineFactory = Callable[[], Coroutine[Any, Any, Any]]


def schedule_background(
    coro_or_factory: Union[Coroutine[Any, Any, Any], CoroutineFactory],
    *,
    pending: Optional[MutableSet["asyncio.Task[Any]"]] = None,
    description: str = "background task",
) -> Optional["asyncio.Task[Any]"]:
    """
    Schedule a coroutine on the running loop and return immediately.

    The task is held in ``pending`` until it finishes so it is not garbage
    collected early; its exception, if any, is logged rather than lost. With no
    running loop the coroutine is discarded (and closed) and None is returned.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # policy_guard: allow-silent-handler
        logger.warning("No running event loop; dropping %s", description)
        if asyncio.iscoroutine(coro_or_factory):
            coro_or_factory.close()
        return None

    task = loop.create_task(_resolve_coroutine(coro_or_factory))
    if pending is not None:
        pending.add(task)

    def _on_done(finished: "asyncio.Task[Any]") -> None:
        if pending is not None:
            pending.discard(finished)
        if finished.cancelled():
            return
        exc = finished.exception()
        if exc is not None:
            logger.error("%s failed: %s", description, exc, exc_info=exc)

    task.add_done_callback(_on_done)
    return task


def _resolve_coroutine(
    coro_or_factory: Union[Coroutine[Any, Any, Any], CoroutineFactory],
) -> Coroutine[Any, Any, Any]:
    """Turn the input into a coroutine object for scheduling."""
    if asyncio.iscoroutine(coro_or_factory):
        return coro_or_factory

    if callable(coro_or_factory):
        result = coro_or_factory()
        if not asyncio.iscoroutine(result):
            raise TypeError("Callable passed to schedule_background must return a coroutine")
        return result

    raise TypeError("schedule_background expects a coroutine or a callable returning one")


__all__ = ["schedule_background"]
