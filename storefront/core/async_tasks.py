"""Best-effort background work (order notifications) tied to the event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)
_in_flight: set[asyncio.Task[Any]] = set()


def fire_and_forget(
    coro: Coroutine[Any, Any, Any], *, task_name: str | None = None
) -> asyncio.Task[Any] | None:
    """Run *coro* in the background; failures are logged, never raised."""
    try:
        task = asyncio.create_task(coro, name=task_name)
    except RuntimeError:
        # No running loop, drop the work without a "never awaited" warning.
        coro.close()
        return None
    _in_flight.add(task)
    task.add_done_callback(_finished)
    return task


def _finished(task: asyncio.Task[Any]) -> None:
    _in_flight.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "Background task %s failed", task.get_name(), exc_info=(type(exc), exc, exc.__traceback__)
        )


async def drain_background_tasks(timeout_seconds: float = 5.0) -> None:
    """Wait for in-flight tasks, cancelling whatever outlives *timeout_seconds*.

    Called on application shutdown and by tests that assert on side effects.
    """
    pending = {task for task in _in_flight if not task.done()}
    if not pending:
        return

    _, stragglers = await asyncio.wait(pending, timeout=timeout_seconds)
    for task in stragglers:
        task.cancel()
    if stragglers:
        logger.warning("Cancelled %d background task(s) at drain", len(stragglers))
        await asyncio.gather(*stragglers, return_exceptions=True)
