"""
Detached background work
Fire-and-forget coroutines whose failures are logged and dropped.
"""

import asyncio
from typing import Any, Coroutine, Set

from loguru import logger

_background_tasks: Set[asyncio.Task] = set()


def _on_done(task: asyncio.Task) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning(f"Background task {task.get_name()} failed: {exc}")


def spawn_background(coro: Coroutine[Any, Any, Any], name: str = "background") -> asyncio.Task:
    task = asyncio.create_task(coro, name=name)
    # the loop only keeps weak references to tasks
    _background_tasks.add(task)
    task.add_done_callback(_on_done)
    return task


async def drain_background_tasks() -> None:
    """Wait for pending tasks; used on shutdown and in tests."""
    while _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)
