"""
Concurrency utilities for Sentinel.

This module provides the bounded batch executor used for geocoding and
the detached-task helper used for fire-and-forget cache writes.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Coroutine, List, Sequence, Set, TypeVar, Union
from sentinel.common.errors import BatchError
from sentinel.observability.logging_setup import get_logger

log = get_logger("sentinel.concurrency")

T = TypeVar("T")
R = TypeVar("R")

_detached: Set["asyncio.Task[Any]"] = set()


@dataclass(frozen=True)
class TaskFailure:
    """Placeholder for a batch item whose function raised"""
    index: int
    error: BaseException


async def map_limit(
    items: Sequence[T],
    limit: int,
    fn: Callable[[T, int], Awaitable[R]],
    *,
    return_exceptions: bool = False,
) -> List[Union[R, TaskFailure]]:
    """
    Run fn over items with at most `limit` calls in flight.

    Exactly max(1, limit) workers are started. Each worker claims the next
    unprocessed index until none remain. A failing item does not stop the
    batch: every item is attempted and all workers finish before this
    returns.

    Args:
        items: Inputs
        limit: Maximum concurrent fn calls
        fn: Coroutine function called as fn(item, index)
        return_exceptions: Return TaskFailure entries instead of raising

    Returns:
        Results where results[i] corresponds to items[i]

    Raises:
        BatchError: When some items failed and return_exceptions is False
    """
    results: List[Any] = [None] * len(items)
    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while True:
            # claim and increment happen with no await in between
            i = next_index
            if i >= len(items):
                return
            next_index += 1
            try:
                results[i] = await fn(items[i], i)
            except Exception as e:
                log.warning(f"batch item {i} failed: {e!r}")
                results[i] = TaskFailure(i, e)

    await asyncio.gather(*(worker() for _ in range(max(1, limit))))

    failures = [r for r in results if isinstance(r, TaskFailure)]
    if failures and not return_exceptions:
        raise BatchError(failures)
    return results


def spawn_detached(coro: Coroutine[Any, Any, Any], *, name: str = "detached") -> "asyncio.Task[Any]":
    """
    Schedule a coroutine the caller will not await.

    The task is kept referenced until done; an exception is logged and
    consumed so it never surfaces as an unhandled task error.

    Args:
        coro: Work to run in the background
        name: Label used in logs

    Returns:
        The scheduled task
    """
    task = asyncio.get_running_loop().create_task(coro, name=name)
    _detached.add(task)
    task.add_done_callback(_on_detached_done)
    return task


def _on_detached_done(task: "asyncio.Task[Any]") -> None:
    _detached.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        log.warning(f"detached task {task.get_name()} failed: {exc!r}")


def pending_detached() -> int:
    return len(_detached)


async def drain_detached() -> None:
    """Wait for every outstanding detached task (shutdown and tests)."""
    while _detached:
        await asyncio.gather(*list(_detached), return_exceptions=True)
