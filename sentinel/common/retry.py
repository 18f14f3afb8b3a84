"""
Retry utilities for Sentinel.

This module provides retry and backoff utilities
for calls against the upstream incident feed.
"""

import asyncio
import random
from typing import Awaitable, Callable, Tuple, Type, TypeVar

T = TypeVar('T')

async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    """
    Retry an async function with exponential backoff.

    Args:
        func: Zero-argument coroutine function
        max_retries: Retries after the first attempt
        base_delay: First delay in seconds
        max_delay: Delay ceiling in seconds
        jitter: Randomize each delay to 50-100% of its value
        retry_on: Exception types that trigger a retry; others propagate at once

    Returns:
        Result of the first successful attempt

    Raises:
        The exception from the last attempt
    """
    attempt = 0
    while True:
        try:
            return await func()
        except retry_on:
            attempt += 1
            if attempt > max_retries:
                raise
            delay = min(max_delay, base_delay * (2 ** (attempt - 1)))
            if jitter:
                delay = delay * (0.5 + random.random() * 0.5)
            await asyncio.sleep(delay)
