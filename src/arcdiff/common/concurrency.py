"""Bounded-parallelism helpers for paginating fetchers."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence


async def map_with_concurrency[T, R](
    values: Sequence[T],
    concurrency: int,
    mapper: Callable[[T, int], Awaitable[R]],
) -> list[R]:
    """Apply ``mapper`` to every value with at most ``concurrency`` calls running.

    Results keep the order of ``values``. The first failure propagates after the
    remaining calls have been cancelled and awaited.
    """

    if not values:
        return []
    semaphore = asyncio.Semaphore(max(1, min(concurrency, len(values))))

    async def run(value: T, index: int) -> R:
        async with semaphore:
            return await mapper(value, index)

    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(run(value, index)) for index, value in enumerate(values)]
    except ExceptionGroup as errors:
        raise errors.exceptions[0] from None
    return [task.result() for task in tasks]
