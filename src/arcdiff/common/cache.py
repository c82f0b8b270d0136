"""In-process memoization of async producers with a time-to-live."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class _Resolved[T]:
    value: T
    expires_at: float


@dataclass(slots=True, frozen=True)
class _InFlight[T]:
    task: asyncio.Future[T]


def _retrieve_failure(task: asyncio.Future[Any]) -> None:
    # Marks the failure as retrieved when every waiter was cancelled.
    if not task.cancelled():
        task.exception()


class MemoizedCache:
    """Single-flight TTL cache keyed by string.

    Concurrent callers of ``get_or_set`` for the same key share one producer
    run. A failed run removes the key, so the next call starts a fresh one.
    Caller cancellation does not cancel the shared run.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _Resolved[Any] | _InFlight[Any]] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_set[T](
        self, key: str, ttl_seconds: float, producer: Callable[[], Awaitable[T]]
    ) -> T:
        async with self._lock:
            entry = self._entries.get(key)
            if isinstance(entry, _Resolved) and entry.expires_at > self._clock():
                return cast("T", entry.value)
            if isinstance(entry, _InFlight):
                task = cast("asyncio.Future[T]", entry.task)
            else:
                task = asyncio.ensure_future(self._produce(key, ttl_seconds, producer))
                task.add_done_callback(_retrieve_failure)
                self._entries[key] = _InFlight(task)
        return await asyncio.shield(task)

    async def _produce[T](
        self, key: str, ttl_seconds: float, producer: Callable[[], Awaitable[T]]
    ) -> T:
        current = asyncio.current_task()
        try:
            value = await producer()
        except BaseException as exc:
            entry = self._entries.get(key)
            if isinstance(entry, _InFlight) and entry.task is current:
                del self._entries[key]
            log.debug("Producer for cache key %r failed: %r", key, exc)
            raise
        self._entries[key] = _Resolved(value, self._clock() + ttl_seconds)
        return value

    def invalidate(self, key: str) -> None:
        """Drop a resolved value; an in-flight run is left to finish."""

        if isinstance(self._entries.get(key), _Resolved):
            del self._entries[key]

    def clear(self) -> None:
        for key in [k for k, entry in self._entries.items() if isinstance(entry, _Resolved)]:
            del self._entries[key]
