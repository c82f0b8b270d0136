from __future__ import annotations

import asyncio
import gc
from typing import Any

import pytest

from arcdiff.common.cache import MemoizedCache


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_concurrent_callers_share_one_producer_run() -> None:
    cache = MemoizedCache()
    calls = 0

    async def produce() -> str:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.05)
        return "value"

    async def run() -> list[str]:
        return list(
            await asyncio.gather(*(cache.get_or_set("diff-data", 60, produce) for _ in range(5)))
        )

    assert asyncio.run(run()) == ["value"] * 5
    assert calls == 1


def test_value_expires_after_ttl() -> None:
    clock = _Clock()
    cache = MemoizedCache(clock=clock)
    values = iter(["first", "second"])

    async def produce() -> str:
        return next(values)

    async def run() -> list[str]:
        first = await cache.get_or_set("key", 10, produce)
        clock.now = 9.9
        cached = await cache.get_or_set("key", 10, produce)
        clock.now = 10.0
        refreshed = await cache.get_or_set("key", 10, produce)
        return [first, cached, refreshed]

    assert asyncio.run(run()) == ["first", "first", "second"]


def test_failure_reaches_every_waiter_and_is_not_cached() -> None:
    cache = MemoizedCache()
    calls = 0

    async def produce() -> str:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        if calls == 1:
            raise RuntimeError("provider down")
        return "recovered"

    async def run() -> tuple[list[object], str]:
        outcomes = await asyncio.gather(
            *(cache.get_or_set("key", 60, produce) for _ in range(3)), return_exceptions=True
        )
        assert "key" not in cache
        return list(outcomes), await cache.get_or_set("key", 60, produce)

    outcomes, retried = asyncio.run(run())

    assert all(isinstance(outcome, RuntimeError) for outcome in outcomes)
    assert retried == "recovered"
    assert calls == 2


def test_cancelled_caller_does_not_cancel_shared_run() -> None:
    cache = MemoizedCache()

    async def produce() -> str:
        await asyncio.sleep(0.05)
        return "value"

    async def run() -> str:
        first = asyncio.ensure_future(cache.get_or_set("key", 60, produce))
        second = asyncio.ensure_future(cache.get_or_set("key", 60, produce))
        await asyncio.sleep(0.01)
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first
        return await second

    assert asyncio.run(run()) == "value"


def test_failure_after_all_callers_cancelled_is_not_reported_as_unretrieved() -> None:
    cache = MemoizedCache()
    reported: list[dict[str, Any]] = []

    async def produce() -> str:
        await asyncio.sleep(0.02)
        raise RuntimeError("upstream down")

    async def run() -> None:
        asyncio.get_running_loop().set_exception_handler(
            lambda _loop, context: reported.append(context)
        )
        caller = asyncio.ensure_future(cache.get_or_set("key", 60, produce))
        await asyncio.sleep(0.005)
        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller
        await asyncio.sleep(0.05)
        gc.collect()

    asyncio.run(run())

    assert "key" not in cache
    assert reported == []


def test_invalidate_and_clear_drop_resolved_values() -> None:
    cache = MemoizedCache()

    async def produce() -> int:
        return 1

    async def run() -> None:
        await cache.get_or_set("a", 60, produce)
        await cache.get_or_set("b", 60, produce)
        cache.invalidate("a")
        assert "a" not in cache
        assert len(cache) == 1
        cache.clear()
        assert len(cache) == 0

    asyncio.run(run())
