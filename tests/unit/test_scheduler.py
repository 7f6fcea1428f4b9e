"""Unit tests for the cache sweep scheduler.

asyncio.sleep is patched so the loop runs without waiting on the real
interval; raising CancelledError from the fake sleep ends the loop.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest

from podreadme.cache import MemoryCache
from podreadme.schedulers import run_cache_sweep_scheduler

if TYPE_CHECKING:
    from tests.conftest import FakeClock


def _stop_after(count: int, durations: list[float]):
    async def fake_sleep(duration: float) -> None:
        durations.append(duration)
        if len(durations) > count:
            raise asyncio.CancelledError

    return fake_sleep


class TestCacheSweepScheduler:
    async def test_sleeps_for_the_configured_interval(self, cache: MemoryCache) -> None:
        durations: list[float] = []

        with (
            patch("asyncio.sleep", side_effect=_stop_after(2, durations)),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_cache_sweep_scheduler(cache, 300)

        assert durations == [300, 300, 300]

    async def test_sweeps_after_each_sleep(self, cache: MemoryCache) -> None:
        cache.sweep = MagicMock(return_value=0)  # type: ignore[method-assign]
        durations: list[float] = []

        with (
            patch("asyncio.sleep", side_effect=_stop_after(3, durations)),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_cache_sweep_scheduler(cache, 60)

        assert cache.sweep.call_count == 3

    async def test_removes_expired_entries(self, cache: MemoryCache, clock: FakeClock) -> None:
        cache.set("short", 1, ttl=10)
        cache.set("long", 2, ttl=1000)

        async def fake_sleep(duration: float) -> None:
            if clock.now > 1000:
                raise asyncio.CancelledError
            clock.advance(duration)

        with (
            patch("asyncio.sleep", side_effect=fake_sleep),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_cache_sweep_scheduler(cache, 60)

        assert cache.keys() == ["long"]

    async def test_sweep_failure_does_not_stop_the_loop(self, cache: MemoryCache) -> None:
        cache.sweep = MagicMock(side_effect=[RuntimeError("boom"), 0])  # type: ignore[method-assign]
        durations: list[float] = []

        with (
            patch("asyncio.sleep", side_effect=_stop_after(2, durations)),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_cache_sweep_scheduler(cache, 60)

        assert cache.sweep.call_count == 2


class TestSweeperTask:
    async def test_destroy_stops_the_task_without_waiting(self, clock: FakeClock) -> None:
        cache = MemoryCache(sweep_interval_seconds=3600, clock=clock)
        task = cache.start_sweeper()
        await asyncio.sleep(0)  # Let the task reach its first sleep

        cache.destroy()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert task.cancelled()

    async def test_restart_after_destroy_creates_new_task(self, clock: FakeClock) -> None:
        cache = MemoryCache(clock=clock)
        first = cache.start_sweeper()
        cache.destroy()
        second = cache.start_sweeper()
        try:
            assert second is not first
            assert not second.done()
        finally:
            cache.destroy()
        with pytest.raises(asyncio.CancelledError):
            await second
