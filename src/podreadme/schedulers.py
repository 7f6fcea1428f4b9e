"""Background scheduler coroutines."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from podreadme.cache import MemoryCache

log = structlog.get_logger()


async def run_cache_sweep_scheduler(cache: MemoryCache, interval_seconds: float) -> None:
    """Sweep expired cache entries every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = cache.sweep()
        except Exception:
            log.warning("cache_sweep_scheduler_error", exc_info=True)
            continue
        log.debug("cache_sweep_tick", removed=removed, remaining=cache.size())
