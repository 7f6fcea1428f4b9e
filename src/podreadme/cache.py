"""In-memory TTL cache with size-bounded eviction and a periodic sweep.

Expiry is lazy on read (``get``/``has`` delete a stale entry and report a miss)
and eager in the background (``sweep`` on a fixed interval). Nothing survives
the process.

Eviction removes the entry with the smallest ``created_at``. Reads never
refresh ``created_at``, so this is FIFO-by-insertion, not LRU: an entry that is
read constantly is still the first to go once it is the oldest write.

All operations are synchronous and never await, so under asyncio they are
atomic with respect to each other and to the sweep task. Not thread-safe.
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from podreadme.schedulers import run_cache_sweep_scheduler

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

log = structlog.get_logger()

DEFAULT_TTL_SECONDS = 3600.0
DEFAULT_MAX_SIZE = 1000
DEFAULT_SWEEP_INTERVAL_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class CacheEntry:
    data: Any
    created_at: float  # Clock reading at set() time; never refreshed by reads
    ttl: float  # Seconds

    def is_expired(self, now: float) -> bool:
        return now > self.created_at + self.ttl


class MemoryCache:
    """Expiring key/value store bounded by ``max_size``."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if sweep_interval_seconds <= 0:
            raise ValueError(
                f"sweep_interval_seconds must be positive, got {sweep_interval_seconds}"
            )
        self._default_ttl = ttl_seconds
        self._max_size = max_size
        self._sweep_interval = sweep_interval_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._sweep_task: asyncio.Task[None] | None = None

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    @property
    def max_size(self) -> int:
        return self._max_size

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def set(self, key: str, data: Any, ttl: float | None = None) -> None:
        """Store ``data`` under ``key``, evicting the oldest entry when full."""
        if len(self._entries) >= self._max_size:
            self._evict_oldest()

        entry = CacheEntry(
            data=data,
            created_at=self._clock(),
            ttl=self._default_ttl if ttl is None else ttl,
        )
        # Re-inserting moves the key to the end, so ties follow the latest write.
        self._entries.pop(key, None)
        self._entries[key] = entry
        log.debug("cache_set", key=key, ttl_seconds=entry.ttl)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` on miss or expiry."""
        entry = self._live_entry(key)
        if entry is None:
            return None
        log.debug("cache_hit", key=key)
        return entry.data

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        deleted = self._entries.pop(key, None) is not None
        if deleted:
            log.debug("cache_delete", key=key)
        return deleted

    def clear(self) -> None:
        removed = len(self._entries)
        self._entries.clear()
        log.info("cache_cleared", removed=removed)

    def size(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries)

    def get_stats(self) -> dict[str, int]:
        return {"size": len(self._entries), "max_size": self._max_size}

    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            log.debug("cache_miss", key=key)
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            log.debug("cache_expired", key=key)
            return None
        return entry

    def _evict_oldest(self) -> None:
        if not self._entries:
            return
        # min() keeps the first minimum in insertion order, so ties go to the
        # earliest-inserted key.
        oldest_key = min(self._entries, key=lambda k: self._entries[k].created_at)
        del self._entries[oldest_key]
        log.debug("cache_evicted", key=oldest_key)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def sweep(self) -> int:
        """Delete every expired entry. Returns the number removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            log.debug("cache_sweep_removed", removed=len(expired))
        return len(expired)

    def start_sweeper(self) -> asyncio.Task[None]:
        """Schedule the periodic sweep on the running loop and return its task.

        Calling it again while the sweep is running returns the existing task.
        """
        if self._sweep_task is not None and not self._sweep_task.done():
            return self._sweep_task
        self._sweep_task = asyncio.get_running_loop().create_task(
            run_cache_sweep_scheduler(self, self._sweep_interval)
        )
        return self._sweep_task

    def destroy(self) -> None:
        """Stop the sweep and drop all entries. Safe to call more than once."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            self._sweep_task = None
        self.clear()
        log.info("cache_destroyed")

    def __enter__(self) -> MemoryCache:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.destroy()


# ---------------------------------------------------------------------------
# Cache keys
# ---------------------------------------------------------------------------


def pod_info_key(pod_name: str) -> str:
    return f"pod_info:{pod_name}"


def pod_versions_key(pod_name: str) -> str:
    return f"pod_versions:{pod_name}"


def search_key(query: str, limit: int) -> str:
    query_hash = hashlib.sha256(query.encode()).hexdigest()[:16]
    return f"search:{query_hash}:{limit}"


def download_stats_key(pod_name: str) -> str:
    # One key per UTC day; stats are refreshed at most daily.
    today = datetime.now(UTC).date().isoformat()
    return f"stats:{pod_name}:{today}"


def github_readme_key(owner: str, repo: str) -> str:
    return f"github_readme:{owner}:{repo}"
