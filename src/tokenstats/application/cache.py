# src/tokenstats/application/cache.py
"""
Stats Cache - TTL Snapshot Cache and Single-Flight Refresh

This module holds the one piece of shared mutable state in the service: the
latest TokenStats snapshot. Entries are immutable and replaced wholesale.
The clock is injectable so tests can move time without sleeping.

SingleFlight collapses concurrent refreshes: while one refresh runs, every
other caller awaits the same task and receives the same result or error.

Files that USE this module:
- tokenstats.application.stats_service (TokenStatsService reads/writes the cache)
- tokenstats.application.health (cache age and expiry for /health/details)
- tests.test_cache (unit tests)

Files that this module USES:
- tokenstats.domain.models (TokenStats, CacheEntry)
"""
from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Awaitable, Callable, Generic, Optional, Tuple, TypeVar

from tokenstats.domain.models import CacheEntry, TokenStats

log = logging.getLogger(__name__)

T = TypeVar("T")


class TTLCache:
    """Single-slot snapshot cache with time-to-live."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        """
        Initialize cache.

        Args:
            ttl_seconds: Seconds an entry stays fresh
            clock: Monotonic clock returning seconds
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def get(self) -> Optional[Tuple[TokenStats, float]]:
        """
        Get the cached snapshot if it is still fresh.

        Returns:
            (snapshot, age in seconds) or None when empty or expired
        """
        with self._lock:
            entry = self._entry
        if entry is None:
            return None
        now = self._clock()
        if entry.is_expired(now):
            return None
        return entry.value, entry.age(now)

    def set(self, value: TokenStats) -> CacheEntry:
        """Replace the slot with a new entry fetched now."""
        entry = CacheEntry(value=value, fetched_at=self._clock(), ttl_seconds=self.ttl_seconds)
        with self._lock:
            self._entry = entry
        return entry

    def last(self) -> Optional[CacheEntry]:
        """Get the last stored entry regardless of expiry (used for fallback values)."""
        with self._lock:
            return self._entry

    def clear(self) -> None:
        with self._lock:
            self._entry = None


class SingleFlight(Generic[T]):
    """At most one in-flight run of a coroutine; concurrent callers share it."""

    def __init__(self) -> None:
        self._task: Optional[asyncio.Task] = None
        self.runs = 0

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def do(self, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run factory() unless a run is already in flight, then await the shared result.

        A caller that is cancelled does not cancel the shared task.
        """
        task = self._task
        if task is None or task.done():
            self.runs += 1
            task = asyncio.ensure_future(factory())
            self._task = task
            task.add_done_callback(self._clear)
        else:
            log.debug("Joining in-flight refresh")
        return await asyncio.shield(task)

    def _clear(self, task: asyncio.Task) -> None:
        if self._task is task:
            self._task = None
        # Callers receive the exception through the shield; mark it retrieved here
        if not task.cancelled():
            task.exception()
