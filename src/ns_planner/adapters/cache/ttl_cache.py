"""In-memory TTL cache with in-flight request coalescing."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from ns_planner.domain.contracts.ttl_cache import TtlCacheProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and the clock reading when it was stored."""

    value: T
    stored_at: float


class TtlCache(TtlCacheProtocol[T]):
    """Expiring cache keyed by string, bounded by a maximum key count.

    All mutations happen between suspension points, so no lock is needed as long as
    the cache is used from a single event loop.
    """

    def __init__(
        self,
        name: str,
        ttl_seconds: float,
        max_entries: int = 1000,
        sweep_interval_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            name: Name used in log messages.
            ttl_seconds: Age after which an entry is treated as absent.
            max_entries: Maximum number of keys before oldest entries are evicted.
            sweep_interval_seconds: Interval of the background sweep started by
                ``start()``. Defaults to the TTL.
            clock: Monotonic clock, injectable for tests.
        """
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.sweep_interval_seconds = sweep_interval_seconds or ttl_seconds
        self._clock = clock
        # Insertion order doubles as write order: set() re-inserts the key
        self._entries: dict[str, CacheEntry[T]] = {}
        self._in_flight: dict[str, asyncio.Task[T]] = {}
        self._background: set[asyncio.Task[T]] = set()
        self._sweep_task: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def get(self, key: str) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at > self.ttl_seconds:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: T) -> None:
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())
        self._evict_overflow()

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    def _evict_overflow(self) -> None:
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(f"{self.name}: evicted '{oldest}' (capacity {self.max_entries})")

    def sweep(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of removed entries.
        """
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if now - entry.stored_at > self.ttl_seconds
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"{self.name}: swept {len(expired)} expired entries")
        return len(expired)

    def _start_computation(self, key: str, compute: Callable[[], Awaitable[T]]) -> asyncio.Task[T]:
        """Return the pending task for a key, creating it when none is in flight."""
        task = self._in_flight.get(key)
        if task is not None:
            return task

        async def run() -> T:
            return await compute()

        task = asyncio.ensure_future(run())
        self._in_flight[key] = task

        def settle(done: asyncio.Task[T]) -> None:
            # Runs exactly once, whether the computation succeeded, failed or was cancelled
            if self._in_flight.get(key) is done:
                del self._in_flight[key]
            if not done.cancelled() and done.exception() is None:
                self.set(key, done.result())

        task.add_done_callback(settle)
        return task

    async def get_or_compute(self, key: str, compute: Callable[[], Awaitable[T]]) -> T:
        cached = self.get(key)
        if cached is not None:
            return cached

        task = self._start_computation(key, compute)
        # Shield so a cancelled caller does not cancel the call other callers share
        return await asyncio.shield(task)

    def schedule_refresh(self, key: str, compute: Callable[[], Awaitable[T]]) -> None:
        task = self._start_computation(key, compute)
        if task in self._background:
            return
        self._background.add(task)

        def forget(done: asyncio.Task[T]) -> None:
            self._background.discard(done)
            if not done.cancelled() and done.exception() is not None:
                logger.debug(
                    f"{self.name}: background refresh of '{key}' failed: {done.exception()}"
                )

        task.add_done_callback(forget)

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            self.sweep()

    async def start(self) -> None:
        """Start the periodic sweep task."""
        if self._sweep_task is not None and not self._sweep_task.done():
            logger.warning(f"{self.name}: sweep already running")
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info(f"{self.name}: started sweep every {self.sweep_interval_seconds}s")

    async def stop(self) -> None:
        """Stop the sweep task and cancel pending background refreshes."""
        if self._sweep_task and not self._sweep_task.done():
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                logger.info(f"{self.name}: sweep cancelled")
        self._sweep_task = None

        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
