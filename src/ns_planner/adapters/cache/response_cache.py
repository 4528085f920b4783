"""Short-lived cache for search responses."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ns_planner.adapters.cache.ttl_cache import TtlCache
from ns_planner.domain.models.option import Option

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchSignature:
    """Full identity of a search request."""

    kind: str
    from_station: str
    to_station: str
    date_time: str
    search_for_arrival: bool
    extreme: bool = False

    def cache_key(self) -> str:
        return "|".join(
            [
                self.kind,
                self.from_station.lower(),
                self.to_station.lower(),
                self.date_time,
                "arr" if self.search_for_arrival else "dep",
                "x" if self.extreme else "-",
            ]
        )


class ResponseCache:
    """Absorbs bursts of identical searches.

    Identical concurrent searches share one computation; finished results are reused
    until they are older than the TTL. Failures are never cached.
    """

    def __init__(self, cache: TtlCache[list[Option]]) -> None:
        """Initialize with the underlying TTL cache."""
        self._cache = cache

    async def get_or_compute(
        self,
        signature: SearchSignature,
        compute: Callable[[], Awaitable[list[Option]]],
    ) -> list[Option]:
        key = signature.cache_key()
        if self._cache.get(key) is not None:
            logger.debug(f"Response cache hit for {key}")
        return await self._cache.get_or_compute(key, compute)

    async def start(self) -> None:
        await self._cache.start()

    async def stop(self) -> None:
        await self._cache.stop()
