"""Cached station name resolution."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ns_planner.domain.errors import UpstreamError

if TYPE_CHECKING:
    from ns_planner.domain.contracts.ttl_cache import TtlCacheProtocol
    from ns_planner.domain.models.station import StationRecord
    from ns_planner.domain.ports.station_gateway import StationGateway

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
# The station search matches on prefixes, long names do not need the full text
VIA_QUERY_LENGTH = 12


class StationResolver:
    """Resolves free-text queries to stations through a shared cache.

    Exact hits are served from the cache. On a miss, the longest cached prefix of the
    query is served immediately while the full query resolves in the background.
    Concurrent lookups of the same query share one upstream call.
    """

    def __init__(
        self,
        gateway: StationGateway,
        cache: TtlCacheProtocol[list[StationRecord]],
    ) -> None:
        """Initialize the resolver.

        Args:
            gateway: Upstream station search.
            cache: Cache keyed by the lowercased trimmed query.
        """
        self._gateway = gateway
        self._cache = cache

    @staticmethod
    def cache_key(query: str) -> str:
        return (query or "").strip().lower()

    def _best_prefix(self, key: str) -> list[StationRecord] | None:
        for length in range(len(key) - 1, MIN_QUERY_LENGTH - 1, -1):
            hit = self._cache.get(key[:length])
            if hit is not None:
                return hit
        return None

    async def resolve(self, query: str, allow_prefix: bool = True) -> list[StationRecord]:
        """Resolve a query to matching stations.

        Args:
            query: Free text typed by the user.
            allow_prefix: Serve a cached shorter prefix while the full query loads.

        Returns:
            Matching stations; empty for queries shorter than two characters.

        Raises:
            UpstreamError: When the upstream search fails and nothing is cached.
        """
        text = (query or "").strip()
        key = self.cache_key(text)
        if len(key) < MIN_QUERY_LENGTH:
            return []

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        if allow_prefix:
            prefix_hit = self._best_prefix(key)
            if prefix_hit is not None:
                logger.debug(f"Serving cached prefix for '{key}', refreshing in background")
                self._cache.schedule_refresh(key, lambda: self._gateway.search_stations(text))
                return prefix_hit

        return await self._cache.get_or_compute(key, lambda: self._gateway.search_stations(text))

    async def find_code(self, name: str) -> str | None:
        """Find the station code whose display name equals ``name`` (case-insensitive).

        Returns None when nothing matches or the lookup fails.
        """
        target = (name or "").strip().lower()
        if not target:
            return None

        try:
            records = await self.resolve(name.strip()[:VIA_QUERY_LENGTH], allow_prefix=False)
        except UpstreamError as e:
            logger.warning(f"Could not resolve station '{name}': {e}")
            return None

        for record in records:
            if record.display_name.strip().lower() == target:
                return record.code
        return None
