"""Station lookup port."""

from typing import Protocol

from ns_planner.domain.models.station import StationRecord


class StationLookup(Protocol):
    """Port for resolving typed station names, as used by autocomplete."""

    async def resolve(self, query: str, allow_prefix: bool = True) -> list[StationRecord]:
        """Resolve a free-text query to matching stations."""
        ...
