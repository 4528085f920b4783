"""Station gateway port."""

from typing import Protocol

from ns_planner.domain.models.station import StationRecord


class StationGateway(Protocol):
    """Port for the upstream station search."""

    async def search_stations(self, query: str) -> list[StationRecord]:
        """Search stations matching a free-text query."""
        ...
