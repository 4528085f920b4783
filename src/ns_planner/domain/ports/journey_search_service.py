"""Journey search service port."""

from typing import Protocol

from ns_planner.domain.models.option import Option


class JourneySearchService(Protocol):
    """Port for searching journeys between two stations."""

    async def search_direct(
        self,
        from_station: str,
        to_station: str,
        date_time: str,
        search_for_arrival: bool = False,
        shortest_transfers: bool = False,
    ) -> list[Option]:
        """Run a single upstream search and return its options in upstream order."""
        ...

    async def search(
        self,
        from_station: str,
        to_station: str,
        date_time: str,
        search_for_arrival: bool = False,
    ) -> list[Option]:
        """Search journeys, adding via-station combinations when the base search is thin.

        Args:
            from_station: Origin station code.
            to_station: Destination station code.
            date_time: ISO date-time of departure, or of latest arrival.
            search_for_arrival: Treat ``date_time`` as the latest arrival.

        Returns:
            The best options, best first, unique by signature.
        """
        ...

    async def aclose(self) -> None:
        """Release background work that outlived its search."""
        ...
