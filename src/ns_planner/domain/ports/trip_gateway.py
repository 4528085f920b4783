"""Trip gateway port."""

from typing import Any, Protocol


class TripGateway(Protocol):
    """Port for the upstream rail trip search."""

    async def fetch_trips(
        self,
        from_station: str,
        to_station: str,
        date_time: str,
        search_for_arrival: bool = False,
        shortest_transfers: bool = False,
    ) -> list[dict[str, Any]]:
        """Fetch raw trip records for one search.

        ``shortest_transfers`` asks the upstream for the tightest possible transfers.
        """
        ...
