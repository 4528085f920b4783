"""NS trip search gateway."""

import logging
from typing import Any

from ns_planner.adapters.ns_api.constants import EXTREME_TRANSFER_PARAMS
from ns_planner.adapters.ns_api.http_client import NsHttpClient
from ns_planner.domain.ports.trip_gateway import TripGateway

logger = logging.getLogger(__name__)


class NsTripGateway(TripGateway):
    """Adapter for the NS /v3/trips endpoint."""

    def __init__(self, http_client: NsHttpClient) -> None:
        """Initialize with the NS HTTP client."""
        self._http_client = http_client

    @staticmethod
    def build_params(
        from_station: str,
        to_station: str,
        date_time: str,
        search_for_arrival: bool = False,
        shortest_transfers: bool = False,
    ) -> dict[str, str]:
        """Build the /v3/trips query parameters."""
        params = {
            "fromStation": from_station,
            "toStation": to_station,
            "dateTime": date_time,
        }
        if search_for_arrival:
            params["searchForArrival"] = "true"
        if shortest_transfers:
            params.update(EXTREME_TRANSFER_PARAMS)
        return params

    async def fetch_trips(
        self,
        from_station: str,
        to_station: str,
        date_time: str,
        search_for_arrival: bool = False,
        shortest_transfers: bool = False,
    ) -> list[dict[str, Any]]:
        """Fetch raw trips for one search.

        Raises:
            UpstreamError: When the call times out, fails or returns no JSON.
        """
        params = self.build_params(
            from_station, to_station, date_time, search_for_arrival, shortest_transfers
        )
        data = await self._http_client.get_trips(params)
        trips = data.get("trips")
        if not isinstance(trips, list):
            logger.debug(f"No trips in NS response for {from_station} -> {to_station}")
            return []
        return [trip for trip in trips if isinstance(trip, dict)]
