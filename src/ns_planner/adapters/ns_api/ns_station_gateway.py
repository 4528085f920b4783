"""NS station search gateway."""

import logging
from typing import Any

from ns_planner.adapters.ns_api.http_client import NsHttpClient
from ns_planner.domain.models.station import StationRecord
from ns_planner.domain.ports.station_gateway import StationGateway

logger = logging.getLogger(__name__)


class NsStationGateway(StationGateway):
    """Adapter for the NS /v2/stations endpoint."""

    def __init__(self, http_client: NsHttpClient) -> None:
        """Initialize with the NS HTTP client."""
        self._http_client = http_client

    async def search_stations(self, query: str) -> list[StationRecord]:
        """Search stations by free text.

        Raises:
            UpstreamError: When the call times out, fails or returns no JSON.
        """
        data = await self._http_client.get_stations({"q": query})
        payload = data.get("payload")
        if not isinstance(payload, list):
            return []
        return self.parse_payload(payload)

    @staticmethod
    def parse_payload(payload: list[Any]) -> list[StationRecord]:
        """Parse the NS station payload, skipping entries without a code."""
        results = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            code = item.get("code") or item.get("stationCode")
            if not code:
                continue

            names = item.get("namen") or {}
            if not isinstance(names, dict):
                names = {}
            display_name = names.get("lang") or names.get("middel") or names.get("kort") or code

            results.append(StationRecord(code=str(code), display_name=str(display_name)))
        return results
