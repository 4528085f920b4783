"""Departure board repository port."""

from datetime import datetime
from typing import Protocol

from ns_planner.domain.models.departure_board import DepartureBoard


class DepartureBoardRepository(Protocol):
    """Port for retrieving local-transit departures around a train station."""

    async def get_board(
        self, station_code: str, limit: int = 80, after: datetime | None = None
    ) -> DepartureBoard:
        """Get the departure board for a configured station code.

        With ``after``, only departures from that moment on count towards ``limit``.
        """
        ...
