"""Departure selector port."""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from ns_planner.domain.models.departure import DepartureRecord
from ns_planner.domain.models.departure_selection import DepartureSelection


class DepartureSelector(Protocol):
    """Port for picking connecting departures after a train arrival."""

    def select(
        self,
        departures: Sequence[DepartureRecord],
        train_arrival: datetime,
        earlier_departures: int = 0,
    ) -> DepartureSelection:
        """Select the departures worth showing after ``train_arrival``.

        ``earlier_departures`` counts fetched departures already left out for leaving
        before ``train_arrival``.
        """
        ...
