"""Departure board domain models."""

from dataclasses import dataclass, field

from ns_planner.domain.models.departure import DepartureRecord


@dataclass(frozen=True)
class StopFetchResult:
    """Outcome of fetching one timing point of a board."""

    stop_code: str
    error: str | None = None


@dataclass(frozen=True)
class DepartureBoard:
    """All departures fetched for one configured station code."""

    station: str
    departures: list[DepartureRecord]
    stops: list[StopFetchResult] = field(default_factory=list)
    # Departures dropped for leaving before the requested moment
    earlier_departures: int = 0

    @property
    def all_stops_failed(self) -> bool:
        return bool(self.stops) and all(stop.error for stop in self.stops)
