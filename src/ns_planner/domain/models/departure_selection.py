"""Result models of the departure window selection."""

from dataclasses import dataclass
from enum import Enum

from ns_planner.domain.models.departure import DepartureRecord


class SelectionStatus(str, Enum):
    """Terminal state of a selection."""

    FOUND = "found"
    NONE_AFTER_ARRIVAL = "none_after_arrival"
    NO_DATA = "no_data"


class TransferClass(str, Enum):
    """How comfortable a transfer is."""

    BAD = "bad"
    OK = "ok"
    GOOD = "good"


@dataclass(frozen=True)
class SelectedDeparture:
    """A departure picked for display, with the transfer from the train."""

    departure: DepartureRecord
    transfer_minutes: int
    transfer_class: TransferClass


@dataclass(frozen=True)
class DepartureSelection:
    """Departures selected after a train arrival.

    ``window_minutes`` is 30 or 60 for the bounded windows, None when the unbounded
    fallback produced the rows or when nothing was selected.
    """

    rows: list[SelectedDeparture]
    status: SelectionStatus
    window_minutes: int | None = None
    unbounded: bool = False
    note: str | None = None
