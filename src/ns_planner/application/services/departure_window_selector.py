"""Selection of connecting local-transit departures after a train arrival."""

import logging
from collections.abc import Sequence
from datetime import datetime

from ns_planner.domain.models.departure import DepartureRecord
from ns_planner.domain.models.departure_selection import (
    DepartureSelection,
    SelectedDeparture,
    SelectionStatus,
    TransferClass,
)
from ns_planner.domain.timestamps import minutes_between

logger = logging.getLogger(__name__)

NOTE_NO_DATA = "No departures found."
NOTE_NONE_AFTER_ARRIVAL = "There are departures, but none leave after the train arrives."
NOTE_NO_CLOSER = (
    "No connection within {window} minutes after the train arrives; "
    "these are the next departures."
)


def classify_transfer(minutes: int) -> TransferClass:
    """Rate a transfer from train to local transit."""
    if minutes < 3:
        return TransferClass.BAD
    if minutes < 6:
        return TransferClass.OK
    return TransferClass.GOOD


class DepartureWindowSelector:
    """Picks the departures to show after a train arrives, widening the window as needed.

    The windows are tried in order (30 minutes, then 60); the first one that contains a
    reachable departure wins. When none does, the earliest reachable departures are shown
    regardless of how late they leave. Departures leaving before the arrival are never
    shown.
    """

    def __init__(
        self,
        windows_minutes: Sequence[int] = (30, 60),
        max_rows: int = 25,
        max_fallback_rows: int = 8,
    ) -> None:
        """Initialize the selector.

        Args:
            windows_minutes: Upper transfer bounds, tried in increasing order.
            max_rows: Row cap inside a bounded window.
            max_fallback_rows: Row cap of the unbounded fallback.
        """
        if not windows_minutes:
            raise ValueError("at least one window is required")
        self._windows = tuple(sorted(set(windows_minutes)))
        self._max_rows = max_rows
        self._max_fallback_rows = max_fallback_rows

    def select(
        self,
        departures: Sequence[DepartureRecord],
        train_arrival: datetime,
        earlier_departures: int = 0,
    ) -> DepartureSelection:
        """Select departures for one train arrival.

        ``earlier_departures`` is the number of fetched departures the caller already
        dropped for leaving before the arrival. They still count as data.
        """
        if not departures and not earlier_departures:
            return DepartureSelection(rows=[], status=SelectionStatus.NO_DATA, note=NOTE_NO_DATA)

        reachable = sorted(
            (
                SelectedDeparture(
                    departure=departure,
                    transfer_minutes=transfer,
                    transfer_class=classify_transfer(transfer),
                )
                for departure in departures
                if (transfer := minutes_between(train_arrival, departure.expected_time)) >= 0
            ),
            key=lambda row: row.departure.expected_time,
        )

        for window in self._windows:
            rows = [row for row in reachable if row.transfer_minutes <= window][: self._max_rows]
            if rows:
                return DepartureSelection(
                    rows=rows, status=SelectionStatus.FOUND, window_minutes=window
                )

        if reachable:
            logger.debug(f"No departure within {self._windows[-1]} minutes, using next ones")
            return DepartureSelection(
                rows=reachable[: self._max_fallback_rows],
                status=SelectionStatus.FOUND,
                unbounded=True,
                note=NOTE_NO_CLOSER.format(window=self._windows[-1]),
            )

        return DepartureSelection(
            rows=[], status=SelectionStatus.NONE_AFTER_ARRIVAL, note=NOTE_NONE_AFTER_ARRIVAL
        )
