"""Parser for OVAPI timing point responses."""

import logging
from datetime import tzinfo
from typing import Any

from ns_planner.domain.models.departure import DepartureRecord
from ns_planner.domain.timestamps import minutes_between, parse_timestamp

logger = logging.getLogger(__name__)

# Display names for OVAPI transport types
TRANSPORT_TYPE_NAMES = {
    "BUS": "Bus",
    "TRAM": "Tram",
    "METRO": "Metro",
    "BOAT": "Ferry",
    "FERRY": "Ferry",
}

# Passes in these states will not depart anymore
SKIPPED_STATUSES = {"PASSED", "CANCEL", "CANCELED", "CANCELLED"}


class DepartureParser:
    """Parses OVAPI ``/tpc/<code>`` responses into DepartureRecord objects."""

    @staticmethod
    def parse_timing_point(
        data: dict[str, Any], stop_code: str, zone: tzinfo
    ) -> list[DepartureRecord]:
        """Parse the passes of one timing point.

        Args:
            data: Decoded OVAPI response, keyed by timing point code.
            stop_code: Timing point code that was requested.
            zone: Timezone for OVAPI times, which carry no offset.

        Returns:
            Departures in response order; malformed passes are skipped.
        """
        timing_point = data.get(stop_code)
        if not isinstance(timing_point, dict):
            return []

        stop = timing_point.get("Stop") or {}
        stop_name = stop.get("TimingPointName", "") if isinstance(stop, dict) else ""

        passes = timing_point.get("Passes") or {}
        if not isinstance(passes, dict):
            return []

        results = []
        for pass_data in passes.values():
            departure = DepartureParser._parse_pass(pass_data, stop_code, stop_name, zone)
            if departure:
                results.append(departure)
        return results

    @staticmethod
    def _parse_pass(
        pass_data: Any, stop_code: str, stop_name: str, zone: tzinfo
    ) -> DepartureRecord | None:
        """Parse a single pass into a DepartureRecord."""
        if not isinstance(pass_data, dict):
            return None
        if str(pass_data.get("TripStopStatus", "")).upper() in SKIPPED_STATUSES:
            return None

        planned = parse_timestamp(pass_data.get("TargetDepartureTime"), default_tz=zone)
        expected = parse_timestamp(pass_data.get("ExpectedDepartureTime"), default_tz=zone)
        planned = planned or expected
        expected = expected or planned
        if planned is None or expected is None:
            logger.debug(f"Skipping pass without departure time at {stop_code}")
            return None

        transport_type = str(pass_data.get("TransportType", "")).upper()
        delay = max(0, minutes_between(planned, expected))

        line = pass_data.get("LinePublicNumber") or pass_data.get("LinePlanningNumber") or ""
        return DepartureRecord(
            line=str(line),
            destination=str(pass_data.get("DestinationName50") or ""),
            planned_time=planned,
            expected_time=expected,
            transport_type=TRANSPORT_TYPE_NAMES.get(
                transport_type, transport_type.capitalize() or "Bus"
            ),
            delay_minutes=delay,
            stop_code=stop_code,
            stop_name=str(pass_data.get("TimingPointName") or stop_name),
        )
