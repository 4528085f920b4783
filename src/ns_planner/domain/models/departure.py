"""Departure domain model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DepartureRecord:
    """A single local-transit departure from a stop near a train station."""

    line: str
    destination: str
    planned_time: datetime
    expected_time: datetime
    transport_type: str
    delay_minutes: int
    stop_code: str = ""
    stop_name: str = ""
