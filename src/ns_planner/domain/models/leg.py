"""Leg domain model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Leg:
    """One train ride between two stops of a journey."""

    origin_name: str
    dest_name: str
    departure_time: datetime
    arrival_time: datetime
    origin_track: str | None
    dest_track: str | None
    delay_minutes: int
    product_label: str
