"""Station domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StationRecord:
    """A rail station as returned by the station search."""

    code: str
    display_name: str
