"""Journey option domain model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ns_planner.domain.models.leg import Leg
from ns_planner.domain.timestamps import minutes_between


class OptionKind(str, Enum):
    """How an option was discovered."""

    DIRECT = "trip"
    COMBINATION = "combo"


@dataclass(frozen=True)
class Option:
    """A complete journey from origin to destination.

    ``duration_minutes`` always equals the rounded minutes between ``departure_time``
    and ``arrival_time``. ``min_transfer_minutes`` is the smallest non-negative gap
    between consecutive legs, or None when there is no such gap.
    """

    kind: OptionKind
    duration_minutes: int
    departure_time: datetime
    arrival_time: datetime
    min_transfer_minutes: int | None
    legs: tuple[Leg, ...]

    @property
    def signature(self) -> str:
        """Canonical identity of the journey, independent of how it was found."""
        legs_sig = "~".join(
            f"{leg.origin_name}>{leg.dest_name}"
            f"@{int(leg.departure_time.timestamp())}-{int(leg.arrival_time.timestamp())}"
            for leg in self.legs
        )
        return (
            f"{int(self.departure_time.timestamp())}|{int(self.arrival_time.timestamp())}"
            f"|{self.duration_minutes}|{legs_sig}"
        )

    @property
    def transfer_count(self) -> int:
        return max(0, len(self.legs) - 1)

    @classmethod
    def from_legs(cls, kind: OptionKind, legs: tuple[Leg, ...]) -> Option | None:
        """Build an option from ordered legs, or None if the legs are not a journey.

        Returns None for an empty leg list or when the journey would end before it starts.
        """
        if not legs:
            return None

        departure_time = legs[0].departure_time
        arrival_time = legs[-1].arrival_time
        duration = minutes_between(departure_time, arrival_time)
        if duration < 0:
            return None

        return cls(
            kind=kind,
            duration_minutes=duration,
            departure_time=departure_time,
            arrival_time=arrival_time,
            min_transfer_minutes=min_transfer_minutes(legs),
            legs=legs,
        )


def min_transfer_minutes(legs: tuple[Leg, ...]) -> int | None:
    """Smallest non-negative transfer between consecutive legs.

    Negative gaps (a leg leaving before the previous one arrives) are skipped.
    """
    gaps = [
        minutes_between(previous.arrival_time, following.departure_time)
        for previous, following in zip(legs, legs[1:], strict=False)
    ]
    valid = [gap for gap in gaps if gap >= 0]
    return min(valid) if valid else None
