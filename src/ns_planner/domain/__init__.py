"""Domain layer - core models, ports and errors."""

from ns_planner.domain.models import (
    DepartureRecord,
    Leg,
    Option,
    OptionKind,
    StationRecord,
)
from ns_planner.domain.ports import (
    DepartureBoardRepository,
    StationGateway,
    TripGateway,
)

__all__ = [
    "DepartureBoardRepository",
    "DepartureRecord",
    "Leg",
    "Option",
    "OptionKind",
    "StationGateway",
    "StationRecord",
    "TripGateway",
]
