"""Domain models for the NS planner."""

from ns_planner.domain.models.departure import DepartureRecord
from ns_planner.domain.models.departure_board import DepartureBoard, StopFetchResult
from ns_planner.domain.models.departure_selection import (
    DepartureSelection,
    SelectedDeparture,
    SelectionStatus,
    TransferClass,
)
from ns_planner.domain.models.error_details import ErrorDetails
from ns_planner.domain.models.leg import Leg
from ns_planner.domain.models.option import Option, OptionKind
from ns_planner.domain.models.ov_stop_group import OvStopGroup
from ns_planner.domain.models.search_budget import SearchBudget
from ns_planner.domain.models.station import StationRecord

__all__ = [
    "DepartureBoard",
    "DepartureRecord",
    "DepartureSelection",
    "ErrorDetails",
    "Leg",
    "Option",
    "OptionKind",
    "OvStopGroup",
    "SearchBudget",
    "SelectedDeparture",
    "SelectionStatus",
    "StationRecord",
    "StopFetchResult",
    "TransferClass",
]
