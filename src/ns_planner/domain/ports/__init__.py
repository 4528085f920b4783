"""Ports (interfaces) for the ports-and-adapters architecture."""

from ns_planner.domain.ports.departure_board_repository import DepartureBoardRepository
from ns_planner.domain.ports.departure_selector import DepartureSelector
from ns_planner.domain.ports.journey_search_service import JourneySearchService
from ns_planner.domain.ports.station_gateway import StationGateway
from ns_planner.domain.ports.station_lookup import StationLookup
from ns_planner.domain.ports.trip_gateway import TripGateway

__all__ = [
    "DepartureBoardRepository",
    "DepartureSelector",
    "JourneySearchService",
    "StationGateway",
    "StationLookup",
    "TripGateway",
]
