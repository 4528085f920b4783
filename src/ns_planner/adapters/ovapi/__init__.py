"""OVAPI departure board adapters."""

from ns_planner.adapters.ovapi.departure_parser import DepartureParser
from ns_planner.adapters.ovapi.ovapi_departure_repository import OvapiDepartureRepository

__all__ = ["DepartureParser", "OvapiDepartureRepository"]
