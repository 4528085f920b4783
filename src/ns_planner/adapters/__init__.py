"""Adapters layer - external system integrations."""

from ns_planner.adapters.config import AppConfig
from ns_planner.adapters.ns_api import NsStationGateway, NsTripGateway
from ns_planner.adapters.ovapi import OvapiDepartureRepository

__all__ = [
    "AppConfig",
    "NsStationGateway",
    "NsTripGateway",
    "OvapiDepartureRepository",
]
