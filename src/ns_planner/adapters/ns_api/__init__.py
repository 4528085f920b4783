"""NS reisinformatie API adapters."""

from ns_planner.adapters.ns_api.http_client import NsHttpClient
from ns_planner.adapters.ns_api.ns_station_gateway import NsStationGateway
from ns_planner.adapters.ns_api.ns_trip_gateway import NsTripGateway

__all__ = ["NsHttpClient", "NsStationGateway", "NsTripGateway"]
