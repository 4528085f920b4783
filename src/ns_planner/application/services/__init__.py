"""Application services (use cases) for journey search."""

from ns_planner.application.services.combination_search_service import (
    BestOptionsBuffer,
    CombinationSearchService,
    SearchSettings,
)
from ns_planner.application.services.departure_window_selector import (
    DepartureWindowSelector,
    classify_transfer,
)
from ns_planner.application.services.option_scoring import ScoringPolicy, dedupe_by_signature
from ns_planner.application.services.station_resolver import StationResolver
from ns_planner.application.services.trip_normalizer import TripNormalizer

__all__ = [
    "BestOptionsBuffer",
    "CombinationSearchService",
    "DepartureWindowSelector",
    "ScoringPolicy",
    "SearchSettings",
    "StationResolver",
    "TripNormalizer",
    "classify_transfer",
    "dedupe_by_signature",
]
