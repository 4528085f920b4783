"""Normalization of raw NS trips into journey options."""

import logging
from typing import Any

from ns_planner.domain.models.leg import Leg
from ns_planner.domain.models.option import Option, OptionKind
from ns_planner.domain.timestamps import parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_LABEL = "Trein"


class TripNormalizer:
    """Converts raw upstream trips into Option objects.

    This is the only place that knows the upstream trip shape. Malformed trips are
    dropped (None), never raised.
    """

    @staticmethod
    def normalize_all(raw_trips: list[Any], kind: OptionKind = OptionKind.DIRECT) -> list[Option]:
        """Normalize trips in order, dropping the ones that do not normalize."""
        options = []
        for raw_trip in raw_trips:
            option = TripNormalizer.normalize(raw_trip, kind)
            if option is not None:
                options.append(option)
        return options

    @staticmethod
    def normalize(raw_trip: Any, kind: OptionKind = OptionKind.DIRECT) -> Option | None:
        """Normalize one raw trip.

        Every leg must have parseable times, including intermediate ones. A trip whose
        middle leg has no usable time is dropped as a whole.

        Returns:
            The option, or None when the trip has no legs, any leg time does not parse,
            or the journey would end before it starts.
        """
        if not isinstance(raw_trip, dict):
            return None
        raw_legs = raw_trip.get("legs")
        if not isinstance(raw_legs, list) or not raw_legs:
            return None

        legs = []
        for raw_leg in raw_legs:
            leg = TripNormalizer._normalize_leg(raw_leg)
            if leg is None:
                logger.debug("Dropping trip with an unparseable leg")
                return None
            legs.append(leg)

        return Option.from_legs(kind, tuple(legs))

    @staticmethod
    def _stop(raw_leg: dict[str, Any], key: str) -> dict[str, Any]:
        stop = raw_leg.get(key)
        return stop if isinstance(stop, dict) else {}

    @staticmethod
    def _stop_time(stop: dict[str, Any]) -> Any:
        return stop.get("plannedDateTime") or stop.get("actualDateTime")

    @staticmethod
    def _track(stop: dict[str, Any]) -> str | None:
        track = stop.get("plannedTrack") or stop.get("actualTrack")
        return str(track) if track not in (None, "") else None

    @staticmethod
    def _delay_minutes(origin: dict[str, Any]) -> int:
        delay = origin.get("delayInMinutes")
        try:
            return int(delay) if delay is not None else 0
        except (TypeError, ValueError):
            return 0

    @staticmethod
    def product_label(raw_leg: dict[str, Any]) -> str:
        """Product label in priority order: plain string, long, short, category name."""
        product = raw_leg.get("product")
        if isinstance(product, str) and product:
            return product
        if isinstance(product, dict):
            for key in ("longCategoryName", "shortCategoryName", "categoryName"):
                value = product.get(key)
                if isinstance(value, str) and value:
                    return value
        return DEFAULT_PRODUCT_LABEL

    @staticmethod
    def _normalize_leg(raw_leg: Any) -> Leg | None:
        if not isinstance(raw_leg, dict):
            return None

        origin = TripNormalizer._stop(raw_leg, "origin")
        destination = TripNormalizer._stop(raw_leg, "destination")
        departure_time = parse_timestamp(TripNormalizer._stop_time(origin))
        arrival_time = parse_timestamp(TripNormalizer._stop_time(destination))
        if departure_time is None or arrival_time is None:
            return None

        return Leg(
            origin_name=str(origin.get("name") or ""),
            dest_name=str(destination.get("name") or ""),
            departure_time=departure_time,
            arrival_time=arrival_time,
            origin_track=TripNormalizer._track(origin),
            dest_track=TripNormalizer._track(destination),
            delay_minutes=TripNormalizer._delay_minutes(origin),
            product_label=TripNormalizer.product_label(raw_leg),
        )
