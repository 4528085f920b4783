"""Query parameter parsing for the HTTP endpoints."""

from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo

from starlette.datastructures import QueryParams

from ns_planner.domain.errors import ParameterError
from ns_planner.domain.timestamps import parse_timestamp

TRUE_VALUES = {"1", "true", "yes", "on"}


def flag(params: QueryParams, name: str) -> bool:
    return params.get(name, "").strip().lower() in TRUE_VALUES


def required(params: QueryParams, *names: str) -> list[str]:
    """Return the named parameters, raising ParameterError if any is missing."""
    values = [params.get(name, "").strip() for name in names]
    missing = [name for name, value in zip(names, values, strict=True) if not value]
    if missing:
        raise ParameterError(f"Missing parameters: {', '.join(missing)}")
    return values


def timestamp(value: str, name: str, default_tz: tzinfo = UTC) -> datetime:
    parsed = parse_timestamp(value, default_tz=default_tz)
    if parsed is None:
        raise ParameterError(f"Parameter '{name}' is not a valid date-time: {value!r}")
    return parsed


def bounded_int(params: QueryParams, name: str, default: int, low: int, high: int) -> int:
    raw = params.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ParameterError(f"Parameter '{name}' must be an integer") from e
    if not low <= value <= high:
        raise ParameterError(f"Parameter '{name}' must be between {low} and {high}")
    return value


@dataclass(frozen=True)
class TripQuery:
    """Parameters of the trip search endpoints."""

    from_station: str
    to_station: str
    date_time: str
    search_for_arrival: bool
    extreme: bool = False

    @classmethod
    def from_params(cls, params: QueryParams) -> "TripQuery":
        """Parse ``van``, ``naar``, ``datetime``, ``searchForArrival`` and ``extreme``.

        Raises:
            ParameterError: When a required parameter is missing or the date-time is
                not parseable.
        """
        from_station, to_station, date_time = required(params, "van", "naar", "datetime")
        timestamp(date_time, "datetime")
        return cls(
            from_station=from_station,
            to_station=to_station,
            date_time=date_time,
            search_for_arrival=flag(params, "searchForArrival"),
            extreme=flag(params, "extreme"),
        )
