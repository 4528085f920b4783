"""HTTP endpoints of the planner."""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ns_planner.adapters.cache import SearchSignature
from ns_planner.adapters.serializers import board_to_json, options_to_json, station_to_json
from ns_planner.adapters.web.request_params import TripQuery, bounded_int, required, timestamp
from ns_planner.adapters.web.supersession import SupersessionTracker, caller_id, search_scope
from ns_planner.domain.errors import (
    ConfigurationError,
    ParameterError,
    PlannerError,
    UpstreamError,
    UpstreamHTTPError,
)
from ns_planner.domain.models.error_details import ErrorDetails
from ns_planner.domain.models.option import Option

if TYPE_CHECKING:
    from ns_planner.wiring import PlannerServices

logger = logging.getLogger(__name__)

STATIONS_CACHE_CONTROL = "public, max-age=60, stale-while-revalidate=300"
DEFAULT_BOARD_LIMIT = 80
MAX_BOARD_LIMIT = 200

Handler = Callable[[Request], Awaitable[Response]]


def error_response(error: Exception, status_code: int) -> JSONResponse:
    upstream_status = error.status_code if isinstance(error, UpstreamHTTPError) else None
    body = ErrorDetails(error=str(error) or error.__class__.__name__, status_code=upstream_status)
    return JSONResponse(body.model_dump(), status_code=status_code)


def json_errors(handler: Handler) -> Handler:
    """Turn planner exceptions into JSON error responses."""

    @functools.wraps(handler)
    async def wrapper(request: Request) -> Response:
        try:
            return await handler(request)
        except ParameterError as e:
            return error_response(e, 400)
        except ConfigurationError as e:
            logger.error(f"{request.url.path}: {e}")
            return error_response(e, 500)
        except UpstreamError as e:
            logger.error(f"{request.url.path}: upstream failure: {e}")
            return error_response(e, 502)
        except PlannerError as e:
            logger.error(f"{request.url.path}: {e}")
            return error_response(e, 500)
        except Exception as e:
            logger.exception(f"{request.url.path}: unexpected error")
            return error_response(RuntimeError(f"Internal error: {e.__class__.__name__}"), 500)

    return wrapper


def _services(request: Request) -> PlannerServices:
    services: PlannerServices | None = getattr(request.app.state, "services", None)
    if services is None:
        raise ConfigurationError("Planner services are not initialized")
    return services


def _tracker(request: Request) -> SupersessionTracker:
    tracker: SupersessionTracker = request.app.state.tracker
    return tracker


async def health(request: Request) -> Response:
    services: PlannerServices | None = getattr(request.app.state, "services", None)
    configured = services is not None and services.search_service is not None
    return JSONResponse({"status": "ok", "nsApiConfigured": configured})


@json_errors
async def stations(request: Request) -> Response:
    """``GET /stations?q=``: station autocomplete."""
    resolver = _services(request).require_station_lookup()
    records = await resolver.resolve(request.query_params.get("q", ""))
    return JSONResponse(
        [station_to_json(record) for record in records],
        headers={"Cache-Control": STATIONS_CACHE_CONTROL},
    )


async def _search(
    request: Request,
    endpoint: str,
    signature: SearchSignature,
    compute: Callable[[], Awaitable[list[Option]]],
) -> Response:
    """Run a cached search and drop the result if the caller has started a newer one."""
    caller = caller_id(request)
    scope = search_scope(caller, endpoint, signature)
    tracker = _tracker(request)
    generation = tracker.begin(caller, scope)

    options = await _services(request).response_cache.get_or_compute(signature, compute)

    if not tracker.is_current(caller, scope, generation):
        logger.info(f"Discarding superseded {endpoint} result for {caller}")
        body = ErrorDetails(error="Superseded by a newer search", status_code=None)
        return JSONResponse(body.model_dump(), status_code=409)
    return JSONResponse(options_to_json(options))


@json_errors
async def trips(request: Request) -> Response:
    """``GET /reis``: one upstream search, optionally with the shortest transfers."""
    service = _services(request).require_search_service()
    query = TripQuery.from_params(request.query_params)
    signature = SearchSignature(
        kind="direct",
        from_station=query.from_station,
        to_station=query.to_station,
        date_time=query.date_time,
        search_for_arrival=query.search_for_arrival,
        extreme=query.extreme,
    )
    return await _search(
        request,
        "reis",
        signature,
        lambda: service.search_direct(
            query.from_station,
            query.to_station,
            query.date_time,
            search_for_arrival=query.search_for_arrival,
            shortest_transfers=query.extreme,
        ),
    )


@json_errors
async def combination_trips(request: Request) -> Response:
    """``GET /reis-extreme-b``: search with via-station combinations."""
    service = _services(request).require_search_service()
    query = TripQuery.from_params(request.query_params)
    signature = SearchSignature(
        kind="combination",
        from_station=query.from_station,
        to_station=query.to_station,
        date_time=query.date_time,
        search_for_arrival=query.search_for_arrival,
    )
    return await _search(
        request,
        "reis-extreme-b",
        signature,
        lambda: service.search(
            query.from_station,
            query.to_station,
            query.date_time,
            search_for_arrival=query.search_for_arrival,
        ),
    )


@json_errors
async def departure_board(request: Request) -> Response:
    """``GET /ov/by-station``: departures of a stop group, with a selection after ``after``."""
    services = _services(request)
    params = request.query_params
    (station,) = required(params, "station")
    limit = bounded_int(params, "limit", DEFAULT_BOARD_LIMIT, 1, MAX_BOARD_LIMIT)
    after_text = params.get("after", "").strip()
    after = timestamp(after_text, "after", services.config.zone) if after_text else None

    board = await services.departure_repository.get_board(station, limit=limit, after=after)
    selection = (
        services.window_selector.select(board.departures, after, board.earlier_departures)
        if after is not None
        else None
    )
    return JSONResponse(board_to_json(board, selection))


@json_errors
async def transit_options(request: Request) -> Response:
    """``GET /ov/stations?name=``: transit options configured for a train station."""
    (name,) = required(request.query_params, "name")
    return JSONResponse(_services(request).ov_config.buttons_for(name))


def build_routes() -> list[Route]:
    return [
        Route("/health", health, methods=["GET"]),
        Route("/stations", stations, methods=["GET"]),
        Route("/reis", trips, methods=["GET"]),
        Route("/reis-extreme-b", combination_trips, methods=["GET"]),
        Route("/ov/by-station", departure_board, methods=["GET"]),
        Route("/ov/stations", transit_options, methods=["GET"]),
    ]
