"""JSON shapes of planner results, shared by the HTTP endpoints and the CLI."""

from datetime import datetime
from typing import Any

from ns_planner.domain.models.departure import DepartureRecord
from ns_planner.domain.models.departure_board import DepartureBoard
from ns_planner.domain.models.departure_selection import DepartureSelection, SelectedDeparture
from ns_planner.domain.models.leg import Leg
from ns_planner.domain.models.option import Option
from ns_planner.domain.models.station import StationRecord


def _iso(value: datetime) -> str:
    return value.isoformat()


def leg_to_json(leg: Leg) -> dict[str, Any]:
    return {
        "originName": leg.origin_name,
        "destName": leg.dest_name,
        "dep": _iso(leg.departure_time),
        "arr": _iso(leg.arrival_time),
        "depTrack": leg.origin_track,
        "arrTrack": leg.dest_track,
        "delayMin": leg.delay_minutes,
        "product": leg.product_label,
    }


def option_to_json(option: Option) -> dict[str, Any]:
    return {
        "mode": option.kind.value,
        "durationMin": option.duration_minutes,
        "depart": _iso(option.departure_time),
        "arrive": _iso(option.arrival_time),
        "minTransferMin": option.min_transfer_minutes,
        "legs": [leg_to_json(leg) for leg in option.legs],
    }


def options_to_json(options: list[Option]) -> dict[str, Any]:
    return {"options": [option_to_json(option) for option in options]}


def station_to_json(station: StationRecord) -> dict[str, Any]:
    """Station in the shape of the upstream payload, reduced to what the client reads."""
    return {"code": station.code, "namen": {"lang": station.display_name}}


def departure_to_json(departure: DepartureRecord) -> dict[str, Any]:
    return {
        "line": departure.line,
        "destination": departure.destination,
        "planned": _iso(departure.planned_time),
        "expected": _iso(departure.expected_time),
        "transportType": departure.transport_type,
        "delayMin": departure.delay_minutes,
        "stopCode": departure.stop_code,
        "stopName": departure.stop_name,
    }


def _selected_to_json(row: SelectedDeparture) -> dict[str, Any]:
    return {
        **departure_to_json(row.departure),
        "transferMin": row.transfer_minutes,
        "transferClass": row.transfer_class.value,
    }


def selection_to_json(selection: DepartureSelection) -> dict[str, Any]:
    window_used: int | str | None = selection.window_minutes
    if selection.unbounded:
        window_used = "unbounded"
    return {
        "rows": [_selected_to_json(row) for row in selection.rows],
        "windowUsed": window_used,
        "status": selection.status.value,
        "note": selection.note,
    }


def board_to_json(
    board: DepartureBoard, selection: DepartureSelection | None = None
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "station": board.station,
        "departures": [departure_to_json(d) for d in board.departures],
        "stops": [{"stopCode": stop.stop_code, "error": stop.error} for stop in board.stops],
    }
    if selection is not None:
        body["selection"] = selection_to_json(selection)
    return body
