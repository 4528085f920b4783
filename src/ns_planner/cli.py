"""Command line access to the planner without running the server."""

import asyncio
import json
import sys
from datetime import datetime
from typing import Any

import aiohttp

from ns_planner.adapters.config import AppConfig
from ns_planner.adapters.serializers import board_to_json, options_to_json, station_to_json
from ns_planner.domain.errors import PlannerError
from ns_planner.domain.models.option import Option
from ns_planner.domain.timestamps import parse_timestamp
from ns_planner.wiring import PlannerServices, build_services


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _hhmm(value: datetime, config: AppConfig) -> str:
    return value.astimezone(config.zone).strftime("%H:%M")


def format_option(option: Option, config: AppConfig) -> str:
    """One-line summary of an option followed by its legs."""
    transfer = (
        f", shortest transfer {option.min_transfer_minutes} min"
        if option.min_transfer_minutes is not None
        else ""
    )
    lines = [
        f"{_hhmm(option.departure_time, config)} -> {_hhmm(option.arrival_time, config)}"
        f"  {option.duration_minutes} min, {option.transfer_count} transfer(s){transfer}"
        f"  [{option.kind.value}]"
    ]
    for leg in option.legs:
        delay = f" +{leg.delay_minutes}" if leg.delay_minutes else ""
        lines.append(
            f"    {_hhmm(leg.departure_time, config)}{delay} {leg.origin_name}"
            f" ({leg.origin_track or '-'}) -> {_hhmm(leg.arrival_time, config)}"
            f" {leg.dest_name} ({leg.dest_track or '-'})  {leg.product_label}"
        )
    return "\n".join(lines)


async def _stations(services: PlannerServices, args: Any) -> None:
    records = await services.require_station_lookup().resolve(args.query)
    if args.json:
        _print_json([station_to_json(record) for record in records])
        return
    if not records:
        print(f"No stations found for '{args.query}'", file=sys.stderr)
        sys.exit(1)
    print(f"\nFound {len(records)} station(s):\n")
    for record in records:
        print(f"  {record.display_name}")
        print(f"    Code: {record.code}")


async def _search(services: PlannerServices, args: Any) -> None:
    config = services.config
    date_time = args.datetime or datetime.now(config.zone).isoformat(timespec="minutes")
    if parse_timestamp(date_time) is None:
        print(f"Invalid date-time: {date_time}", file=sys.stderr)
        sys.exit(2)

    service = services.require_search_service()
    if args.combine:
        options = await service.search(args.van, args.naar, date_time, args.arrival)
    else:
        options = await service.search_direct(
            args.van,
            args.naar,
            date_time,
            search_for_arrival=args.arrival,
            shortest_transfers=args.extreme,
        )

    if args.json:
        _print_json(options_to_json(options))
        return
    if not options:
        print(f"No journeys found from {args.van} to {args.naar}", file=sys.stderr)
        sys.exit(1)
    print(f"\n{len(options)} journey(s) from {args.van} to {args.naar}:\n")
    for option in options:
        print(format_option(option, config))
        print()


async def _board(services: PlannerServices, args: Any) -> None:
    after = None
    if args.after:
        after = parse_timestamp(args.after, default_tz=services.config.zone)
        if after is None:
            print(f"Invalid date-time: {args.after}", file=sys.stderr)
            sys.exit(2)

    repository = services.departure_repository
    board = await repository.get_board(args.code, limit=args.limit, after=after)
    selection = None
    if after is not None:
        selection = services.window_selector.select(
            board.departures, after, board.earlier_departures
        )

    if args.json:
        _print_json(board_to_json(board, selection))
        return

    for stop in board.stops:
        if stop.error:
            print(f"  Stop {stop.stop_code} failed: {stop.error}", file=sys.stderr)
    rows = (
        [(row.departure, f"{row.transfer_minutes:>3} min") for row in selection.rows]
        if selection is not None
        else [(departure, "") for departure in board.departures]
    )
    if selection is not None and selection.note:
        print(selection.note)
    for departure, transfer in rows:
        delay = f" +{departure.delay_minutes}" if departure.delay_minutes else ""
        print(
            f"  {_hhmm(departure.expected_time, services.config)}{delay:<4} "
            f"{departure.transport_type} {departure.line} -> {departure.destination}"
            f"  {departure.stop_name} {transfer}".rstrip()
        )


async def main() -> None:
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="NS journey planner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search for stations
  ns-planner-cli stations "Rotterdam"

  # Search journeys, filling thin results with via-station combinations
  ns-planner-cli search RTD GVC --combine

  # Show connecting local transit after a train arrives
  ns-planner-cli board rtd_tram --after 2025-03-01T10:12
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    stations_parser = subparsers.add_parser("stations", help="Search for stations")
    stations_parser.add_argument("query", help="Station name to search for")
    stations_parser.add_argument("--json", action="store_true", help="Output as JSON")

    search_parser = subparsers.add_parser("search", help="Search journeys")
    search_parser.add_argument("van", help="Origin station code")
    search_parser.add_argument("naar", help="Destination station code")
    search_parser.add_argument("--datetime", help="ISO date-time (default: now)")
    search_parser.add_argument(
        "--arrival", action="store_true", help="Treat the date-time as latest arrival"
    )
    search_parser.add_argument(
        "--combine", action="store_true", help="Add via-station combinations"
    )
    search_parser.add_argument(
        "--extreme", action="store_true", help="Ask for the shortest possible transfers"
    )
    search_parser.add_argument("--json", action="store_true", help="Output as JSON")

    board_parser = subparsers.add_parser("board", help="Show a local-transit departure board")
    board_parser.add_argument("code", help="OV stop group code from the OV station config")
    board_parser.add_argument("--after", help="Train arrival time (ISO date-time)")
    board_parser.add_argument("--limit", type=int, default=80, help="Maximum departures")
    board_parser.add_argument("--json", action="store_true", help="Output as JSON")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = AppConfig()
    commands = {"stations": _stations, "search": _search, "board": _board}

    try:
        async with aiohttp.ClientSession() as session:
            services = build_services(config, session)
            try:
                await commands[args.command](services, args)
            finally:
                await services.stop()
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)
    except (PlannerError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
