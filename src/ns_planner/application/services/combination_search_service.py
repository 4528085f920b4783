"""Journey search that fills thin results with via-station combinations."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import Counter
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from ns_planner.application.services.option_scoring import ScoringPolicy, dedupe_by_signature
from ns_planner.application.services.trip_normalizer import TripNormalizer
from ns_planner.domain.errors import UpstreamError
from ns_planner.domain.models.option import Option, OptionKind
from ns_planner.domain.models.search_budget import SearchBudget
from ns_planner.domain.timestamps import minutes_between, parse_timestamp

if TYPE_CHECKING:
    from ns_planner.application.services.station_resolver import StationResolver
    from ns_planner.domain.ports.trip_gateway import TripGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SearchSettings:
    """Tunables of the combination search."""

    target: int = 10
    max_via: int = 8
    top_a: int = 5
    top_b: int = 8
    max_transfer_minutes: int = 20
    budget_seconds: float = 15.0
    buffer_cap: int = 80
    buffer_trim_to: int = 55


class BestOptionsBuffer:
    """Bounded collection of the best combinations found so far."""

    def __init__(self, scoring: ScoringPolicy, cap: int = 80, trim_to: int = 55) -> None:
        self._scoring = scoring
        self._cap = cap
        self._trim_to = trim_to
        self._options: list[Option] = []

    def __len__(self) -> int:
        return len(self._options)

    def extend(self, options: Iterable[Option]) -> None:
        for option in options:
            self._options.append(option)
            if len(self._options) > self._cap:
                self._options = self._scoring.rank(self._options)[: self._trim_to]

    def snapshot(self) -> list[Option]:
        return list(self._options)


@dataclass(frozen=True)
class _SearchContext:
    from_station: str
    to_station: str
    anchor_time: str
    budget: SearchBudget


class CombinationSearchService:
    """Finds journeys, combining two searches through a via station when needed.

    The base search runs first. When it yields fewer than ``target`` options, the most
    frequent transfer stations of the base trips become via candidates, and for each
    via the best "from -> via" halves are joined with the best "via -> to" halves.
    Exploration stops at the search budget; whatever finished in time is merged.
    """

    def __init__(
        self,
        trip_gateway: TripGateway,
        station_resolver: StationResolver,
        scoring: ScoringPolicy | None = None,
        settings: SearchSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the service.

        Args:
            trip_gateway: Upstream trip search.
            station_resolver: Resolver used to turn via names into station codes.
            scoring: Ranking policy.
            settings: Search tunables.
            clock: Monotonic clock for the search budget.
        """
        self._trip_gateway = trip_gateway
        self._station_resolver = station_resolver
        self._scoring = scoring or ScoringPolicy()
        self._settings = settings or SearchSettings()
        self._clock = clock
        # Branches still running after their search returned; results are discarded
        self._stragglers: set[asyncio.Task] = set()

    @property
    def scoring(self) -> ScoringPolicy:
        return self._scoring

    async def search_direct(
        self,
        from_station: str,
        to_station: str,
        date_time: str,
        search_for_arrival: bool = False,
        shortest_transfers: bool = False,
    ) -> list[Option]:
        """Run a single upstream search and return its options in upstream order.

        Raises:
            UpstreamError: When the upstream search fails.
        """
        raw_trips = await self._trip_gateway.fetch_trips(
            from_station,
            to_station,
            date_time,
            search_for_arrival=search_for_arrival,
            shortest_transfers=shortest_transfers,
        )
        return dedupe_by_signature(TripNormalizer.normalize_all(raw_trips))

    async def search(
        self,
        from_station: str,
        to_station: str,
        date_time: str,
        search_for_arrival: bool = False,
    ) -> list[Option]:
        """Search journeys, adding via combinations when the base search is thin.

        Returns:
            At most ``target`` options, best score first, unique by signature.

        Raises:
            UpstreamError: When the base search fails. Failures of via branches only
                drop that via.
        """
        settings = self._settings
        budget = SearchBudget.starting_now(settings.budget_seconds, self._clock)

        base_options = await self.search_direct(
            from_station,
            to_station,
            date_time,
            search_for_arrival=search_for_arrival,
            shortest_transfers=True,
        )
        if len(base_options) >= settings.target:
            return self._scoring.rank(base_options)[: settings.target]

        via_names = self.via_candidates(base_options, settings.max_via)
        logger.info(
            f"{len(base_options)} base option(s) for {from_station} -> {to_station}, "
            f"exploring {len(via_names)} via candidate(s)"
        )

        context = _SearchContext(
            from_station=from_station,
            to_station=to_station,
            anchor_time=self._anchor_time(date_time, search_for_arrival, base_options),
            budget=budget,
        )
        combinations = await self._explore(via_names, context)

        if search_for_arrival:
            requested = parse_timestamp(date_time)
            if requested is not None:
                combinations = [c for c in combinations if c.arrival_time <= requested]

        merged = dedupe_by_signature([*base_options, *combinations])
        return self._scoring.rank(merged)[: settings.target]

    @staticmethod
    def via_candidates(options: Iterable[Option], max_via: int) -> list[str]:
        """Most frequent transfer stations, ties in first-seen order."""
        counts: Counter[str] = Counter()
        for option in options:
            for leg in option.legs[:-1]:
                if leg.dest_name:
                    counts[leg.dest_name] += 1
        return [name for name, _ in counts.most_common(max_via)]

    @staticmethod
    def _anchor_time(
        date_time: str, search_for_arrival: bool, base_options: list[Option]
    ) -> str:
        """Departure time for the first halves.

        In arrival mode the requested time is the latest arrival, so the halves start
        from the earliest base departure instead.
        """
        if search_for_arrival and base_options:
            return min(option.departure_time for option in base_options).isoformat()
        return date_time

    async def _explore(self, via_names: list[str], context: _SearchContext) -> list[Option]:
        if not via_names or context.budget.expired():
            return []

        endpoints = {context.from_station.lower(), context.to_station.lower()}
        codes = await self._run_within_budget(
            [(name, self._factory(self._station_resolver.find_code, name)) for name in via_names],
            context.budget,
        )
        via_codes: list[str] = []
        for code in codes:
            if code and code.lower() not in endpoints and code not in via_codes:
                via_codes.append(code)
        if not via_codes:
            return []

        buffer = BestOptionsBuffer(
            self._scoring, self._settings.buffer_cap, self._settings.buffer_trim_to
        )
        for branch in await self._run_within_budget(
            [(code, self._factory(self._explore_via, code, context)) for code in via_codes],
            context.budget,
        ):
            buffer.extend(branch)
        return buffer.snapshot()

    @staticmethod
    def _factory(
        func: Callable[..., Awaitable[T]], *args: object
    ) -> Callable[[], Awaitable[T]]:
        return lambda: func(*args)

    async def _run_within_budget(
        self,
        branches: list[tuple[str, Callable[[], Awaitable[T]]]],
        budget: SearchBudget,
    ) -> list[T]:
        """Run branches concurrently until they finish or the budget runs out.

        Returns the results of the branches that completed in time, in submission
        order. Branches failing with an UpstreamError are logged and skipped. Branches
        still running at the deadline keep running but their results are discarded.
        """
        tasks: list[tuple[str, asyncio.Task[T]]] = []
        for label, start in branches:
            if budget.expired():
                logger.info(f"Search budget exhausted before starting branch '{label}'")
                break
            tasks.append((label, asyncio.ensure_future(start())))
        if not tasks:
            return []

        try:
            _done, pending = await asyncio.wait(
                [task for _, task in tasks], timeout=budget.remaining()
            )
        except asyncio.CancelledError:
            for _, task in tasks:
                task.cancel()
            raise
        if pending:
            logger.info(f"Search budget exhausted with {len(pending)} branch(es) still running")
            for task in pending:
                self._retain(task)

        results: list[T] = []
        for label, task in tasks:
            if task in pending:
                continue
            error = task.exception()
            if isinstance(error, UpstreamError):
                logger.warning(f"Dropping via branch '{label}': {error}")
            elif error is not None:
                raise error
            else:
                results.append(task.result())
        return results

    def _retain(self, task: asyncio.Task) -> None:
        self._stragglers.add(task)

        def forget(done: asyncio.Task) -> None:
            self._stragglers.discard(done)
            if not done.cancelled() and done.exception() is not None:
                logger.debug(
                    f"Late via branch failed after its search returned: {done.exception()}"
                )

        task.add_done_callback(forget)

    async def _explore_via(self, via_code: str, context: _SearchContext) -> list[Option]:
        """Build all valid combinations through one via station."""
        if context.budget.expired():
            return []

        first_trips = await self._trip_gateway.fetch_trips(
            context.from_station, via_code, context.anchor_time, shortest_transfers=True
        )
        first_halves = sorted(
            TripNormalizer.normalize_all(first_trips), key=lambda o: o.duration_minutes
        )[: self._settings.top_a]

        results = await asyncio.gather(
            *(self._combine_with_second_halves(first, via_code, context) for first in first_halves),
            return_exceptions=True,
        )
        combinations: list[Option] = []
        for result in results:
            if isinstance(result, BaseException):
                raise result
            combinations.extend(result)
        return combinations

    async def _combine_with_second_halves(
        self, first: Option, via_code: str, context: _SearchContext
    ) -> list[Option]:
        if context.budget.expired():
            return []

        second_trips = await self._trip_gateway.fetch_trips(
            via_code,
            context.to_station,
            first.arrival_time.isoformat(),
            shortest_transfers=True,
        )
        # The upstream may return trips leaving before the requested time
        second_halves = sorted(
            (
                option
                for option in TripNormalizer.normalize_all(second_trips)
                if option.departure_time >= first.arrival_time
            ),
            key=lambda o: o.duration_minutes,
        )[: self._settings.top_b]

        combinations = []
        for second in second_halves:
            combination = self.combine(first, second, self._settings.max_transfer_minutes)
            if combination is not None:
                combinations.append(combination)
        return combinations

    @staticmethod
    def combine(first: Option, second: Option, max_transfer_minutes: int) -> Option | None:
        """Join two halves at the via station.

        Returns None when the transfer is negative or longer than allowed.
        """
        transfer = minutes_between(first.arrival_time, second.departure_time)
        if transfer < 0 or transfer > max_transfer_minutes:
            return None
        return Option.from_legs(OptionKind.COMBINATION, first.legs + second.legs)

    async def aclose(self) -> None:
        """Cancel branches that outlived their search."""
        for task in list(self._stragglers):
            task.cancel()
        if self._stragglers:
            await asyncio.gather(*self._stragglers, return_exceptions=True)
        self._stragglers.clear()
