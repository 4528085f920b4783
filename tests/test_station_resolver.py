"""Tests for cached station resolution."""

import asyncio

import pytest

from ns_planner.adapters.cache import TtlCache
from ns_planner.adapters.ns_api import NsStationGateway
from ns_planner.application.services import StationResolver
from ns_planner.domain.errors import UpstreamHTTPError
from ns_planner.domain.models import StationRecord

ROTTERDAM = StationRecord(code="RTD", display_name="Rotterdam Centraal")
ROTTERDAM_NOORD = StationRecord(code="RTN", display_name="Rotterdam Noord")


class FakeStationGateway:
    """In-memory station search that counts calls and can be held or failed."""

    def __init__(self, stations: list[StationRecord] | None = None) -> None:
        self.stations = stations or [ROTTERDAM, ROTTERDAM_NOORD]
        self.queries: list[str] = []
        self.release = asyncio.Event()
        self.release.set()
        self.error: Exception | None = None

    async def search_stations(self, query: str) -> list[StationRecord]:
        self.queries.append(query)
        await self.release.wait()
        if self.error is not None:
            raise self.error
        needle = query.lower()
        return [s for s in self.stations if s.display_name.lower().startswith(needle)]


def _resolver(gateway: FakeStationGateway) -> StationResolver:
    return StationResolver(gateway, TtlCache("stations", ttl_seconds=1800))


class TestStationResolver:
    """Tests for resolve() and find_code()."""

    @pytest.mark.asyncio
    async def test_short_query_makes_no_upstream_call(self) -> None:
        """Given a one-character query, when resolving, then [] is returned without a call."""
        gateway = FakeStationGateway()

        assert await _resolver(gateway).resolve(" r ") == []
        assert gateway.queries == []

    @pytest.mark.asyncio
    async def test_concurrent_identical_queries_make_one_upstream_call(self) -> None:
        """Given twenty concurrent lookups of one query, when resolving, then the upstream is
        called exactly once and everyone gets the same records."""
        gateway = FakeStationGateway()
        gateway.release.clear()
        resolver = _resolver(gateway)

        tasks = [asyncio.create_task(resolver.resolve("Rotterdam")) for _ in range(20)]
        await asyncio.sleep(0)
        gateway.release.set()
        results = await asyncio.gather(*tasks)

        assert len(gateway.queries) == 1
        assert all(result == [ROTTERDAM, ROTTERDAM_NOORD] for result in results)

    @pytest.mark.asyncio
    async def test_cache_key_ignores_case_and_whitespace(self) -> None:
        """Given a cached query, when the same text arrives in another case, then it hits."""
        gateway = FakeStationGateway()
        resolver = _resolver(gateway)

        await resolver.resolve("Rotterdam")
        await resolver.resolve("  ROTTERDAM ")

        assert gateway.queries == ["Rotterdam"]

    @pytest.mark.asyncio
    async def test_prefix_hit_is_served_and_full_query_warms_in_background(self) -> None:
        """Given 'rotte' cached, when 'rotterdam n' misses, then the 'rotte' records are
        returned immediately and the full query is fetched in the background."""
        gateway = FakeStationGateway()
        resolver = _resolver(gateway)
        await resolver.resolve("rotte")

        result = await resolver.resolve("Rotterdam N")

        assert result == [ROTTERDAM, ROTTERDAM_NOORD]
        await asyncio.sleep(0.01)
        assert gateway.queries == ["rotte", "Rotterdam N"]
        assert await resolver.resolve("rotterdam n") == [ROTTERDAM_NOORD]
        assert len(gateway.queries) == 2

    @pytest.mark.asyncio
    async def test_failure_propagates_and_clears_in_flight(self) -> None:
        """Given a failing upstream and nothing cached, when resolving, then the error
        propagates and the next call tries again."""
        gateway = FakeStationGateway()
        gateway.error = UpstreamHTTPError("HTTP 503", status_code=503)
        resolver = _resolver(gateway)

        with pytest.raises(UpstreamHTTPError):
            await resolver.resolve("Utrecht")

        gateway.error = None
        await resolver.resolve("Utrecht")
        assert gateway.queries == ["Utrecht", "Utrecht"]

    @pytest.mark.asyncio
    async def test_find_code_matches_display_name_exactly(self) -> None:
        """Given a via name, when finding its code, then the exact display name wins and the
        query is truncated to 12 characters."""
        gateway = FakeStationGateway()

        code = await _resolver(gateway).find_code("rotterdam noord")

        assert code == "RTN"
        assert gateway.queries == ["rotterdam no"]

    @pytest.mark.asyncio
    async def test_find_code_does_not_use_prefix_fallback(self) -> None:
        """Given a cached shorter prefix, when finding a code, then the upstream is asked."""
        gateway = FakeStationGateway()
        resolver = _resolver(gateway)
        await resolver.resolve("ro")

        assert await resolver.find_code("Rotterdam Centraal") == "RTD"
        assert gateway.queries == ["ro", "Rotterdam Ce"]

    @pytest.mark.asyncio
    async def test_find_code_returns_none_on_failure_or_no_match(self) -> None:
        """Given an upstream failure or an unknown name, when finding a code, then None."""
        gateway = FakeStationGateway()
        resolver = _resolver(gateway)

        assert await resolver.find_code("Gouda") is None

        gateway.error = UpstreamHTTPError("HTTP 500", status_code=500)
        assert await resolver.find_code("Schiedam Centrum") is None


class TestNsStationGatewayPayload:
    """Tests for parsing the NS station payload."""

    def test_display_name_falls_back_through_name_variants(self) -> None:
        """Given entries with different name fields, when parsing, then lang, middel, kort and
        finally the code are used."""
        payload = [
            {"code": "RTD", "namen": {"lang": "Rotterdam Centraal", "kort": "R'dam C."}},
            {"stationCode": "GVC", "namen": {"middel": "Den Haag C."}},
            {"code": "UT", "namen": {"kort": "Utrecht C."}},
            {"code": "ASD"},
            {"namen": {"lang": "No code"}},
            "garbage",
        ]

        records = NsStationGateway.parse_payload(payload)

        assert [(r.code, r.display_name) for r in records] == [
            ("RTD", "Rotterdam Centraal"),
            ("GVC", "Den Haag C."),
            ("UT", "Utrecht C."),
            ("ASD", "ASD"),
        ]
