"""Tests for the TTL cache and the response cache."""

import asyncio

import pytest
from trip_factories import leg, option

from ns_planner.adapters.cache import ResponseCache, SearchSignature, TtlCache
from ns_planner.domain.errors import UpstreamTimeout


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestTtlCache:
    """Tests for expiry, capacity and coalescing."""

    def test_entry_older_than_ttl_is_absent_and_evicted(self) -> None:
        """Given an entry past its TTL, when reading, then it is absent and removed."""
        clock = FakeClock()
        cache: TtlCache[str] = TtlCache("test", ttl_seconds=10, clock=clock)
        cache.set("k", "v")

        clock.now += 10
        assert cache.get("k") == "v"

        clock.now += 0.5
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_capacity_evicts_oldest_write(self) -> None:
        """Given a full cache, when writing a new key, then the oldest written key goes."""
        cache: TtlCache[int] = TtlCache("test", ttl_seconds=60, max_entries=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 3)
        cache.set("c", 4)

        assert cache.get("b") is None
        assert cache.get("a") == 3
        assert cache.get("c") == 4

    def test_sweep_removes_only_expired_entries(self) -> None:
        """Given one stale and one fresh entry, when sweeping, then only the stale one goes."""
        clock = FakeClock()
        cache: TtlCache[int] = TtlCache("test", ttl_seconds=10, clock=clock)
        cache.set("old", 1)
        clock.now += 8
        cache.set("new", 2)
        clock.now += 5

        assert cache.sweep() == 1
        assert "new" in cache
        assert "old" not in cache

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_computation(self) -> None:
        """Given ten concurrent misses for one key, when computing, then compute runs once."""
        cache: TtlCache[str] = TtlCache("test", ttl_seconds=60)
        calls = 0
        release = asyncio.Event()

        async def compute() -> str:
            nonlocal calls
            calls += 1
            await release.wait()
            return "value"

        waiters = [asyncio.create_task(cache.get_or_compute("k", compute)) for _ in range(10)]
        await asyncio.sleep(0)
        assert cache.is_in_flight("k")
        release.set()

        results = await asyncio.gather(*waiters)

        assert results == ["value"] * 10
        assert calls == 1
        assert not cache.is_in_flight("k")
        assert cache.get("k") == "value"

    @pytest.mark.asyncio
    async def test_failed_computation_is_not_cached_and_clears_in_flight(self) -> None:
        """Given a failing computation, when it settles, then nothing is cached and a retry
        computes again."""
        cache: TtlCache[str] = TtlCache("test", ttl_seconds=60)

        async def fail() -> str:
            raise UpstreamTimeout("slow")

        async def succeed() -> str:
            return "ok"

        with pytest.raises(UpstreamTimeout):
            await cache.get_or_compute("k", fail)

        assert not cache.is_in_flight("k")
        assert cache.get("k") is None
        assert await cache.get_or_compute("k", succeed) == "ok"

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_shared_call(self) -> None:
        """Given two waiters, when one is cancelled, then the other still gets the value."""
        cache: TtlCache[str] = TtlCache("test", ttl_seconds=60)
        release = asyncio.Event()

        async def compute() -> str:
            await release.wait()
            return "value"

        first = asyncio.create_task(cache.get_or_compute("k", compute))
        second = asyncio.create_task(cache.get_or_compute("k", compute))
        await asyncio.sleep(0)
        first.cancel()
        release.set()

        assert await second == "value"
        with pytest.raises(asyncio.CancelledError):
            await first

    @pytest.mark.asyncio
    async def test_background_refresh_swallows_failures(self) -> None:
        """Given a failing background refresh, when it settles, then no error surfaces."""
        cache: TtlCache[str] = TtlCache("test", ttl_seconds=60)

        async def fail() -> str:
            raise UpstreamTimeout("slow")

        cache.schedule_refresh("k", fail)
        await asyncio.sleep(0.01)

        assert cache.get("k") is None
        assert not cache.is_in_flight("k")

    @pytest.mark.asyncio
    async def test_start_and_stop_manage_sweep_task(self) -> None:
        """Given a started cache, when stopping, then the sweep task is gone."""
        cache: TtlCache[str] = TtlCache("test", ttl_seconds=60, sweep_interval_seconds=0.01)

        await cache.start()
        await asyncio.sleep(0.03)
        await cache.stop()

        assert cache._sweep_task is None


class TestResponseCache:
    """Tests for the search response cache."""

    @pytest.mark.asyncio
    async def test_identical_searches_within_ttl_compute_once(self) -> None:
        """Given two identical searches, when the second arrives within the TTL, then the
        cached options are reused."""
        clock = FakeClock()
        responses = ResponseCache(TtlCache("responses", ttl_seconds=10, clock=clock))
        signature = SearchSignature("combination", "RTD", "GVC", "2025-03-01T09:00", False)
        calls = 0
        options = [option(leg("Rotterdam Centraal", "Den Haag Centraal", 0, 25))]

        async def compute() -> list:
            nonlocal calls
            calls += 1
            return options

        assert await responses.get_or_compute(signature, compute) == options
        clock.now += 5
        assert await responses.get_or_compute(signature, compute) == options
        assert calls == 1

        clock.now += 6
        await responses.get_or_compute(signature, compute)
        assert calls == 2

    def test_signature_distinguishes_every_query_field(self) -> None:
        """Given searches differing in one field, when keying, then the keys differ."""
        base = SearchSignature("direct", "RTD", "GVC", "2025-03-01T09:00", False)
        variants = [
            SearchSignature("combination", "RTD", "GVC", "2025-03-01T09:00", False),
            SearchSignature("direct", "GVC", "RTD", "2025-03-01T09:00", False),
            SearchSignature("direct", "RTD", "GVC", "2025-03-01T09:05", False),
            SearchSignature("direct", "RTD", "GVC", "2025-03-01T09:00", True),
            SearchSignature("direct", "RTD", "GVC", "2025-03-01T09:00", False, extreme=True),
        ]

        keys = {variant.cache_key() for variant in variants}

        assert base.cache_key() not in keys
        assert len(keys) == len(variants)

    def test_signature_ignores_station_case(self) -> None:
        """Given station codes in different case, when keying, then the keys match."""
        lower = SearchSignature("direct", "rtd", "gvc", "2025-03-01T09:00", False)
        upper = SearchSignature("direct", "RTD", "GVC", "2025-03-01T09:00", False)

        assert lower.cache_key() == upper.cache_key()
