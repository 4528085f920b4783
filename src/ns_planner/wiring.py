"""Composition of the planner services from configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import aiohttp

from ns_planner.adapters.cache import ResponseCache, TtlCache
from ns_planner.adapters.config import AppConfig, OvStationConfig, OvStationConfigLoader
from ns_planner.adapters.ns_api import NsHttpClient, NsStationGateway, NsTripGateway
from ns_planner.adapters.ovapi import OvapiDepartureRepository
from ns_planner.application.services import (
    CombinationSearchService,
    DepartureWindowSelector,
    ScoringPolicy,
    SearchSettings,
    StationResolver,
)
from ns_planner.domain.errors import ConfigurationError
from ns_planner.domain.ports import (
    DepartureBoardRepository,
    DepartureSelector,
    JourneySearchService,
    StationLookup,
)

logger = logging.getLogger(__name__)


@dataclass
class PlannerServices:
    """Everything a request handler or CLI command needs.

    ``station_lookup`` and ``search_service`` are None when no NS API key is
    configured; the departure board keeps working without one.
    """

    config: AppConfig
    ov_config: OvStationConfig
    departure_repository: DepartureBoardRepository
    window_selector: DepartureSelector
    response_cache: ResponseCache
    station_lookup: StationLookup | None = None
    search_service: JourneySearchService | None = None
    station_cache: TtlCache | None = None

    def require_station_lookup(self) -> StationLookup:
        if self.station_lookup is None:
            self.config.require_ns_api_key()
            raise ConfigurationError("Station search is not available")
        return self.station_lookup

    def require_search_service(self) -> JourneySearchService:
        if self.search_service is None:
            self.config.require_ns_api_key()
            raise ConfigurationError("Trip search is not available")
        return self.search_service

    async def start(self) -> None:
        """Start the cache sweep tasks."""
        await self.response_cache.start()
        if self.station_cache is not None:
            await self.station_cache.start()

    async def stop(self) -> None:
        """Stop background work; safe to call more than once."""
        if self.search_service is not None:
            await self.search_service.aclose()
        if self.station_cache is not None:
            await self.station_cache.stop()
        await self.response_cache.stop()


def build_services(config: AppConfig, session: aiohttp.ClientSession) -> PlannerServices:
    """Build the services from configuration, sharing one aiohttp session.

    Raises:
        ValueError: When the OV station configuration file is malformed.
    """
    ov_config = OvStationConfigLoader.load(config)
    services = PlannerServices(
        config=config,
        ov_config=ov_config,
        departure_repository=OvapiDepartureRepository(
            session,
            ov_config,
            config.zone,
            base_url=config.ovapi_base_url,
            timeout_seconds=config.ovapi_timeout_seconds,
            attempts=config.ovapi_attempts,
        ),
        window_selector=DepartureWindowSelector(),
        response_cache=ResponseCache(
            TtlCache(
                "responses",
                ttl_seconds=config.response_cache_ttl_seconds,
                max_entries=config.response_cache_max_entries,
            )
        ),
    )

    if not config.ns_api_configured:
        logger.error(
            "NS_API_KEY is not set: /stations, /reis and /reis-extreme-b will answer 500"
        )
        return services

    http_client = NsHttpClient(
        session,
        config.require_ns_api_key(),
        config.ns_api_base_url,
        trip_timeout_seconds=config.trip_timeout_seconds,
        station_timeout_seconds=config.station_timeout_seconds,
        trip_concurrency=config.trip_concurrency,
        station_concurrency=config.station_concurrency,
    )
    station_cache: TtlCache = TtlCache(
        "stations",
        ttl_seconds=config.station_cache_ttl_seconds,
        max_entries=config.station_cache_max_entries,
        sweep_interval_seconds=config.station_cache_sweep_seconds,
    )
    station_resolver = StationResolver(NsStationGateway(http_client), station_cache)

    services.station_cache = station_cache
    services.station_lookup = station_resolver
    services.search_service = CombinationSearchService(
        NsTripGateway(http_client),
        station_resolver,
        scoring=ScoringPolicy(
            penalty_threshold_minutes=config.penalty_threshold_minutes,
            penalty_weight=config.penalty_weight,
        ),
        settings=SearchSettings(
            target=config.target_options,
            max_via=config.max_via,
            top_a=config.top_a,
            top_b=config.top_b,
            max_transfer_minutes=config.max_transfer_minutes,
            budget_seconds=config.search_budget_seconds,
            buffer_cap=config.buffer_cap,
            buffer_trim_to=config.buffer_trim_to,
        ),
    )
    logger.info(
        f"NS API configured at {config.ns_api_base_url} "
        f"(trip pool {config.trip_concurrency}, station pool {config.station_concurrency})"
    )
    return services
