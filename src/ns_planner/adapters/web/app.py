"""Starlette application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import aiohttp
from starlette.applications import Starlette
from starlette.middleware import Middleware

from ns_planner.adapters.config import AppConfig
from ns_planner.adapters.web.rate_limit_middleware import RateLimitMiddleware
from ns_planner.adapters.web.routes import build_routes
from ns_planner.adapters.web.supersession import SupersessionTracker

if TYPE_CHECKING:
    from ns_planner.wiring import PlannerServices

logger = logging.getLogger(__name__)

HEAVY_PATHS = ("/reis", "/reis-extreme-b")
STATION_PATHS = ("/stations",)

ServicesFactory = Callable[[AppConfig, aiohttp.ClientSession], "PlannerServices"]


def create_app(
    config: AppConfig,
    services: PlannerServices | None = None,
    services_factory: ServicesFactory | None = None,
) -> Starlette:
    """Create the web application.

    Args:
        config: Application configuration.
        services: Prebuilt services, started and stopped by the lifespan.
        services_factory: Builds the services around a shared aiohttp session that the
            lifespan opens on startup and closes on shutdown. Used when ``services`` is
            omitted.
    """

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        if services is not None:
            await services.start()
            try:
                yield
            finally:
                await services.stop()
            return

        if services_factory is None:
            raise ValueError("create_app needs services or a services_factory")
        async with aiohttp.ClientSession() as session:
            built = services_factory(config, session)
            app.state.services = built
            await built.start()
            logger.info("Planner started")
            try:
                yield
            finally:
                await built.stop()
                logger.info("Planner stopped")

    path_limits = {path: config.heavy_rate_limit_per_minute for path in HEAVY_PATHS}
    path_limits.update({path: config.station_rate_limit_per_minute for path in STATION_PATHS})

    app = Starlette(
        routes=build_routes(),
        middleware=[
            Middleware(
                RateLimitMiddleware,
                requests_per_minute=config.rate_limit_per_minute,
                path_limits=path_limits,
            )
        ],
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.tracker = SupersessionTracker()
    if services is not None:
        app.state.services = services
    return app
