"""HTTP client for NS reisinformatie API requests."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

import aiohttp

from ns_planner.adapters.api_request_logger import log_api_request, log_api_response
from ns_planner.adapters.ns_api.constants import (
    DEFAULT_HEADERS,
    STATIONS_PATH,
    SUBSCRIPTION_KEY_HEADER,
    TRIPS_PATH,
)
from ns_planner.domain.errors import (
    MalformedUpstreamData,
    UpstreamHTTPError,
    UpstreamTimeout,
)

logger = logging.getLogger(__name__)


class NsHttpClient:
    """HTTP client for the NS API with separate concurrency pools per endpoint.

    Trip searches and station lookups each get their own semaphore so that the
    via-station fan-out of a combination search cannot starve autocomplete, and
    neither can exceed the upstream rate limit.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: str,
        base_url: str,
        trip_timeout_seconds: float = 10.0,
        station_timeout_seconds: float = 8.0,
        trip_concurrency: int = 6,
        station_concurrency: int = 4,
    ) -> None:
        """Initialize the client.

        Args:
            session: Shared aiohttp session.
            api_key: NS subscription key.
            base_url: Base URL of the reisinformatie API.
            trip_timeout_seconds: Timeout of one trip search call.
            station_timeout_seconds: Timeout of one station search call.
            trip_concurrency: Maximum concurrent trip search calls.
            station_concurrency: Maximum concurrent station search calls.
        """
        self._session = session
        self._headers = {**DEFAULT_HEADERS, SUBSCRIPTION_KEY_HEADER: api_key}
        self._base_url = base_url.rstrip("/")
        self._trip_timeout = trip_timeout_seconds
        self._station_timeout = station_timeout_seconds
        self._trip_pool = asyncio.Semaphore(trip_concurrency)
        self._station_pool = asyncio.Semaphore(station_concurrency)

    async def get_trips(self, params: dict[str, str]) -> dict[str, Any]:
        """GET /v3/trips, gated by the trip pool."""
        async with self._trip_pool:
            return await self._get_json(TRIPS_PATH, params, self._trip_timeout)

    async def get_stations(self, params: dict[str, str]) -> dict[str, Any]:
        """GET /v2/stations, gated by the station pool."""
        async with self._station_pool:
            return await self._get_json(STATIONS_PATH, params, self._station_timeout)

    @staticmethod
    def _parse_body(text: str) -> Any:
        try:
            return json.loads(text) if text else None
        except ValueError:
            return None

    @staticmethod
    def _error_message(status: int, data: Any) -> str:
        """Prefer the upstream's own error text over the bare status."""
        if isinstance(data, dict):
            for key in ("error", "message"):
                value = data.get(key)
                if isinstance(value, str) and value:
                    return value
                if isinstance(value, dict) and isinstance(value.get("message"), str):
                    return value["message"]
        return f"HTTP {status}"

    async def _get_json(
        self, path: str, params: dict[str, str], timeout_seconds: float
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        log_api_request("NS", url, params=params, headers=self._headers)
        started = time.monotonic()
        answered: int | None = None

        try:
            async with self._session.get(
                url,
                params=params,
                headers=self._headers,
                timeout=aiohttp.ClientTimeout(total=timeout_seconds),
            ) as response:
                status = answered = response.status
                text = await response.text()
        except TimeoutError as e:
            logger.warning(f"NS API call to {path} timed out after {timeout_seconds}s")
            raise UpstreamTimeout(f"NS API did not answer within {timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            logger.warning(f"NS API call to {path} failed: {e}")
            raise UpstreamHTTPError(f"NS API unreachable: {e}") from e
        finally:
            log_api_response("NS", url, answered, time.monotonic() - started)

        data = self._parse_body(text)
        if not 200 <= status < 300:
            message = self._error_message(status, data)
            logger.error(f"NS API returned status {status} for {url}: {text[:200]}")
            raise UpstreamHTTPError(message, status_code=status)

        if not isinstance(data, dict):
            raise MalformedUpstreamData(f"NS API returned no JSON object for {path}")
        return data
