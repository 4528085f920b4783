"""OVAPI departure board repository adapter.

Uses the public v0.ovapi.nl timing point endpoint, keyed by TPC stop code.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING, Any

import aiohttp
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ns_planner.adapters.api_request_logger import log_api_request, log_api_response
from ns_planner.adapters.ovapi.departure_parser import DepartureParser
from ns_planner.domain.errors import (
    MalformedUpstreamData,
    ParameterError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamTimeout,
)
from ns_planner.domain.models.departure import DepartureRecord
from ns_planner.domain.models.departure_board import DepartureBoard, StopFetchResult
from ns_planner.domain.ports.departure_board_repository import DepartureBoardRepository
from ns_planner.domain.timestamps import minutes_between

if TYPE_CHECKING:
    from ns_planner.adapters.config.ov_station_config_loader import OvStationConfig

logger = logging.getLogger(__name__)


class OvapiDepartureRepository(DepartureBoardRepository):
    """Adapter for OVAPI departure boards of configured stop groups."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        station_config: OvStationConfig,
        zone: tzinfo,
        base_url: str = "http://v0.ovapi.nl",
        timeout_seconds: float = 8.0,
        attempts: int = 2,
        retry_wait_seconds: float = 0.5,
    ) -> None:
        """Initialize the repository.

        Args:
            session: Shared aiohttp session.
            station_config: Stop groups by station code.
            zone: Timezone of OVAPI times.
            base_url: OVAPI base URL.
            timeout_seconds: Timeout of one timing point call.
            attempts: Attempts per timing point when the call times out.
            retry_wait_seconds: Base wait between attempts.
        """
        self._session = session
        self._station_config = station_config
        self._zone = zone
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._attempts = attempts
        self._retry_wait_seconds = retry_wait_seconds

    async def _fetch_timing_point_once(self, stop_code: str) -> dict[str, Any]:
        url = f"{self._base_url}/tpc/{stop_code}"
        log_api_request("OVAPI", url)
        started = time.monotonic()
        answered: int | None = None
        try:
            async with self._session.get(
                url, timeout=aiohttp.ClientTimeout(total=self._timeout_seconds)
            ) as response:
                answered = response.status
                if response.status != 200:
                    response_text = await response.text()
                    raise UpstreamHTTPError(
                        f"OVAPI returned status {response.status}: {response_text[:200]}",
                        status_code=response.status,
                    )
                data = await response.json(content_type=None)
        except TimeoutError as e:
            raise UpstreamTimeout(f"OVAPI did not answer within {self._timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise UpstreamHTTPError(f"OVAPI unreachable: {e}") from e
        except ValueError as e:
            raise MalformedUpstreamData(f"OVAPI returned invalid JSON for {stop_code}") from e
        finally:
            log_api_response("OVAPI", url, answered, time.monotonic() - started)

        if not isinstance(data, dict):
            raise MalformedUpstreamData(f"OVAPI returned no JSON object for {stop_code}")
        return data

    async def fetch_timing_point(self, stop_code: str) -> list[DepartureRecord]:
        """Fetch and parse one timing point, retrying only on timeouts."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=self._retry_wait_seconds, max=2),
            retry=retry_if_exception_type(UpstreamTimeout),
            reraise=True,
        ):
            with attempt:
                data = await self._fetch_timing_point_once(stop_code)
        return DepartureParser.parse_timing_point(data, stop_code, self._zone)

    async def get_board(
        self, station_code: str, limit: int = 80, after: datetime | None = None
    ) -> DepartureBoard:
        """Get departures of all timing points in a configured stop group.

        A failing timing point is recorded in ``stops`` instead of failing the board.
        With ``after``, departures leaving before it are dropped before ``limit`` applies.

        Raises:
            ParameterError: When the station code is not configured.
        """
        group = self._station_config.group(station_code)
        if group is None:
            raise ParameterError(f"Unknown OV station code '{station_code}'")

        results = await asyncio.gather(
            *(self.fetch_timing_point(code) for code in group.stop_codes),
            return_exceptions=True,
        )

        departures: list[DepartureRecord] = []
        stops: list[StopFetchResult] = []
        for stop_code, result in zip(group.stop_codes, results, strict=True):
            if isinstance(result, UpstreamError):
                logger.warning(f"OVAPI timing point {stop_code} failed: {result}")
                stops.append(StopFetchResult(stop_code=stop_code, error=str(result)))
            elif isinstance(result, BaseException):
                raise result
            else:
                departures.extend(result)
                stops.append(StopFetchResult(stop_code=stop_code))

        fetched = len(departures)
        if after is not None:
            departures = [d for d in departures if minutes_between(after, d.expected_time) >= 0]
        departures.sort(key=lambda d: d.expected_time)
        return DepartureBoard(
            station=station_code,
            departures=departures[:limit],
            stops=stops,
            earlier_departures=fetched - len(departures),
        )
