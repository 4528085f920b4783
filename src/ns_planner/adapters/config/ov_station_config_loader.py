"""OV station configuration loader."""

import logging
from pathlib import Path
from typing import Any

from ns_planner.adapters.config.app_config import AppConfig
from ns_planner.domain.models.ov_stop_group import OvStopGroup

logger = logging.getLogger(__name__)


class OvStationConfig:
    """Local-transit stop groups, and which groups belong to which train station."""

    def __init__(
        self,
        groups: dict[str, OvStopGroup] | None = None,
        stations: dict[str, list[str]] | None = None,
    ) -> None:
        self.groups = groups or {}
        self.stations = stations or {}

    def group(self, code: str) -> OvStopGroup | None:
        return self.groups.get(code)

    def buttons_for(self, station_name: str) -> list[dict[str, str]]:
        """List the transit options configured for a train station name."""
        key = station_name.strip().lower()
        buttons = []
        for code in self.stations.get(key, []):
            group = self.groups.get(code)
            buttons.append({"label": group.label if group else code, "code": code})
        return buttons


class OvStationConfigLoader:
    """Loads OV stop groups from app config."""

    @staticmethod
    def load(config: AppConfig) -> OvStationConfig:
        """Load OV station configuration from app config."""
        if config.ov_config_file and not Path(config.ov_config_file).exists():
            logger.warning(
                f"OV configuration file not found: {config.ov_config_file}; "
                "departure boards are disabled"
            )
        return OvStationConfigLoader.from_dict(config.load_ov_config())

    @staticmethod
    def from_dict(ov: dict[str, Any]) -> OvStationConfig:
        """Build configuration from the parsed ``[ov]`` table."""
        mappings = ov.get("mappings", {})
        stations = ov.get("stations", {})
        if not isinstance(mappings, dict):
            raise ValueError("TOML config 'ov.mappings' must be a table")
        if not isinstance(stations, dict):
            raise ValueError("TOML config 'ov.stations' must be a table")

        groups: dict[str, OvStopGroup] = {}
        for code, mapping in mappings.items():
            if not isinstance(mapping, dict):
                continue
            stops = mapping.get("stops", [])
            if not isinstance(stops, list):
                raise ValueError(f"TOML config 'ov.mappings.{code}.stops' must be a list")
            groups[code] = OvStopGroup(
                code=code,
                label=str(mapping.get("label", code)),
                stop_codes=tuple(str(stop) for stop in stops if str(stop).strip()),
            )

        station_groups: dict[str, list[str]] = {}
        for name, codes in stations.items():
            if not isinstance(codes, list):
                continue
            station_groups[name.strip().lower()] = [str(code) for code in codes]

        logger.info(f"Loaded {len(groups)} OV stop group(s) for {len(station_groups)} station(s)")
        return OvStationConfig(groups=groups, stations=station_groups)
