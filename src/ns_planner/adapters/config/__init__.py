"""Configuration adapters."""

from ns_planner.adapters.config.app_config import AppConfig
from ns_planner.adapters.config.ov_station_config_loader import (
    OvStationConfig,
    OvStationConfigLoader,
)

__all__ = ["AppConfig", "OvStationConfig", "OvStationConfigLoader"]
