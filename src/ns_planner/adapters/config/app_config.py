"""12-factor configuration adapter using environment variables and TOML config."""

import tomllib
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ns_planner.domain.errors import ConfigurationError


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server configuration
    host: str = Field(default="0.0.0.0", description="Host to bind the server to")
    port: int = Field(default=3000, description="Port to bind the server to")
    reload: bool = Field(default=False, description="Enable auto-reload for development")
    log_level: str = Field(default="INFO", description="Root log level")

    # NS API configuration
    ns_api_key: str | None = Field(
        default=None, description="Subscription key for the NS reisinformatie API"
    )
    ns_api_base_url: str = Field(
        default="https://gateway.apiportal.ns.nl/reisinformatie-api/api",
        description="Base URL of the NS reisinformatie API",
    )
    trip_timeout_seconds: float = Field(
        default=10.0, description="Timeout for a single trip search call"
    )
    station_timeout_seconds: float = Field(
        default=8.0, description="Timeout for a single station search call"
    )
    trip_concurrency: int = Field(
        default=6, ge=1, description="Maximum concurrent trip search calls"
    )
    station_concurrency: int = Field(
        default=4, ge=1, description="Maximum concurrent station search calls"
    )

    # Station cache
    station_cache_ttl_seconds: float = Field(
        default=30 * 60, description="How long station search results stay cached"
    )
    station_cache_max_entries: int = Field(
        default=2000, ge=1, description="Maximum number of cached station queries"
    )
    station_cache_sweep_seconds: float = Field(
        default=5 * 60, description="Interval of the expired-entry sweep"
    )

    # Response cache
    response_cache_ttl_seconds: float = Field(
        default=10.0, description="How long search responses stay cached"
    )
    response_cache_max_entries: int = Field(
        default=500, ge=1, description="Maximum number of cached search responses"
    )

    # Combination search tuning
    search_budget_seconds: float = Field(
        default=15.0, description="Wall-clock budget for via exploration"
    )
    target_options: int = Field(default=10, ge=1, description="Number of options returned")
    max_via: int = Field(default=8, ge=0, description="Maximum via stations explored")
    top_a: int = Field(default=5, ge=1, description="First-half options kept per via")
    top_b: int = Field(default=8, ge=1, description="Second-half options kept per first half")
    max_transfer_minutes: int = Field(
        default=20, ge=0, description="Longest transfer accepted at a via station"
    )
    penalty_threshold_minutes: int = Field(
        default=10, description="Shortest transfer above which the score is penalized"
    )
    penalty_weight: float = Field(
        default=2.0, description="Score penalty per minute of transfer above the threshold"
    )
    buffer_cap: int = Field(default=80, ge=2, description="Size that triggers a buffer trim")
    buffer_trim_to: int = Field(default=55, ge=1, description="Size after a buffer trim")

    # Departure board (OVAPI)
    ovapi_base_url: str = Field(
        default="http://v0.ovapi.nl", description="Base URL of the OVAPI departure board"
    )
    ovapi_timeout_seconds: float = Field(
        default=8.0, description="Timeout for a single departure board call"
    )
    ovapi_attempts: int = Field(
        default=2, ge=1, description="Attempts per departure board call on timeout"
    )
    timezone: str = Field(
        default="Europe/Amsterdam",
        description="Timezone for departure board times without offset (IANA timezone name)",
    )
    ov_config_file: str | None = Field(
        default="ov_stations.example.toml",
        description="Path to TOML file mapping train stations to local-transit stops",
    )

    # Inbound rate limiting (per client IP)
    rate_limit_per_minute: int = Field(
        default=180, description="Requests per IP per minute across all endpoints"
    )
    heavy_rate_limit_per_minute: int = Field(
        default=40, description="Requests per IP per minute for trip searches"
    )
    station_rate_limit_per_minute: int = Field(
        default=140, description="Requests per IP per minute for station autocomplete"
    )

    @field_validator("response_cache_ttl_seconds")
    @classmethod
    def validate_response_cache_ttl(cls, v: float) -> float:
        """Keep search responses fresh relative to live delay data."""
        if not 5 <= v <= 20:
            raise ValueError("response_cache_ttl_seconds must be between 5 and 20")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"timezone must be an IANA timezone name, got '{v}'") from e
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("log_level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return v.upper()

    @model_validator(mode="after")
    def validate_buffer_sizes(self) -> "AppConfig":
        if self.buffer_trim_to >= self.buffer_cap:
            raise ValueError("buffer_trim_to must be smaller than buffer_cap")
        return self

    @property
    def ns_api_configured(self) -> bool:
        return bool(self.ns_api_key and self.ns_api_key.strip())

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def require_ns_api_key(self) -> str:
        """Return the NS API key or raise ConfigurationError when it is missing."""
        if not self.ns_api_configured or self.ns_api_key is None:
            raise ConfigurationError("NS API key missing on the server (NS_API_KEY)")
        return self.ns_api_key.strip()

    def load_ov_config(self) -> dict[str, Any]:
        """Load the OV station TOML file.

        Returns an empty mapping when no file is configured or the file does not exist.
        Raises ValueError when the file is not valid TOML.
        """
        if not self.ov_config_file:
            return {}

        config_path = Path(self.ov_config_file)
        if not config_path.exists():
            return {}

        with open(config_path, "rb") as f:
            try:
                toml_data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid OV configuration in {config_path}: {e}") from e

        ov = toml_data.get("ov", {})
        if not isinstance(ov, dict):
            raise ValueError("TOML config 'ov' must be a table")
        return ov
