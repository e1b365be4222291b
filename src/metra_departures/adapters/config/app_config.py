"""12-factor configuration adapter using environment variables and TOML config."""

import tomllib
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from metra_departures.adapters.metra_api.constants import (
    DEPARTED_GRACE_SECONDS,
    FEED_TIMEOUT_SECONDS,
    METRA_FEED_URL,
    METRA_SCHEDULE_ARCHIVE_URL,
    METRA_SCHEDULE_VERSION_URL,
    SCHEDULE_TIMEOUT_SECONDS,
)


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Service time
    timezone: str = Field(
        default="America/Chicago",
        description="Service timezone for schedule and slot computations (IANA timezone name)",
    )

    # Realtime feed
    realtime_feed_url: str = Field(
        default=METRA_FEED_URL,
        description="GTFS-Realtime trip updates endpoint",
    )
    realtime_timeout_seconds: float = Field(
        default=FEED_TIMEOUT_SECONDS, description="Timeout for realtime feed requests in seconds"
    )
    departed_grace_seconds: int = Field(
        default=DEPARTED_GRACE_SECONDS,
        description="Live departures up to this many seconds in the past are still shown",
    )

    # Static schedule
    schedule_version_url: str = Field(
        default=METRA_SCHEDULE_VERSION_URL,
        description="Plain-text endpoint returning the published schedule version",
    )
    schedule_archive_url: str = Field(
        default=METRA_SCHEDULE_ARCHIVE_URL,
        description="Schedule archive (GTFS zip) endpoint",
    )
    schedule_timeout_seconds: float = Field(
        default=SCHEDULE_TIMEOUT_SECONDS,
        description="Timeout for schedule version and archive requests in seconds",
    )
    cache_dir: str = Field(
        default=str(Path.home() / ".cache" / "metra-departures"),
        description="Directory holding the extracted schedule snapshot",
    )

    # Refresh
    refresh_interval_seconds: int = Field(
        default=600, description="Interval between departure refreshes in seconds"
    )

    # Credentials and saved settings
    token_file: str = Field(
        default=str(Path.home() / ".config" / "metra-departures" / "token"),
        description="File holding the realtime API token",
    )
    saved_config_file: str = Field(
        default=str(Path.home() / ".config" / "metra-departures" / "route.json"),
        description="JSON file the route configuration is saved to",
    )

    # Display
    time_format: str = Field(default="minutes", description="Time format: 'minutes' or 'at'")

    # TOML config file path with the seed route configuration
    config_file: str | None = Field(
        default=None,
        description="Path to TOML configuration file with the [route] section",
    )

    @field_validator("time_format")
    @classmethod
    def validate_time_format(cls, v: str) -> str:
        """Validate time format is either 'minutes' or 'at'."""
        if v not in ("minutes", "at"):
            raise ValueError("time_format must be either 'minutes' or 'at'")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("refresh_interval_seconds")
    @classmethod
    def validate_refresh_interval(cls, v: int) -> int:
        """Validate refresh interval is positive."""
        if v <= 0:
            raise ValueError("refresh_interval_seconds must be greater than 0")
        return v

    @property
    def service_timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def _load_toml_data(self) -> dict[str, Any]:
        """Load and parse the TOML file."""
        if not self.config_file:
            raise ValueError("config_file must be set to load route configuration")

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)

        # Assignments below go through the field validators
        refresh = toml_data.get("refresh", {})
        if "interval_seconds" in refresh:
            self.refresh_interval_seconds = refresh["interval_seconds"]
        display = toml_data.get("display", {})
        if "time_format" in display:
            self.time_format = display["time_format"]

        return toml_data

    def get_route_config(self) -> dict[str, Any]:
        """Return the raw ``[route]`` section of the TOML file.

        Raises ValueError if the section is missing or not a table.
        """
        toml_data = self._load_toml_data()
        route = toml_data.get("route")
        if not isinstance(route, dict):
            raise ValueError("TOML config must contain a [route] table")
        return route
