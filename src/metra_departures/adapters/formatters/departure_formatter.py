"""Formatter for departure times, delays and error messages."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from metra_departures.adapters.config.app_config import AppConfig
from metra_departures.domain.contracts.departure_formatter import DepartureFormatterProtocol
from metra_departures.domain.errors import ErrorKind
from metra_departures.domain.models.error_details import ErrorDetails
from metra_departures.domain.models.train_departure import TrainDeparture

# Delays up to a minute are not worth showing
DELAY_DISPLAY_THRESHOLD_SECONDS = 60


class DepartureFormatter(DepartureFormatterProtocol):
    """Formatter for departure times based on configuration."""

    def __init__(self, config: AppConfig) -> None:
        """Initialize the formatter.

        Args:
            config: Application configuration with timezone and time format settings.
        """
        self.config = config

    def format_departure_time(self, departure: TrainDeparture) -> str:
        """Format departure time according to configuration."""
        if self.config.time_format == "minutes":
            return self.format_minutes_until(departure.minutes_until)
        # "at" format
        return self.format_departure_time_absolute(departure)

    def format_departure_time_absolute(self, departure: TrainDeparture) -> str:
        """Format the effective departure time as HH:MM in the service timezone."""
        server_timezone = ZoneInfo(self.config.timezone)
        return departure.effective_time.astimezone(server_timezone).strftime("%H:%M")

    def format_minutes_until(self, minutes: int) -> str:
        """Format a countdown as 'Now', '7m', '2h' or '1h 5m'."""
        if minutes < 1:
            return "Now"
        if minutes < 60:
            return f"{minutes}m"
        hours, rest = divmod(minutes, 60)
        if rest == 0:
            return f"{hours}h"
        return f"{hours}h {rest}m"

    def format_delay(self, departure: TrainDeparture) -> str:
        """Format a reported delay as '+N min delay', or '' when negligible."""
        if departure.delay_seconds <= DELAY_DISPLAY_THRESHOLD_SECONDS:
            return ""
        return f"+{departure.delay_seconds // 60} min delay"

    def format_update_time(self, update_time: datetime | None) -> str:
        """Format last update time."""
        if not update_time:
            return "Never"
        return update_time.astimezone(ZoneInfo(self.config.timezone)).strftime("%H:%M:%S")

    def format_update_age(self, update_time: datetime | None, now: datetime | None = None) -> str:
        """Format how long ago the last update happened ('just now', '42s ago', '3m ago')."""
        if not update_time:
            return "Never"
        if now is None:
            now = datetime.now(UTC)
        seconds = int((now - update_time).total_seconds())
        if seconds < 5:
            return "just now"
        if seconds < 60:
            return f"{seconds}s ago"
        return f"{seconds // 60}m ago"

    def format_error(self, error: ErrorDetails) -> str:
        """Turn structured error details into a user-facing message."""
        match error.kind:
            case ErrorKind.NO_CACHE:
                return "No cached schedule and network unavailable."
            case ErrorKind.DOWNLOAD_FAILED:
                return f"Schedule download failed (HTTP {error.status_code})."
            case ErrorKind.EXTRACTION_FAILED:
                return "Failed to extract schedule files."
            case ErrorKind.MISSING_COLUMNS:
                return f"Unexpected format in {error.table}."
            case ErrorKind.UNREADABLE_TABLE:
                return f"Could not read {error.table}."
            case ErrorKind.HTTP_ERROR:
                return f"API returned HTTP {error.status_code}."
            case ErrorKind.DECODING_ERROR:
                return f"Failed to parse response: {error.reason}"
            case ErrorKind.TRANSPORT_ERROR:
                return "Network unavailable."
            case ErrorKind.NO_TOKEN:
                return "No API token configured."
            case ErrorKind.NO_SLOTS:
                return "No route slots configured."
        return error.reason
