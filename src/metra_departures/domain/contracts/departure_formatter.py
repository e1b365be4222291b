"""Protocol for formatting departures."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from metra_departures.domain.models.error_details import ErrorDetails
    from metra_departures.domain.models.train_departure import TrainDeparture


class DepartureFormatterProtocol(Protocol):
    """Protocol for turning departures and errors into display strings."""

    def format_departure_time(self, departure: "TrainDeparture") -> str:
        """Format the departure time according to the configured time format."""
        ...

    def format_minutes_until(self, minutes: int) -> str:
        """Format a countdown, e.g. ``Now``, ``7m``, ``1h 5m``."""
        ...

    def format_update_time(self, update_time: "datetime | None") -> str:
        """Format the last update time."""
        ...

    def format_error(self, error: "ErrorDetails") -> str:
        """Turn structured error details into a user-facing message."""
        ...
