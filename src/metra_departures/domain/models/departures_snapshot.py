"""Departures snapshot domain model."""

from dataclasses import dataclass
from datetime import datetime

from .error_details import ErrorDetails
from .train_departure import TrainDeparture


@dataclass(frozen=True)
class DeparturesSnapshot:
    """Read-only result of one refresh cycle, handed to the presentation layer."""

    departures: tuple[TrainDeparture, ...] = ()
    is_realtime: bool = False  # False = showing the static schedule only
    last_update: datetime | None = None
    error: ErrorDetails | None = None  # No data could be refreshed
    realtime_error: ErrorDetails | None = None  # Token present but live fetch failed
    active_slot_id: str | None = None
