"""Departure repository ports."""

from datetime import datetime
from typing import Protocol

from metra_departures.domain.models.train_departure import TrainDeparture


class RealtimeDepartureRepository(Protocol):
    """Port for retrieving live departures from the realtime feed."""

    async def get_departures(
        self,
        token: str | None,
        line_id: str,
        stop_id: str,
        destination_stop_id: str | None,
        direction_id: int,
        max_trains: int,
        now: datetime | None = None,
    ) -> list[TrainDeparture]:
        """Get live departures. Raises NoTokenError when ``token`` is missing."""
        ...


class ScheduledDepartureRepository(Protocol):
    """Port for retrieving departures from the static schedule."""

    async def get_departures(
        self,
        line_id: str,
        stop_id: str,
        destination_stop_id: str | None,
        direction_id: int,
        max_trains: int,
        as_of: datetime | None = None,
    ) -> list[TrainDeparture]:
        """Get scheduled departures after ``as_of``."""
        ...
