"""Realtime feed domain models.

Only the GTFS-Realtime fields needed to filter and display trip updates.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StopTimeEvent:
    """Arrival or departure prediction at a stop."""

    delay: int | None = None
    time: int | None = None  # Unix timestamp in seconds


@dataclass(frozen=True)
class StopTimeUpdate:
    """Prediction for one stop of a trip."""

    stop_sequence: int | None = None
    stop_id: str | None = None
    arrival: StopTimeEvent | None = None
    departure: StopTimeEvent | None = None


@dataclass(frozen=True)
class TripDescriptor:
    """Identifies the trip a trip update refers to."""

    trip_id: str | None = None
    route_id: str | None = None
    direction_id: int | None = None


@dataclass(frozen=True)
class TripUpdate:
    """Realtime update for one trip."""

    trip: TripDescriptor = field(default_factory=TripDescriptor)
    stop_time_updates: tuple[StopTimeUpdate, ...] = ()


@dataclass(frozen=True)
class FeedEntity:
    """One entity of the feed."""

    id: str = ""
    trip_update: TripUpdate | None = None
