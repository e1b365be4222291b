"""Domain layer - core business logic and models."""

from metra_departures.domain.models import (
    DeparturesSnapshot,
    RouteConfiguration,
    RouteSlot,
    TrainDeparture,
)
from metra_departures.domain.ports import (
    CredentialStore,
    RealtimeDepartureRepository,
    ScheduledDepartureRepository,
)

__all__ = [
    "CredentialStore",
    "DeparturesSnapshot",
    "RealtimeDepartureRepository",
    "RouteConfiguration",
    "RouteSlot",
    "ScheduledDepartureRepository",
    "TrainDeparture",
]
