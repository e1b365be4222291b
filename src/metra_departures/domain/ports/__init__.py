"""Ports (interfaces) for the ports-and-adapters architecture."""

from metra_departures.domain.ports.byte_fetcher import ByteFetcher
from metra_departures.domain.ports.credential_store import CredentialStore
from metra_departures.domain.ports.departure_repository import (
    RealtimeDepartureRepository,
    ScheduledDepartureRepository,
)
from metra_departures.domain.ports.display_adapter import DisplayAdapter
from metra_departures.domain.ports.route_configuration_store import RouteConfigurationStore

__all__ = [
    "ByteFetcher",
    "CredentialStore",
    "DisplayAdapter",
    "RealtimeDepartureRepository",
    "RouteConfigurationStore",
    "ScheduledDepartureRepository",
]
