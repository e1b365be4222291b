"""Metra realtime feed adapter."""

from metra_departures.adapters.metra_api.realtime_departure_repository import (
    MetraRealtimeDepartureRepository,
)

__all__ = ["MetraRealtimeDepartureRepository"]
