"""Adapters layer - external system integrations."""

from metra_departures.adapters.config import AppConfig
from metra_departures.adapters.credentials import FileCredentialStore
from metra_departures.adapters.gtfs_static import CacheSync, GtfsScheduleStore
from metra_departures.adapters.http import AiohttpByteFetcher
from metra_departures.adapters.metra_api import MetraRealtimeDepartureRepository

__all__ = [
    "AiohttpByteFetcher",
    "AppConfig",
    "CacheSync",
    "FileCredentialStore",
    "GtfsScheduleStore",
    "MetraRealtimeDepartureRepository",
]
