"""Static GTFS schedule: cache sync, table loading and departure queries."""

from metra_departures.adapters.gtfs_static.cache_sync import CacheSync
from metra_departures.adapters.gtfs_static.schedule_loader import ScheduleIndex, load_schedule
from metra_departures.adapters.gtfs_static.schedule_store import GtfsScheduleStore

__all__ = ["CacheSync", "GtfsScheduleStore", "ScheduleIndex", "load_schedule"]
