"""Static schedule store answering departure queries from the loaded GTFS index."""

import asyncio
import logging
import math
from datetime import datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from metra_departures.adapters.gtfs_static.schedule_loader import ScheduleIndex, load_schedule
from metra_departures.domain.errors import DepartureSourceError
from metra_departures.domain.models.error_details import ErrorDetails
from metra_departures.domain.models.schedule import Route, Stop
from metra_departures.domain.models.train_departure import TrainDeparture
from metra_departures.domain.ports.departure_repository import ScheduledDepartureRepository

if TYPE_CHECKING:
    from metra_departures.adapters.gtfs_static.cache_sync import CacheSync

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Chicago"


def _parse_gtfs_time(value: str) -> tuple[int, int, int] | None:
    """Split ``HH:MM:SS`` into integers. Returns None when malformed."""
    parts = value.split(":")
    if len(parts) != 3:
        return None
    try:
        hours, minutes, seconds = (int(part) for part in parts)
    except ValueError:
        return None
    if hours < 0 or not 0 <= minutes < 60 or not 0 <= seconds < 60:
        return None
    return hours, minutes, seconds


def _first_position(entries, stop_id: str) -> int | None:
    return next((i for i, entry in enumerate(entries) if entry.stop_id == stop_id), None)


class GtfsScheduleStore(ScheduledDepartureRepository):
    """Holds the current schedule index and computes scheduled departures.

    The index is replaced by a single reference swap, so concurrent readers see
    either the old or the new dataset, never a partially built one.
    """

    def __init__(
        self,
        cache_sync: "CacheSync | None" = None,
        timezone: ZoneInfo | str = DEFAULT_TIMEZONE,
    ) -> None:
        """Initialize the store.

        Args:
            cache_sync: Provides the dataset directory for async queries.
                Without it, ``load`` must be called before querying.
            timezone: Service timezone the schedule times are expressed in.
        """
        self._cache_sync = cache_sync
        self._timezone = timezone if isinstance(timezone, ZoneInfo) else ZoneInfo(timezone)
        self._index: ScheduleIndex | None = None
        self._stale = True
        self._loaded_version: str | None = None
        self._rejected_version: str | None = None
        self._last_sync_error: ErrorDetails | None = None
        self._load_lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    @property
    def last_sync_error(self) -> ErrorDetails | None:
        """Why the latest sync or reload was not applied, while an older index is served."""
        return self._last_sync_error

    def load(self, dataset_path: Path) -> None:
        """Parse the dataset at ``dataset_path`` and make it current.

        Raises:
            DepartureSourceError: A table is unreadable or lacks a required
                header column. The previous index stays in place.
        """
        index = load_schedule(Path(dataset_path))
        self._index = index
        self._stale = False

    def invalidate(self) -> None:
        """Mark the dataset stale so the next async query reloads it from disk."""
        self._stale = True

    def _require_index(self) -> ScheduleIndex:
        if self._index is None:
            raise RuntimeError("Schedule not loaded")
        return self._index

    def available_lines(self) -> list[Route]:
        """All routes, sorted by display name."""
        return list(self._require_index().routes)

    def stops_for_line(self, line_id: str) -> list[Stop]:
        """Stops served by ``line_id``, sorted by name."""
        index = self._require_index()
        stops = [
            index.stops[stop_id]
            for stop_id in index.line_stops.get(line_id, ())
            if stop_id in index.stops
        ]
        return sorted(stops, key=lambda stop: (stop.stop_name, stop.stop_id))

    def departures(
        self,
        line_id: str,
        stop_id: str,
        destination_stop_id: str | None,
        direction_id: int,
        max_trains: int,
        as_of: datetime | None = None,
    ) -> list[TrainDeparture]:
        """Scheduled departures from ``stop_id`` at or after ``as_of``.

        With a destination, only trips reaching it after the departure stop
        qualify and the direction is not checked.
        """
        index = self._require_index()
        if as_of is None:
            as_of = datetime.now(self._timezone)
        local_now = as_of.astimezone(self._timezone)

        today = local_now.strftime("%Y%m%d")
        now_str = local_now.strftime("%H:%M:%S")
        weekday = local_now.isoweekday() % 7 + 1  # 1 = Sunday .. 7 = Saturday
        active_services = index.active_services(today, weekday)

        candidates: list[tuple[datetime, str]] = []
        for trip in index.trips_by_route.get(line_id, ()):
            if destination_stop_id is None and trip.direction_id != direction_id:
                continue
            if trip.service_id not in active_services:
                continue

            entries = index.stop_times.get(trip.trip_id, ())
            position = _first_position(entries, stop_id)
            if position is None:
                continue
            if destination_stop_id is not None:
                destination_position = _first_position(entries, destination_stop_id)
                if destination_position is None or destination_position <= position:
                    continue

            departure_time = entries[position].departure_time
            if departure_time < now_str:
                continue
            parsed = _parse_gtfs_time(departure_time)
            if parsed is None:
                logger.debug(f"Skipping malformed departure time {departure_time!r}")
                continue
            hours, minutes, seconds = parsed
            instant = datetime(
                local_now.year,
                local_now.month,
                local_now.day,
                hours % 24,
                minutes,
                seconds,
                tzinfo=self._timezone,
            ) + timedelta(days=hours // 24)
            candidates.append((instant, trip.trip_id))

        candidates.sort(key=lambda candidate: candidate[0])
        now_ts = local_now.timestamp()
        return [
            TrainDeparture(
                id=trip_id,
                trip_id=trip_id,
                scheduled_time=instant,
                delay_seconds=0,
                minutes_until=max(0, math.floor((instant.timestamp() - now_ts) / 60)),
                is_realtime=False,
            )
            for instant, trip_id in candidates[:max_trains]
        ]

    async def ensure_loaded(self) -> None:
        """Sync the on-disk snapshot and reload it when its version changed.

        Without a cache sync, an index loaded through ``load`` is required.
        Once an index is loaded, a failed sync or reload is logged and kept in
        ``last_sync_error`` while queries keep using the loaded index.

        Raises:
            DepartureSourceError: Sync or load failed and no index is loaded.
        """
        if self._cache_sync is None:
            self._require_index()
            return
        async with self._load_lock:
            version: str | None = None
            try:
                dataset_path = await self._cache_sync.ensure_dataset()
                version = self._cache_sync.local_version()
                if self._index is not None and not self._stale:
                    if version == self._loaded_version:
                        self._last_sync_error = None
                        return
                    if version == self._rejected_version:
                        return
                logger.info(f"Loading schedule version {version!r} from {dataset_path}")
                index = await asyncio.to_thread(load_schedule, dataset_path)
            except DepartureSourceError as e:
                if self._index is None:
                    raise
                if version is not None:
                    self._rejected_version = version
                self._last_sync_error = e.to_details()
                logger.warning(
                    f"Schedule update failed, keeping version {self._loaded_version!r}: {e.reason}"
                )
                return
            self._index = index
            self._loaded_version = version
            self._rejected_version = None
            self._last_sync_error = None
            self._stale = False

    async def get_departures(
        self,
        line_id: str,
        stop_id: str,
        destination_stop_id: str | None,
        direction_id: int,
        max_trains: int,
        as_of: datetime | None = None,
    ) -> list[TrainDeparture]:
        """Async port entry point: make sure a dataset is loaded, then query it."""
        await self.ensure_loaded()
        return self.departures(
            line_id, stop_id, destination_stop_id, direction_id, max_trains, as_of=as_of
        )
