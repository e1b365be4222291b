"""Builds an immutable in-memory index from an extracted GTFS snapshot."""

import logging
import re
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from metra_departures.adapters.gtfs_static.csv_tables import (
    CALENDAR,
    CALENDAR_DATES,
    ROUTES,
    STOP_TIMES,
    STOPS,
    TRIPS,
    iter_table,
)
from metra_departures.domain.models.schedule import (
    CalendarException,
    ExceptionType,
    Route,
    ServiceCalendar,
    Stop,
    StopTimeEntry,
    Trip,
)

logger = logging.getLogger(__name__)

WEEKDAY_COLUMNS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_SHORT_HOUR = re.compile(r"^\d:\d\d:\d\d$")


def normalize_gtfs_time(value: str) -> str:
    """Zero-pad single-digit hours (``5:30:00`` -> ``05:30:00``) so string order is time order."""
    return f"0{value}" if _SHORT_HOUR.match(value) else value


@dataclass(frozen=True)
class ScheduleIndex:
    """One loaded schedule snapshot. Never mutated after construction."""

    trips: Mapping[str, Trip]
    stop_times: Mapping[str, tuple[StopTimeEntry, ...]]  # trip_id -> entries in file order
    calendars: Mapping[str, ServiceCalendar]
    exceptions_by_date: Mapping[str, tuple[CalendarException, ...]]
    stops: Mapping[str, Stop]
    routes: tuple[Route, ...]  # sorted by name
    trips_by_route: Mapping[str, tuple[Trip, ...]] = field(default_factory=dict)
    line_stops: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def active_services(self, date: str, weekday: int) -> set[str]:
        """Services running on ``date`` (``YYYYMMDD``; weekday 1 = Sunday .. 7 = Saturday).

        Exceptions for the date always override the weekday calendar.
        """
        active = {
            sid for sid, calendar in self.calendars.items() if calendar.runs_on(date, weekday)
        }
        for exception in self.exceptions_by_date.get(date, ()):
            if exception.exception_type == ExceptionType.ADDED:
                active.add(exception.service_id)
            elif exception.exception_type == ExceptionType.REMOVED:
                active.discard(exception.service_id)
        return active


def _load_routes(dataset_path: Path) -> tuple[Route, ...]:
    routes = [
        Route(route_id=row["route_id"], route_name=row["route_long_name"])
        for row in iter_table(dataset_path, ROUTES, ("route_id", "route_long_name"))
        if row["route_id"]
    ]
    return tuple(sorted(routes, key=lambda r: r.route_name))


def _load_trips(dataset_path: Path) -> dict[str, Trip]:
    trips: dict[str, Trip] = {}
    for row in iter_table(
        dataset_path, TRIPS, ("trip_id", "route_id", "service_id"), optional=("direction_id",)
    ):
        if not row["trip_id"]:
            continue
        try:
            direction_id = int(row["direction_id"]) if row["direction_id"] else 0
        except ValueError:
            direction_id = 0
        trips[row["trip_id"]] = Trip(
            trip_id=row["trip_id"],
            route_id=row["route_id"],
            service_id=row["service_id"],
            direction_id=direction_id,
        )
    return trips


def _load_calendars(dataset_path: Path) -> dict[str, ServiceCalendar]:
    calendars: dict[str, ServiceCalendar] = {}
    required = ("service_id", *WEEKDAY_COLUMNS, "start_date", "end_date")
    for row in iter_table(dataset_path, CALENDAR, required):
        if not row["service_id"]:
            continue
        flags = tuple(row[day] == "1" for day in WEEKDAY_COLUMNS)
        calendars[row["service_id"]] = ServiceCalendar(
            service_id=row["service_id"],
            weekday_flags=flags,  # type: ignore[arg-type]
            start_date=row["start_date"],
            end_date=row["end_date"],
        )
    return calendars


def _load_exceptions(dataset_path: Path) -> dict[str, tuple[CalendarException, ...]]:
    by_date: dict[str, list[CalendarException]] = defaultdict(list)
    for row in iter_table(dataset_path, CALENDAR_DATES, ("service_id", "date", "exception_type")):
        if not row["service_id"]:
            continue
        try:
            exception_type = ExceptionType(int(row["exception_type"]))
        except ValueError:
            continue
        by_date[row["date"]].append(
            CalendarException(
                service_id=row["service_id"], date=row["date"], exception_type=exception_type
            )
        )
    return {date: tuple(entries) for date, entries in by_date.items()}


def _load_stops(dataset_path: Path) -> dict[str, Stop]:
    return {
        row["stop_id"]: Stop(stop_id=row["stop_id"], stop_name=row["stop_name"])
        for row in iter_table(dataset_path, STOPS, ("stop_id", "stop_name"))
        if row["stop_id"]
    }


def _load_stop_times(
    dataset_path: Path, trips: Mapping[str, Trip]
) -> tuple[dict[str, tuple[StopTimeEntry, ...]], dict[str, frozenset[str]]]:
    """Load stop times of known trips, plus the line -> stop ids index."""
    by_trip: dict[str, list[StopTimeEntry]] = defaultdict(list)
    line_stops: dict[str, set[str]] = defaultdict(set)
    skipped = 0
    for row in iter_table(dataset_path, STOP_TIMES, ("trip_id", "stop_id", "departure_time")):
        trip = trips.get(row["trip_id"])
        if trip is None:
            skipped += 1
            continue
        by_trip[trip.trip_id].append(
            StopTimeEntry(
                trip_id=trip.trip_id,
                stop_id=row["stop_id"],
                departure_time=normalize_gtfs_time(row["departure_time"]),
            )
        )
        line_stops[trip.route_id].add(row["stop_id"])
    if skipped:
        logger.debug(f"Skipped {skipped} stop times referencing unknown trips")
    return (
        {trip_id: tuple(entries) for trip_id, entries in by_trip.items()},
        {route_id: frozenset(ids) for route_id, ids in line_stops.items()},
    )


def load_schedule(dataset_path: Path) -> ScheduleIndex:
    """Parse the six schedule tables of ``dataset_path`` into a new index.

    Raises:
        MissingColumnsError: A table lacks a required header column.
        UnreadableTableError: A table is missing, not UTF-8, or not valid CSV.
    """
    routes = _load_routes(dataset_path)
    trips = _load_trips(dataset_path)
    calendars = _load_calendars(dataset_path)
    exceptions = _load_exceptions(dataset_path)
    stops = _load_stops(dataset_path)
    # Last, so it can filter against trips and build the line -> stops index
    stop_times, line_stops = _load_stop_times(dataset_path, trips)

    trips_by_route: dict[str, list[Trip]] = defaultdict(list)
    for trip in trips.values():
        trips_by_route[trip.route_id].append(trip)

    logger.info(
        f"Loaded schedule: {len(routes)} routes, {len(trips)} trips, "
        f"{sum(len(v) for v in stop_times.values())} stop times, {len(stops)} stops"
    )
    return ScheduleIndex(
        trips=MappingProxyType(trips),
        stop_times=MappingProxyType(stop_times),
        calendars=MappingProxyType(calendars),
        exceptions_by_date=MappingProxyType(exceptions),
        stops=MappingProxyType(stops),
        routes=routes,
        trips_by_route=MappingProxyType({k: tuple(v) for k, v in trips_by_route.items()}),
        line_stops=MappingProxyType(line_stops),
    )
