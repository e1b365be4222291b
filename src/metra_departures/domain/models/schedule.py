"""Static schedule (GTFS) domain models."""

from dataclasses import dataclass
from enum import IntEnum


class ExceptionType(IntEnum):
    """``exception_type`` values of calendar_dates.txt."""

    ADDED = 1
    REMOVED = 2


@dataclass(frozen=True)
class Trip:
    """A scheduled trip of a route."""

    trip_id: str
    route_id: str
    service_id: str
    direction_id: int = 0


@dataclass(frozen=True)
class StopTimeEntry:
    """A trip's departure from one stop. Hours may exceed 23 for overnight trips."""

    trip_id: str
    stop_id: str
    departure_time: str  # "HH:MM:SS"


@dataclass(frozen=True)
class ServiceCalendar:
    """Weekday pattern of a service within a date range."""

    service_id: str
    weekday_flags: tuple[bool, bool, bool, bool, bool, bool, bool]  # Monday..Sunday
    start_date: str  # YYYYMMDD
    end_date: str  # YYYYMMDD

    def runs_on(self, date: str, weekday: int) -> bool:
        """Whether the weekday pattern covers ``date``.

        Args:
            date: Date as ``YYYYMMDD``.
            weekday: 1 = Sunday .. 7 = Saturday.
        """
        if not self.start_date <= date <= self.end_date:
            return False
        # weekday_flags starts on Monday, so Sunday (1) maps to the last slot
        return self.weekday_flags[(weekday - 2) % 7]


@dataclass(frozen=True)
class CalendarException:
    """A per-date override of a service calendar."""

    service_id: str
    date: str  # YYYYMMDD
    exception_type: ExceptionType


@dataclass(frozen=True)
class Stop:
    """A station."""

    stop_id: str
    stop_name: str


@dataclass(frozen=True)
class Route:
    """A line."""

    route_id: str
    route_name: str
