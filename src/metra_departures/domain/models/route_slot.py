"""Route slot domain model."""

from dataclasses import dataclass

MINUTES_PER_DAY = 24 * 60


def minutes_of_day(hhmm: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight. ``24:00`` is accepted as end of day."""
    hours, _, minutes = hhmm.partition(":")
    value = int(hours) * 60 + int(minutes or 0)
    if not 0 <= value <= MINUTES_PER_DAY:
        raise ValueError(f"Time of day out of range: {hhmm!r}")
    return value


@dataclass(frozen=True)
class RouteSlot:
    """A time window binding a departure stop, optional destination and direction."""

    id: str
    start_time: str  # "HH:MM", service timezone
    end_time: str  # "HH:MM", exclusive
    departure_stop_id: str
    departure_stop_name: str
    direction_id: int
    destination_stop_id: str | None = None
    destination_stop_name: str | None = None

    @property
    def start_minutes(self) -> int:
        return minutes_of_day(self.start_time)

    @property
    def end_minutes(self) -> int:
        return minutes_of_day(self.end_time)

    def contains(self, minute: int) -> bool:
        """Whether ``minute`` (of the day) falls inside ``[start, end)``.

        A window whose start is after its end wraps past midnight.
        """
        start, end = self.start_minutes, self.end_minutes
        if start <= end:
            return start <= minute < end
        return minute >= start or minute < end
