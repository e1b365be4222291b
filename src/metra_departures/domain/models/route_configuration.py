"""Route configuration domain model."""

from dataclasses import dataclass
from datetime import datetime

from .route_slot import RouteSlot


@dataclass(frozen=True)
class RouteConfiguration:
    """The monitored line, how many trains to show, and the time-window slots."""

    line_id: str
    max_trains: int
    slots: tuple[RouteSlot, ...] = ()

    def __post_init__(self) -> None:
        if self.max_trains <= 0:
            raise ValueError("max_trains must be greater than 0")

    def slot_by_id(self, slot_id: str | None) -> RouteSlot | None:
        """Return the slot with ``slot_id``, if any."""
        if slot_id is None:
            return None
        return next((slot for slot in self.slots if slot.id == slot_id), None)

    def active_slot(self, now: datetime, override_id: str | None = None) -> RouteSlot | None:
        """Select the slot in effect at ``now``.

        Args:
            now: Current time, already converted to the service timezone.
            override_id: Manually chosen slot id. Wins when it matches a slot.

        Returns:
            The override, else the first slot whose window contains ``now``,
            else the slot whose window ended most recently today, else the
            first slot. ``None`` when no slots are configured.
        """
        overridden = self.slot_by_id(override_id)
        if overridden is not None:
            return overridden
        if not self.slots:
            return None

        minute = now.hour * 60 + now.minute
        for slot in self.slots:
            if slot.contains(minute):
                return slot

        passed = [slot for slot in self.slots if slot.end_minutes <= minute]
        if passed:
            return max(passed, key=lambda slot: slot.end_minutes)
        return self.slots[0]
