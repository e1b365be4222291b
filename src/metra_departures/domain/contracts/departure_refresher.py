"""Protocol for producing departures snapshots."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from metra_departures.domain.models.departures_snapshot import DeparturesSnapshot
    from metra_departures.domain.models.route_configuration import RouteConfiguration


class DepartureRefresherProtocol(Protocol):
    """Protocol for running one refresh cycle and managing the slot override."""

    @property
    def snapshot(self) -> "DeparturesSnapshot":
        """The snapshot published by the latest refresh."""
        ...

    async def refresh(
        self, configuration: "RouteConfiguration", now: "datetime | None" = None
    ) -> "DeparturesSnapshot":
        """Run one refresh cycle and return its snapshot."""
        ...

    def set_override(self, slot_id: str) -> None:
        """Pin a slot until the automatic selection changes."""
        ...

    def clear_override(self) -> None:
        """Return to automatic slot selection."""
        ...

    def cycle_slot(
        self, configuration: "RouteConfiguration", now: "datetime | None" = None
    ) -> str | None:
        """Advance the override to the next slot. Returns its id."""
        ...
