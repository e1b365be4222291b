"""Protocol for updating departures state."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from metra_departures.domain.models.departures_snapshot import DeparturesSnapshot


class StateUpdaterProtocol(Protocol):
    """Protocol for replacing the published departures state."""

    def update_snapshot(self, snapshot: "DeparturesSnapshot") -> None:
        """Replace the current snapshot.

        Args:
            snapshot: The snapshot produced by the latest refresh cycle.
        """
        ...
