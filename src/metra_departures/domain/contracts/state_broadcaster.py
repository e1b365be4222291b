"""Protocol for broadcasting state updates."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from metra_departures.domain.models.departures_snapshot import DeparturesSnapshot

SnapshotListener = Callable[["DeparturesSnapshot"], Awaitable[None]]


class StateBroadcasterProtocol(Protocol):
    """Protocol for publishing departures snapshots to subscribers."""

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        ...

    async def broadcast_update(self, snapshot: "DeparturesSnapshot") -> None:
        """Deliver a snapshot to every subscriber."""
        ...
