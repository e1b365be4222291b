"""Broadcaster for state updates."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from metra_departures.domain.contracts.state_broadcaster import (
    SnapshotListener,
    StateBroadcasterProtocol,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from metra_departures.domain.models.departures_snapshot import DeparturesSnapshot

logger = logging.getLogger(__name__)


class StateBroadcaster(StateBroadcasterProtocol):
    """Delivers each new snapshot to the subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: list[SnapshotListener] = []

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener.

        Args:
            listener: Coroutine function called with every new snapshot.

        Returns:
            A function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def broadcast_update(self, snapshot: DeparturesSnapshot) -> None:
        """Send the snapshot to all listeners. A failing listener does not stop the others.

        Args:
            snapshot: The snapshot to deliver.
        """
        for listener in list(self._listeners):
            try:
                await listener(snapshot)
            except Exception as e:
                logger.error(f"Failed to deliver snapshot to listener: {e}", exc_info=True)
        logger.debug(f"Broadcasted snapshot to {len(self._listeners)} listener(s)")
