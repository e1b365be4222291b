"""Updater for departures state."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from metra_departures.adapters.state.departures_state import (
    DeparturesState,  # noqa: TC001 - Runtime dependency: used in __init__
)
from metra_departures.domain.contracts.state_updater import StateUpdaterProtocol

if TYPE_CHECKING:
    from metra_departures.domain.models.departures_snapshot import DeparturesSnapshot

logger = logging.getLogger(__name__)


class StateUpdater(StateUpdaterProtocol):
    """Updates departures state."""

    def __init__(self, departures_state: DeparturesState) -> None:
        """Initialize the state updater.

        Args:
            departures_state: The DeparturesState instance to update.
        """
        self.departures_state = departures_state

    def update_snapshot(self, snapshot: DeparturesSnapshot) -> None:
        """Replace the snapshot in the state.

        Args:
            snapshot: The snapshot produced by the latest refresh cycle.
        """
        self.departures_state.snapshot = snapshot
        self.departures_state.refresh_count += 1
        logger.debug(
            f"Updated snapshot: {len(snapshot.departures)} departures, "
            f"realtime: {snapshot.is_realtime}, error: {snapshot.error is not None}"
        )
