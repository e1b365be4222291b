"""Departures state holder, updater and broadcaster."""

from metra_departures.adapters.state.departures_state import DeparturesState
from metra_departures.adapters.state.state_broadcaster import StateBroadcaster
from metra_departures.adapters.state.state_updater import StateUpdater

__all__ = ["DeparturesState", "StateBroadcaster", "StateUpdater"]
