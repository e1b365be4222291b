"""Pollers driving the refresh cycle."""

from metra_departures.adapters.pollers.refresh_poller import RefreshPoller

__all__ = ["RefreshPoller"]
