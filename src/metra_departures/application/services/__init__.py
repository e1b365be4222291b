"""Application services."""

from metra_departures.application.services.departure_reconciler import DepartureReconciler

__all__ = ["DepartureReconciler"]
