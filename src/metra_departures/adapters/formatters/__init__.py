"""Presentation formatters."""

from metra_departures.adapters.formatters.departure_formatter import DepartureFormatter

__all__ = ["DepartureFormatter"]
