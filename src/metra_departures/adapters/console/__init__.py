"""Terminal display adapter."""

from metra_departures.adapters.console.console_display import (
    ConsoleDisplayAdapter,
    render_snapshot,
)

__all__ = ["ConsoleDisplayAdapter", "render_snapshot"]
