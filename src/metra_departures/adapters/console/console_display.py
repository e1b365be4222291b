"""Terminal display adapter."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING, TextIO

from metra_departures.adapters.config.app_config import AppConfig
from metra_departures.adapters.formatters.departure_formatter import DepartureFormatter
from metra_departures.adapters.pollers.refresh_poller import RefreshPoller
from metra_departures.adapters.state import DeparturesState, StateBroadcaster, StateUpdater
from metra_departures.domain.ports.display_adapter import DisplayAdapter

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from metra_departures.domain.contracts.departure_refresher import DepartureRefresherProtocol
    from metra_departures.domain.models.departures_snapshot import DeparturesSnapshot
    from metra_departures.domain.models.route_configuration import RouteConfiguration
    from metra_departures.domain.ports.route_configuration_store import RouteConfigurationStore

logger = logging.getLogger(__name__)

COMMANDS = "Commands: Enter or r refresh, n next slot, a automatic slot, l reload schedule"


def render_snapshot(
    snapshot: DeparturesSnapshot,
    configuration: RouteConfiguration,
    formatter: DepartureFormatter,
    now: datetime | None = None,
) -> list[str]:
    """Render a snapshot as display lines.

    A snapshot carrying an error may repeat an older list, so its footer also
    tells how old that list is.
    """
    slot = configuration.slot_by_id(snapshot.active_slot_id)
    if slot is not None:
        header = f"{configuration.line_id}: {slot.departure_stop_name}"
        if slot.destination_stop_name:
            header += f" -> {slot.destination_stop_name}"
    else:
        header = configuration.line_id
    lines = [header]

    if snapshot.error is not None:
        lines.append(f"  ! {formatter.format_error(snapshot.error)}")
    if snapshot.realtime_error is not None:
        realtime_message = formatter.format_error(snapshot.realtime_error)
        lines.append(f"  ! Live data unavailable: {realtime_message}")

    if not snapshot.departures:
        lines.append("  No upcoming departures")
    for departure in snapshot.departures:
        row = f"  {departure.train_number:<8} {formatter.format_departure_time(departure):>7}"
        delay = formatter.format_delay(departure)
        if delay:
            row += f"  {delay}"
        lines.append(row)

    source = "Live" if snapshot.is_realtime else "Scheduled"
    footer = f"  {source} - updated {formatter.format_update_time(snapshot.last_update)}"
    if snapshot.error is not None and snapshot.last_update is not None:
        footer += f" ({formatter.format_update_age(snapshot.last_update, now)})"
    lines.append(footer)
    return lines


class ConsoleDisplayAdapter(DisplayAdapter):
    """Prints every refreshed snapshot to a text stream until stopped.

    When reading commands from an interactive terminal, each entered line is
    one command (see ``COMMANDS``).
    """

    def __init__(
        self,
        reconciler: DepartureRefresherProtocol,
        configuration_store: RouteConfigurationStore,
        config: AppConfig,
        stream: TextIO | None = None,
        input_stream: TextIO | None = None,
        on_reload: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the console adapter.

        Args:
            reconciler: Produces the snapshot of each refresh.
            configuration_store: Source of the route configuration.
            config: Application configuration.
            stream: Output stream. Defaults to stdout.
            input_stream: Terminal to read commands from. None disables commands.
            on_reload: Marks the static schedule stale for the ``l`` command.
        """
        self.reconciler = reconciler
        self.configuration_store = configuration_store
        self.config = config
        self.stream = stream or sys.stdout
        self.input_stream = input_stream
        self.on_reload = on_reload
        self.formatter = DepartureFormatter(config)
        self.state = DeparturesState()
        self.broadcaster = StateBroadcaster()
        self.poller = RefreshPoller(
            reconciler=reconciler,
            configuration_store=configuration_store,
            state_updater=StateUpdater(self.state),
            state_broadcaster=self.broadcaster,
            refresh_interval_seconds=config.refresh_interval_seconds,
        )
        self._unsubscribe: Callable[[], None] | None = None
        self._reading_input = False
        self._stopped = asyncio.Event()

    async def display_departures(self, snapshot: DeparturesSnapshot) -> None:
        """Print the snapshot."""
        configuration = self.configuration_store.load()
        for line in render_snapshot(snapshot, configuration, self.formatter):
            print(line, file=self.stream)
        print(file=self.stream, flush=True)

    def handle_command(self, command: str) -> None:
        """Apply one keyboard command and request a refresh to show its effect."""
        command = command.strip().lower()
        if command == "n":
            slot_id = self.reconciler.cycle_slot(self.configuration_store.load())
            if slot_id is None:
                print("Only one slot is configured.", file=self.stream, flush=True)
                return
        elif command == "a":
            self.reconciler.clear_override()
            logger.info("Returned to automatic slot selection")
        elif command == "l":
            if self.on_reload is not None:
                self.on_reload()
                logger.info("Reloading static schedule")
        elif command not in ("", "r"):
            print(f"Unknown command {command!r}. {COMMANDS}", file=self.stream, flush=True)
            return
        self.poller.request_refresh()

    def _on_input(self) -> None:
        line = self.input_stream.readline() if self.input_stream is not None else ""
        if not line:
            # End of input
            self._stop_reading_input()
            return
        self.handle_command(line)

    def _start_reading_input(self) -> None:
        if self.input_stream is None or not self.input_stream.isatty():
            return
        try:
            asyncio.get_running_loop().add_reader(self.input_stream.fileno(), self._on_input)
        except NotImplementedError:
            logger.debug("Keyboard commands are not supported by this event loop")
            return
        self._reading_input = True
        print(COMMANDS, file=self.stream, flush=True)

    def _stop_reading_input(self) -> None:
        if self._reading_input and self.input_stream is not None:
            asyncio.get_running_loop().remove_reader(self.input_stream.fileno())
        self._reading_input = False

    async def start(self) -> None:
        """Start refreshing and block until ``stop`` is called."""
        self._stopped.clear()
        self._unsubscribe = self.broadcaster.subscribe(self.display_departures)
        await self.poller.start()
        self._start_reading_input()
        logger.info("Console display started")
        await self._stopped.wait()

    async def stop(self) -> None:
        """Stop refreshing."""
        self._stop_reading_input()
        await self.poller.stop()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._stopped.set()
        logger.info("Console display stopped")
