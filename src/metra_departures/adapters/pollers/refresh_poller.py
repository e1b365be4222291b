"""Refresh poller running departure refresh cycles periodically and on demand."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from metra_departures.domain.contracts.refresh_poller import RefreshPollerProtocol
from metra_departures.domain.contracts.state_broadcaster import (
    StateBroadcasterProtocol,  # noqa: TC001 - Runtime dependency: used in __init__ signature
)
from metra_departures.domain.contracts.state_updater import (
    StateUpdaterProtocol,  # noqa: TC001 - Runtime dependency: used in __init__ signature
)

if TYPE_CHECKING:
    from metra_departures.domain.contracts.departure_refresher import DepartureRefresherProtocol
    from metra_departures.domain.ports.route_configuration_store import RouteConfigurationStore

logger = logging.getLogger(__name__)


class RefreshPoller(RefreshPollerProtocol):
    """Runs the reconciler on a timer and publishes every snapshot.

    Refreshes never overlap. A request arriving while a refresh runs is
    coalesced into a single follow-up refresh.
    """

    def __init__(
        self,
        reconciler: DepartureRefresherProtocol,
        configuration_store: RouteConfigurationStore,
        state_updater: StateUpdaterProtocol,
        state_broadcaster: StateBroadcasterProtocol,
        refresh_interval_seconds: float,
    ) -> None:
        """Initialize the refresh poller.

        Args:
            reconciler: Produces the snapshot of each cycle.
            configuration_store: Source of the route configuration, read
                every cycle so saved changes apply on the next refresh.
            state_updater: Updater for state.
            state_broadcaster: Broadcaster for state updates.
            refresh_interval_seconds: Delay between periodic refreshes.
        """
        self.reconciler = reconciler
        self.configuration_store = configuration_store
        self.state_updater = state_updater
        self.state_broadcaster = state_broadcaster
        self.refresh_interval_seconds = refresh_interval_seconds
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()
        self._pending = False
        self._wakeup = asyncio.Event()

    async def start(self) -> None:
        """Start the refresh poller."""
        if self._task is not None and not self._task.done():
            logger.warning("Refresh poller already running")
            return

        self._task = asyncio.create_task(self._poll_loop())
        logger.info(f"Started refresh poller (every {self.refresh_interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the refresh poller."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.info("Refresh poller cancelled")
            logger.info("Stopped refresh poller")

    def request_refresh(self) -> None:
        """Wake the poll loop for an immediate refresh."""
        self._wakeup.set()

    async def refresh_now(self) -> None:
        """Refresh unless one is running; in that case schedule one follow-up."""
        if self._lock.locked():
            self._pending = True
            return
        async with self._lock:
            while True:
                self._pending = False
                await self._process_and_broadcast()
                if not self._pending:
                    break

    async def _poll_loop(self) -> None:
        """Main polling loop."""
        # Do initial update immediately
        await self.refresh_now()

        try:
            while True:
                try:
                    await asyncio.wait_for(
                        self._wakeup.wait(), timeout=self.refresh_interval_seconds
                    )
                except TimeoutError:
                    pass
                self._wakeup.clear()
                await self.refresh_now()
        except asyncio.CancelledError:
            logger.info("Refresh poller cancelled")
            raise

    async def _process_and_broadcast(self) -> None:
        """Run one refresh cycle and broadcast its snapshot."""
        try:
            configuration = self.configuration_store.load()
            snapshot = await self.reconciler.refresh(configuration)
        except Exception as e:
            logger.error(f"Refresh cycle failed: {e}", exc_info=True)
            return

        self.state_updater.update_snapshot(snapshot)
        logger.debug(
            f"Refresh poller updated departures at {snapshot.last_update}, "
            f"departures: {len(snapshot.departures)}, realtime: {snapshot.is_realtime}"
        )
        await self.state_broadcaster.broadcast_update(snapshot)
