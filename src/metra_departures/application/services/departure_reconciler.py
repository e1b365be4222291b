"""Departure reconciler service.

Merges live and scheduled departures for the active route slot into one
snapshot per refresh cycle, and keeps the last good data on failures.
"""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from metra_departures.domain.contracts.departure_refresher import DepartureRefresherProtocol
from metra_departures.domain.errors import DepartureSourceError, ErrorKind, NoTokenError
from metra_departures.domain.models.departures_snapshot import DeparturesSnapshot
from metra_departures.domain.models.error_details import ErrorDetails
from metra_departures.domain.models.route_configuration import RouteConfiguration
from metra_departures.domain.models.route_slot import RouteSlot
from metra_departures.domain.models.train_departure import TrainDeparture
from metra_departures.domain.ports.credential_store import CredentialStore
from metra_departures.domain.ports.departure_repository import (
    RealtimeDepartureRepository,
    ScheduledDepartureRepository,
)

logger = logging.getLogger(__name__)

NO_SLOTS_ERROR = ErrorDetails(kind=ErrorKind.NO_SLOTS.value, reason="No route slots configured")


class DepartureReconciler(DepartureRefresherProtocol):
    """Service producing one ``DeparturesSnapshot`` per refresh."""

    def __init__(
        self,
        realtime_source: RealtimeDepartureRepository,
        schedule_source: ScheduledDepartureRepository,
        credential_store: CredentialStore,
        timezone: ZoneInfo,
    ) -> None:
        """Initialize with both departure sources and the token store.

        Args:
            realtime_source: Live departures from the realtime feed.
            schedule_source: Departures from the static schedule.
            credential_store: Holds the realtime API token, if any.
            timezone: Service timezone used for slot selection.
        """
        self._realtime_source = realtime_source
        self._schedule_source = schedule_source
        self._credential_store = credential_store
        self._timezone = timezone
        self._snapshot = DeparturesSnapshot()
        self._last_auto_slot_id: str | None = None
        self._override_slot_id: str | None = None

    @property
    def snapshot(self) -> DeparturesSnapshot:
        """The snapshot published by the latest refresh."""
        return self._snapshot

    @property
    def override_slot_id(self) -> str | None:
        return self._override_slot_id

    def set_override(self, slot_id: str) -> None:
        """Pin the slot shown until the automatic selection changes."""
        self._override_slot_id = slot_id

    def clear_override(self) -> None:
        self._override_slot_id = None

    def cycle_slot(
        self, configuration: RouteConfiguration, now: datetime | None = None
    ) -> str | None:
        """Advance the override to the slot after the one currently shown, wrapping around.

        Returns:
            The newly selected slot id, or None with fewer than two slots.
        """
        slots = configuration.slots
        if len(slots) < 2:
            return None
        current = configuration.active_slot(self._local(now), self._override_slot_id)
        position = slots.index(current) if current in slots else -1
        next_slot = slots[(position + 1) % len(slots)]
        self._override_slot_id = next_slot.id
        logger.info(f"Switched to slot {next_slot.id} ({next_slot.departure_stop_name})")
        return next_slot.id

    def _local(self, now: datetime | None) -> datetime:
        if now is None:
            return datetime.now(self._timezone)
        return now.astimezone(self._timezone)

    def _resolve_slot(
        self, configuration: RouteConfiguration, local_now: datetime
    ) -> RouteSlot | None:
        """Pick the slot for this cycle, dropping a stale override first."""
        auto_slot = configuration.active_slot(local_now)
        auto_slot_id = auto_slot.id if auto_slot is not None else None
        if self._last_auto_slot_id is not None and auto_slot_id != self._last_auto_slot_id:
            if self._override_slot_id is not None:
                logger.info("Active time window changed, clearing manual slot selection")
            self._override_slot_id = None
        self._last_auto_slot_id = auto_slot_id
        return configuration.active_slot(local_now, self._override_slot_id)

    async def refresh(
        self, configuration: RouteConfiguration, now: datetime | None = None
    ) -> DeparturesSnapshot:
        """Run one refresh cycle and publish its snapshot.

        Never raises for source failures; they are recorded on the snapshot.
        """
        local_now = self._local(now)
        slot = self._resolve_slot(configuration, local_now)
        if slot is None:
            logger.warning("No route slots configured")
            return self._publish(DeparturesSnapshot(error=NO_SLOTS_ERROR))

        max_trains = configuration.max_trains
        live: list[TrainDeparture] = []
        realtime_error: ErrorDetails | None = None
        try:
            live = await self._realtime_source.get_departures(
                self._credential_store.load(),
                configuration.line_id,
                slot.departure_stop_id,
                slot.destination_stop_id,
                slot.direction_id,
                max_trains,
                now=local_now,
            )
        except NoTokenError:
            logger.debug("No API token, using static schedule only")
        except DepartureSourceError as e:
            logger.warning(f"Realtime fetch failed: {e.reason}")
            realtime_error = e.to_details()

        if len(live) >= max_trains:
            return self._publish(
                DeparturesSnapshot(
                    departures=tuple(live[:max_trains]),
                    is_realtime=True,
                    last_update=local_now,
                    active_slot_id=slot.id,
                )
            )

        try:
            scheduled = await self._schedule_source.get_departures(
                configuration.line_id,
                slot.departure_stop_id,
                slot.destination_stop_id,
                slot.direction_id,
                max_trains,
                as_of=local_now,
            )
        except DepartureSourceError as e:
            logger.error(f"Static schedule unavailable: {e.reason}")
            fallback = self._fallback(live, e.to_details(), realtime_error, slot, local_now)
            return self._publish(fallback)

        if live:
            live_trip_ids = {d.trip_id for d in live}
            merged = live + [d for d in scheduled if d.trip_id not in live_trip_ids]
            merged.sort(key=lambda d: d.effective_time)
            departures = tuple(merged[:max_trains])
        else:
            departures = tuple(scheduled)

        return self._publish(
            DeparturesSnapshot(
                departures=departures,
                is_realtime=bool(live),
                last_update=local_now,
                realtime_error=realtime_error,
                active_slot_id=slot.id,
            )
        )

    def _fallback(
        self,
        live: list[TrainDeparture],
        error: ErrorDetails,
        realtime_error: ErrorDetails | None,
        slot: RouteSlot,
        local_now: datetime,
    ) -> DeparturesSnapshot:
        """Snapshot for a cycle whose static lookup failed."""
        if live:
            return DeparturesSnapshot(
                departures=tuple(live),
                is_realtime=True,
                last_update=local_now,
                error=error,
                realtime_error=realtime_error,
                active_slot_id=slot.id,
            )
        previous = self._snapshot
        # Keep showing the last list, labelled with the slot it was fetched for
        return DeparturesSnapshot(
            departures=previous.departures,
            is_realtime=previous.is_realtime,
            last_update=previous.last_update,
            error=error,
            realtime_error=realtime_error,
            active_slot_id=previous.active_slot_id or slot.id,
        )

    def _publish(self, snapshot: DeparturesSnapshot) -> DeparturesSnapshot:
        self._snapshot = snapshot
        return snapshot
