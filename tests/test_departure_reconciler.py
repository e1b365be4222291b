"""Tests for merging live and scheduled departures."""

from datetime import datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from fakes import FakeFetcher, InMemoryCredentialStore, write_tables

from metra_departures.adapters.gtfs_static import CacheSync, GtfsScheduleStore

from metra_departures.application.services import DepartureReconciler
from metra_departures.domain.errors import (
    DepartureSourceError,
    ErrorKind,
    HttpError,
    NoCacheError,
    NoTokenError,
)
from metra_departures.domain.models import RouteConfiguration, RouteSlot, TrainDeparture

CHICAGO = ZoneInfo("America/Chicago")
MORNING = datetime(2026, 10, 19, 7, 0, tzinfo=CHICAGO)

CONFIGURATION = RouteConfiguration(
    line_id="BNSF",
    max_trains=3,
    slots=(
        RouteSlot(
            id="morning",
            start_time="05:00",
            end_time="12:00",
            departure_stop_id="NAPERVILLE",
            departure_stop_name="Naperville",
            direction_id=1,
            destination_stop_id="CUS",
            destination_stop_name="Chicago Union Station",
        ),
        RouteSlot(
            id="evening",
            start_time="12:00",
            end_time="24:00",
            departure_stop_id="CUS",
            departure_stop_name="Chicago Union Station",
            direction_id=0,
        ),
    ),
)


def train(trip_id: str, minutes: int, live: bool, delay: int = 0) -> TrainDeparture:
    return TrainDeparture(
        id=trip_id,
        trip_id=trip_id,
        scheduled_time=MORNING + timedelta(minutes=minutes),
        delay_seconds=delay,
        minutes_until=minutes,
        is_realtime=live,
    )


class StubSource:
    """Departure source returning canned results and recording its calls."""

    def __init__(
        self,
        departures: list[TrainDeparture] | None = None,
        error: DepartureSourceError | None = None,
    ) -> None:
        self.departures = departures or []
        self.error = error
        self.calls: list[tuple] = []

    async def get_departures(self, *args, **kwargs) -> list[TrainDeparture]:
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        return list(self.departures)


def reconciler_with(
    live: StubSource, scheduled: StubSource, token: str | None = "secret"
) -> DepartureReconciler:
    return DepartureReconciler(
        realtime_source=live,
        schedule_source=scheduled,
        credential_store=InMemoryCredentialStore(token),
        timezone=CHICAGO,
    )


@pytest.mark.asyncio
async def test_full_live_list_skips_schedule() -> None:
    """Given enough live departures, when refreshing, then the schedule is not consulted."""
    live = StubSource([train("A", 5, True), train("B", 15, True), train("C", 25, True)])
    scheduled = StubSource([train("Z", 1, False)])
    reconciler = reconciler_with(live, scheduled)

    snapshot = await reconciler.refresh(CONFIGURATION, now=MORNING)

    assert [d.trip_id for d in snapshot.departures] == ["A", "B", "C"]
    assert snapshot.is_realtime is True
    assert snapshot.last_update == MORNING
    assert snapshot.active_slot_id == "morning"
    assert scheduled.calls == []


@pytest.mark.asyncio
async def test_live_and_scheduled_are_merged_by_trip() -> None:
    """Given one live train, when refreshing, then scheduled trains fill the list without duplicating it."""
    live = StubSource([train("B", 12, True, delay=120)])
    scheduled = StubSource([train("A", 5, False), train("B", 10, False), train("C", 30, False)])
    reconciler = reconciler_with(live, scheduled)

    snapshot = await reconciler.refresh(CONFIGURATION, now=MORNING)

    assert [(d.trip_id, d.is_realtime) for d in snapshot.departures] == [
        ("A", False),
        ("B", True),
        ("C", False),
    ]
    assert snapshot.is_realtime is True
    assert snapshot.error is None


@pytest.mark.asyncio
async def test_queries_use_active_slot() -> None:
    """Given the morning slot, when refreshing, then both sources are queried with its stops."""
    live = StubSource()
    scheduled = StubSource()
    reconciler = reconciler_with(live, scheduled)

    await reconciler.refresh(CONFIGURATION, now=MORNING)

    assert live.calls == [("secret", "BNSF", "NAPERVILLE", "CUS", 1, 3)]
    assert scheduled.calls == [("BNSF", "NAPERVILLE", "CUS", 1, 3)]


@pytest.mark.asyncio
async def test_missing_token_falls_back_silently() -> None:
    """Given no token, when refreshing, then scheduled departures are shown with no error."""
    live = StubSource(error=NoTokenError())
    scheduled = StubSource([train("A", 5, False)])
    reconciler = reconciler_with(live, scheduled, token=None)

    snapshot = await reconciler.refresh(CONFIGURATION, now=MORNING)

    assert [d.trip_id for d in snapshot.departures] == ["A"]
    assert snapshot.is_realtime is False
    assert snapshot.realtime_error is None
    assert snapshot.error is None


@pytest.mark.asyncio
async def test_realtime_failure_is_recorded() -> None:
    """Given the feed answers 500, when refreshing, then the schedule is shown and the failure recorded."""
    live = StubSource(error=HttpError(500))
    scheduled = StubSource([train("A", 5, False)])
    reconciler = reconciler_with(live, scheduled)

    snapshot = await reconciler.refresh(CONFIGURATION, now=MORNING)

    assert snapshot.is_realtime is False
    assert snapshot.realtime_error is not None
    assert snapshot.realtime_error.kind == ErrorKind.HTTP_ERROR
    assert snapshot.realtime_error.status_code == 500


@pytest.mark.asyncio
async def test_schedule_failure_keeps_live_departures() -> None:
    """Given live trains and a failing schedule, when refreshing, then the live trains are shown with the error."""
    live = StubSource([train("A", 5, True)])
    scheduled = StubSource(error=NoCacheError())
    reconciler = reconciler_with(live, scheduled)

    snapshot = await reconciler.refresh(CONFIGURATION, now=MORNING)

    assert [d.trip_id for d in snapshot.departures] == ["A"]
    assert snapshot.is_realtime is True
    assert snapshot.error is not None
    assert snapshot.error.kind == ErrorKind.NO_CACHE


@pytest.mark.asyncio
async def test_schedule_failure_preserves_previous_list() -> None:
    """Given an earlier good refresh, when everything fails, then the previous list stays with the error."""
    live = StubSource(error=NoTokenError())
    scheduled = StubSource([train("A", 5, False)])
    reconciler = reconciler_with(live, scheduled, token=None)
    first = await reconciler.refresh(CONFIGURATION, now=MORNING)
    scheduled.error = NoCacheError()

    second = await reconciler.refresh(CONFIGURATION, now=MORNING + timedelta(minutes=1))

    assert second.departures == first.departures
    assert second.last_update == first.last_update
    assert second.error is not None
    assert reconciler.snapshot is second


@pytest.mark.asyncio
async def test_no_slots_reports_error() -> None:
    """Given a configuration without slots, when refreshing, then a no_slots error is published."""
    live = StubSource()
    scheduled = StubSource()
    reconciler = reconciler_with(live, scheduled)

    snapshot = await reconciler.refresh(RouteConfiguration("BNSF", 3), now=MORNING)

    assert snapshot.departures == ()
    assert snapshot.error is not None
    assert snapshot.error.kind == ErrorKind.NO_SLOTS
    assert live.calls == []


@pytest.mark.asyncio
async def test_override_wins_until_time_window_changes() -> None:
    """Given a manual slot choice, when the automatic slot changes, then the choice is dropped."""
    reconciler = reconciler_with(StubSource(), StubSource())
    await reconciler.refresh(CONFIGURATION, now=MORNING)
    reconciler.set_override("evening")

    pinned = await reconciler.refresh(CONFIGURATION, now=MORNING + timedelta(minutes=5))
    after_noon = await reconciler.refresh(
        CONFIGURATION, now=datetime(2026, 10, 19, 12, 30, tzinfo=CHICAGO)
    )
    back_to_morning = await reconciler.refresh(
        CONFIGURATION, now=datetime(2026, 10, 20, 7, 0, tzinfo=CHICAGO)
    )

    assert pinned.active_slot_id == "evening"
    assert after_noon.active_slot_id == "evening"
    assert reconciler.override_slot_id is None
    assert back_to_morning.active_slot_id == "morning"


@pytest.mark.asyncio
async def test_utc_time_is_converted_to_service_timezone() -> None:
    """Given a UTC timestamp in the Chicago evening, when refreshing, then the evening slot is used."""
    reconciler = reconciler_with(StubSource(), StubSource())

    snapshot = await reconciler.refresh(
        CONFIGURATION, now=datetime(2026, 10, 19, 23, 0, tzinfo=ZoneInfo("UTC"))
    )

    assert snapshot.active_slot_id == "evening"


def test_cycle_slot_wraps_around() -> None:
    """Given two slots, when cycling twice, then the selection wraps back to the first."""
    reconciler = reconciler_with(StubSource(), StubSource())

    assert reconciler.cycle_slot(CONFIGURATION, now=MORNING) == "evening"
    assert reconciler.cycle_slot(CONFIGURATION, now=MORNING) == "morning"


def test_cycle_slot_needs_two_slots() -> None:
    """Given a single slot, when cycling, then nothing changes."""
    reconciler = reconciler_with(StubSource(), StubSource())
    single = RouteConfiguration("BNSF", 3, CONFIGURATION.slots[:1])

    assert reconciler.cycle_slot(single, now=MORNING) is None
    assert reconciler.override_slot_id is None


@pytest.mark.asyncio
async def test_schedule_failure_keeps_slot_of_reused_list() -> None:
    """Given a slot switch, when the schedule then fails, then the reused list keeps its own slot."""
    live = StubSource(error=NoTokenError())
    scheduled = StubSource([train("A", 5, False)])
    reconciler = reconciler_with(live, scheduled, token=None)
    first = await reconciler.refresh(CONFIGURATION, now=MORNING)
    reconciler.set_override("evening")
    scheduled.error = NoCacheError()

    second = await reconciler.refresh(CONFIGURATION, now=MORNING + timedelta(minutes=1))

    assert second.departures == first.departures
    assert second.active_slot_id == "morning"


def cached_store_with_latin1_stops(cache_dir: Path) -> GtfsScheduleStore:
    """Schedule store whose only snapshot has a stops.txt that is not UTF-8."""
    snapshot = write_tables(cache_dir / "gtfs")
    (snapshot / "stops.txt").write_bytes(
        "stop_id,stop_name\nNAPERVILLE,Napervill\xe9\n".encode("latin-1")
    )
    # The fetcher knows no URLs, so every sync falls back to the cached snapshot
    sync = CacheSync(FakeFetcher(), cache_dir, "https://example.test/v", "https://example.test/z")
    return GtfsScheduleStore(sync, timezone=CHICAGO)


@pytest.mark.asyncio
async def test_unreadable_schedule_table_is_reported(tmp_path: Path) -> None:
    """Given a non-UTF-8 schedule table and no token, when refreshing, then the error is shown."""
    reconciler = DepartureReconciler(
        realtime_source=StubSource(error=NoTokenError()),
        schedule_source=cached_store_with_latin1_stops(tmp_path),
        credential_store=InMemoryCredentialStore(None),
        timezone=CHICAGO,
    )

    snapshot = await reconciler.refresh(CONFIGURATION, now=MORNING)

    assert snapshot.departures == ()
    assert snapshot.error is not None
    assert snapshot.error.kind == ErrorKind.UNREADABLE_TABLE
    assert snapshot.error.table == "stops.txt"


@pytest.mark.asyncio
async def test_unreadable_schedule_table_keeps_live_departures(tmp_path: Path) -> None:
    """Given live trains and a non-UTF-8 schedule table, when refreshing, then live trains stay."""
    reconciler = DepartureReconciler(
        realtime_source=StubSource([train("A", 5, True)]),
        schedule_source=cached_store_with_latin1_stops(tmp_path),
        credential_store=InMemoryCredentialStore("secret"),
        timezone=CHICAGO,
    )

    snapshot = await reconciler.refresh(CONFIGURATION, now=MORNING)

    assert [d.trip_id for d in snapshot.departures] == ["A"]
    assert snapshot.is_realtime is True
    assert snapshot.error is not None
    assert snapshot.error.kind == ErrorKind.UNREADABLE_TABLE
