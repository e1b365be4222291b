"""Tests for the terminal display."""

import asyncio
import io
import os
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from metra_departures.adapters.config import AppConfig
from metra_departures.adapters.console import ConsoleDisplayAdapter, render_snapshot
from metra_departures.adapters.formatters import DepartureFormatter
from metra_departures.domain.errors import HttpError, NoCacheError
from metra_departures.domain.models import (
    DeparturesSnapshot,
    RouteConfiguration,
    RouteSlot,
    TrainDeparture,
)

UPDATED = datetime(2026, 10, 19, 12, 0, 5, tzinfo=UTC)

CONFIGURATION = RouteConfiguration(
    "BNSF",
    3,
    (
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
    ),
)


def make_config() -> AppConfig:
    with patch.dict(os.environ, {}, clear=True):
        return AppConfig(config_file=None, time_format="minutes", _env_file=None)


def departure(trip_id: str, minutes: int, delay: int = 0, live: bool = True) -> TrainDeparture:
    return TrainDeparture(
        id=trip_id,
        trip_id=trip_id,
        scheduled_time=UPDATED + timedelta(minutes=minutes),
        delay_seconds=delay,
        minutes_until=minutes,
        is_realtime=live,
    )


def test_render_live_snapshot() -> None:
    """Given live departures, when rendering, then header, rows and footer are shown."""
    snapshot = DeparturesSnapshot(
        departures=(departure("BNSF_BN1200_V1_A", 4, delay=180), departure("BNSF_BN1202_V1_A", 65)),
        is_realtime=True,
        last_update=UPDATED,
        active_slot_id="morning",
    )

    lines = render_snapshot(snapshot, CONFIGURATION, DepartureFormatter(make_config()))

    assert lines[0] == "BNSF: Naperville -> Chicago Union Station"
    assert "#1200" in lines[1] and "4m" in lines[1] and "+3 min delay" in lines[1]
    assert "#1202" in lines[2] and "1h 5m" in lines[2]
    assert lines[-1] == "  Live - updated 07:00:05"


def test_render_errors_and_empty_list() -> None:
    """Given errors and no departures, when rendering, then both errors and the empty notice are shown."""
    snapshot = DeparturesSnapshot(
        error=NoCacheError().to_details(),
        realtime_error=HttpError(500).to_details(),
        active_slot_id="morning",
    )

    lines = render_snapshot(snapshot, CONFIGURATION, DepartureFormatter(make_config()))

    assert "  ! No cached schedule and network unavailable." in lines
    assert "  ! Live data unavailable: API returned HTTP 500." in lines
    assert "  No upcoming departures" in lines
    assert lines[-1] == "  Scheduled - updated Never"


def test_render_repeated_list_shows_its_age() -> None:
    """Given a snapshot with an error and an older list, when rendering, then the list age is shown."""
    snapshot = DeparturesSnapshot(
        departures=(departure("BNSF_BN1200_V1_A", 4, live=False),),
        last_update=UPDATED,
        error=NoCacheError().to_details(),
        active_slot_id="morning",
    )
    now = UPDATED + timedelta(minutes=3, seconds=5)

    lines = render_snapshot(snapshot, CONFIGURATION, DepartureFormatter(make_config()), now=now)

    assert lines[-1] == "  Scheduled - updated 07:00:05 (3m ago)"


def test_render_without_known_slot_uses_line_only() -> None:
    snapshot = DeparturesSnapshot(last_update=UPDATED)

    lines = render_snapshot(snapshot, CONFIGURATION, DepartureFormatter(make_config()))

    assert lines[0] == "BNSF"


class FixedReconciler:
    """Reconciler returning one fixed snapshot."""

    def __init__(self, snapshot: DeparturesSnapshot) -> None:
        self.snapshot = snapshot

    async def refresh(self, configuration, now=None) -> DeparturesSnapshot:
        return self.snapshot

    def set_override(self, slot_id: str) -> None: ...

    def clear_override(self) -> None: ...

    def cycle_slot(self, configuration, now=None) -> str | None:
        return None


class FixedConfigurationStore:
    def load(self) -> RouteConfiguration:
        return CONFIGURATION

    def save(self, configuration: RouteConfiguration) -> None: ...


@pytest.mark.asyncio
async def test_console_adapter_prints_refreshed_snapshot() -> None:
    """Given a running adapter, when the first refresh completes, then the snapshot is printed."""
    snapshot = DeparturesSnapshot(
        departures=(departure("BNSF_BN1200_V1_A", 4),),
        is_realtime=True,
        last_update=UPDATED,
        active_slot_id="morning",
    )
    stream = io.StringIO()
    adapter = ConsoleDisplayAdapter(
        FixedReconciler(snapshot), FixedConfigurationStore(), make_config(), stream=stream
    )

    running = asyncio.create_task(adapter.start())
    try:
        async def printed() -> None:
            while "#1200" not in stream.getvalue():
                await asyncio.sleep(0.01)

        await asyncio.wait_for(printed(), 2.0)
    finally:
        await adapter.stop()
        await asyncio.wait_for(running, 2.0)

    assert stream.getvalue().startswith("BNSF: Naperville -> Chicago Union Station\n")
    assert adapter.state.refresh_count >= 1


class RecordingReconciler(FixedReconciler):
    """Fixed reconciler counting refreshes and slot changes."""

    def __init__(self, snapshot: DeparturesSnapshot) -> None:
        super().__init__(snapshot)
        self.refreshes = 0
        self.cycled = 0
        self.cleared = 0

    async def refresh(self, configuration, now=None) -> DeparturesSnapshot:
        self.refreshes += 1
        return self.snapshot

    def clear_override(self) -> None:
        self.cleared += 1

    def cycle_slot(self, configuration, now=None) -> str | None:
        self.cycled += 1
        return "evening"


async def wait_until(predicate) -> None:
    async def poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(poll(), 2.0)


@pytest.mark.asyncio
async def test_commands_change_slot_and_trigger_refresh() -> None:
    """Given a running adapter, when commands are entered, then each applies and refreshes at once."""
    reconciler = RecordingReconciler(DeparturesSnapshot(active_slot_id="morning"))
    reloads: list[bool] = []
    adapter = ConsoleDisplayAdapter(
        reconciler,
        FixedConfigurationStore(),
        make_config(),
        stream=io.StringIO(),
        on_reload=lambda: reloads.append(True),
    )

    running = asyncio.create_task(adapter.start())
    try:
        await wait_until(lambda: reconciler.refreshes >= 1)

        adapter.handle_command("n\n")
        await wait_until(lambda: reconciler.refreshes >= 2)
        adapter.handle_command("a")
        await wait_until(lambda: reconciler.refreshes >= 3)
        adapter.handle_command("l")
        await wait_until(lambda: reconciler.refreshes >= 4)
    finally:
        await adapter.stop()
        await asyncio.wait_for(running, 2.0)

    assert reconciler.cycled == 1
    assert reconciler.cleared == 1
    assert reloads == [True]


def test_next_slot_with_single_slot_is_reported() -> None:
    stream = io.StringIO()
    adapter = ConsoleDisplayAdapter(
        FixedReconciler(DeparturesSnapshot()), FixedConfigurationStore(), make_config(), stream=stream
    )

    adapter.handle_command("n")

    assert "Only one slot is configured." in stream.getvalue()


def test_unknown_command_lists_commands() -> None:
    stream = io.StringIO()
    adapter = ConsoleDisplayAdapter(
        FixedReconciler(DeparturesSnapshot()), FixedConfigurationStore(), make_config(), stream=stream
    )

    adapter.handle_command("x")

    assert "Unknown command 'x'." in stream.getvalue()
    assert "n next slot" in stream.getvalue()


def test_commands_are_not_read_from_a_pipe() -> None:
    """Given a non-terminal input, when starting to read, then no reader is installed."""
    adapter = ConsoleDisplayAdapter(
        FixedReconciler(DeparturesSnapshot()),
        FixedConfigurationStore(),
        make_config(),
        stream=io.StringIO(),
        input_stream=io.StringIO("n\n"),
    )

    adapter._start_reading_input()

    assert adapter._reading_input is False
