"""CLI helpers for configuring and querying Metra departures."""

import argparse
import asyncio
import getpass
import logging
import sys

import aiohttp

from metra_departures.adapters.config import (
    AppConfig,
    JsonRouteConfigurationStore,
    RouteConfigurationLoader,
)
from metra_departures.adapters.console import render_snapshot
from metra_departures.adapters.credentials import FileCredentialStore
from metra_departures.adapters.formatters import DepartureFormatter
from metra_departures.adapters.gtfs_static import CacheSync, GtfsScheduleStore
from metra_departures.adapters.http import AiohttpByteFetcher
from metra_departures.adapters.metra_api import MetraRealtimeDepartureRepository
from metra_departures.application.services import DepartureReconciler
from metra_departures.domain.errors import DepartureSourceError

logger = logging.getLogger(__name__)


def build_schedule_store(config: AppConfig, session: aiohttp.ClientSession) -> GtfsScheduleStore:
    """Schedule store backed by the on-disk cache of the published dataset."""
    cache_sync = CacheSync(
        AiohttpByteFetcher(session),
        cache_dir=config.cache_dir,
        version_url=config.schedule_version_url,
        archive_url=config.schedule_archive_url,
        timeout=config.schedule_timeout_seconds,
    )
    return GtfsScheduleStore(cache_sync, timezone=config.service_timezone)


def build_configuration_store(config: AppConfig) -> JsonRouteConfigurationStore:
    """Saved route configuration, seeded from the TOML file when one is configured."""
    seed = RouteConfigurationLoader.load(config) if config.config_file else None
    return JsonRouteConfigurationStore(config.saved_config_file, seed=seed)


def build_reconciler(
    config: AppConfig, session: aiohttp.ClientSession, schedule_store: GtfsScheduleStore
) -> DepartureReconciler:
    realtime = MetraRealtimeDepartureRepository(
        AiohttpByteFetcher(session),
        feed_url=config.realtime_feed_url,
        timeout=config.realtime_timeout_seconds,
        grace_seconds=config.departed_grace_seconds,
    )
    return DepartureReconciler(
        realtime_source=realtime,
        schedule_source=schedule_store,
        credential_store=FileCredentialStore(config.token_file),
        timezone=config.service_timezone,
    )


async def list_lines(config: AppConfig) -> None:
    """Print every line of the schedule."""
    async with aiohttp.ClientSession() as session:
        store = build_schedule_store(config, session)
        await store.ensure_loaded()
    routes = store.available_lines()
    print(f"\nFound {len(routes)} line(s):\n")
    for route in routes:
        print(f"  {route.route_id:<10} {route.route_name}")


async def list_stops(config: AppConfig, line_id: str) -> None:
    """Print the stops served by ``line_id``."""
    async with aiohttp.ClientSession() as session:
        store = build_schedule_store(config, session)
        await store.ensure_loaded()
    stops = store.stops_for_line(line_id)
    if not stops:
        print(f"No stops found for line '{line_id}'", file=sys.stderr)
        sys.exit(1)
    print(f"\nStops on {line_id} ({len(stops)}):\n")
    for stop in stops:
        print(f"  {stop.stop_id:<16} {stop.stop_name}")


async def show_departures(config: AppConfig, slot_id: str | None = None) -> None:
    """Run one refresh cycle and print the result."""
    configuration_store = build_configuration_store(config)
    configuration = configuration_store.load()
    if slot_id is not None and configuration.slot_by_id(slot_id) is None:
        print(f"Unknown slot '{slot_id}'", file=sys.stderr)
        sys.exit(1)

    async with aiohttp.ClientSession() as session:
        reconciler = build_reconciler(config, session, build_schedule_store(config, session))
        if slot_id is not None:
            reconciler.set_override(slot_id)
        snapshot = await reconciler.refresh(configuration)

    for line in render_snapshot(snapshot, configuration, DepartureFormatter(config)):
        print(line)


def manage_token(config: AppConfig, action: str, token: str | None = None) -> None:
    """Set, delete or report the stored API token."""
    store = FileCredentialStore(config.token_file)
    if action == "set":
        if token is None:
            token = getpass.getpass("Metra API token: ")
        if not store.save(token):
            print("Token not saved.", file=sys.stderr)
            sys.exit(1)
        print("Token saved.")
    elif action == "delete":
        store.delete()
        print("Token deleted.")
    else:
        print("Token configured." if store.load() else "No token configured.")


async def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Metra Departures Helper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List all lines
  metra-config lines

  # List stops of a line
  metra-config stops BNSF

  # Show the next departures for the saved configuration
  metra-config departures

  # Store the realtime API token (prompts when omitted)
  metra-config token set
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("lines", help="List lines of the schedule")

    stops_parser = subparsers.add_parser("stops", help="List stops of a line")
    stops_parser.add_argument("line_id", help="Line ID (e.g., BNSF)")

    departures_parser = subparsers.add_parser("departures", help="Show next departures")
    departures_parser.add_argument("--slot", help="Slot ID to show instead of the active one")

    token_parser = subparsers.add_parser("token", help="Manage the realtime API token")
    token_parser.add_argument("action", choices=["set", "delete", "status"])
    token_parser.add_argument("token", nargs="?", help="Token value (for 'set')")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = AppConfig()
    try:
        if args.command == "lines":
            await list_lines(config)
        elif args.command == "stops":
            await list_stops(config, args.line_id)
        elif args.command == "departures":
            await show_departures(config, slot_id=args.slot)
        elif args.command == "token":
            manage_token(config, args.action, args.token)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)
    except DepartureSourceError as e:
        print(f"Error: {DepartureFormatter(config).format_error(e.to_details())}", file=sys.stderr)
        sys.exit(1)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
