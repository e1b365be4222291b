"""Main entry point for the Metra departures application."""

import asyncio
import logging
import sys

import aiohttp

from metra_departures.adapters.config import AppConfig
from metra_departures.adapters.console import ConsoleDisplayAdapter
from metra_departures.cli import build_configuration_store, build_reconciler, build_schedule_store

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


async def main() -> None:
    """Main application entry point."""
    config = AppConfig()

    # Load the route configuration (saved file, else TOML seed, else built-in default)
    try:
        configuration_store = build_configuration_store(config)
        configuration = configuration_store.load()
    except (ValueError, OSError) as e:
        logger.error(f"Invalid route configuration: {e}")
        sys.exit(1)

    logger.info(
        f"Monitoring line {configuration.line_id} with {len(configuration.slots)} slot(s), "
        f"up to {configuration.max_trains} trains"
    )
    if not configuration.slots:
        logger.warning("No slots configured; departures cannot be shown until one is added.")

    # Create aiohttp session for efficient HTTP connections
    async with aiohttp.ClientSession() as session:
        schedule_store = build_schedule_store(config, session)
        reconciler = build_reconciler(config, session, schedule_store)

        display_adapter = ConsoleDisplayAdapter(
            reconciler,
            configuration_store,
            config,
            input_stream=sys.stdin,
            on_reload=schedule_store.invalidate,
        )

        try:
            await display_adapter.start()
        finally:
            logger.info("Shutting down...")
            await display_adapter.stop()


def run() -> None:
    """Synchronous entry point for the application command."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted.")


if __name__ == "__main__":
    run()
