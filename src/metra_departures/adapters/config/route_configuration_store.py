"""JSON file persistence for the route configuration."""

import json
import logging
import os
import tempfile
from pathlib import Path

from metra_departures.adapters.config.route_configuration_loader import RouteConfigurationLoader
from metra_departures.domain.models.route_configuration import RouteConfiguration
from metra_departures.domain.ports.route_configuration_store import RouteConfigurationStore

logger = logging.getLogger(__name__)


class JsonRouteConfigurationStore(RouteConfigurationStore):
    """Saves the route configuration as JSON; falls back to a seed when nothing is saved."""

    def __init__(self, path: str | Path, seed: RouteConfiguration | None = None) -> None:
        """Initialize the store.

        Args:
            path: JSON file to read and write.
            seed: Configuration returned while nothing has been saved yet.
                Defaults to the built-in configuration.
        """
        self._path = Path(path)
        self._seed = seed

    def load(self) -> RouteConfiguration:
        """Load the saved configuration, migrating the single-stop schema if needed."""
        if not self._path.exists():
            logger.debug(f"No saved route configuration at {self._path}, using seed")
            return self._seed or RouteConfigurationLoader.default()

        with open(self._path, encoding="utf-8") as f:
            data = json.load(f)

        needs_migration = isinstance(data, dict) and "slots" not in data
        configuration = RouteConfigurationLoader.load_from_data(data)
        if needs_migration:
            # Persist the migrated form so slot ids stay stable across loads
            self.save(configuration)
        return configuration

    def save(self, configuration: RouteConfiguration) -> None:
        """Write the configuration atomically (temporary file, then rename)."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(RouteConfigurationLoader.to_data(configuration), indent=2)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".route-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info(f"Saved route configuration with {len(configuration.slots)} slot(s)")
