"""Route configuration persistence port."""

from typing import Protocol

from metra_departures.domain.models.route_configuration import RouteConfiguration


class RouteConfigurationStore(Protocol):
    """Port for loading and saving the route configuration."""

    def load(self) -> RouteConfiguration:
        """Load the saved configuration, migrating older schemas."""
        ...

    def save(self, configuration: RouteConfiguration) -> None:
        """Persist the configuration."""
        ...
