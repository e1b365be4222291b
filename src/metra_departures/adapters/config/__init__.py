"""Configuration adapters."""

from metra_departures.adapters.config.app_config import AppConfig
from metra_departures.adapters.config.route_configuration_loader import RouteConfigurationLoader
from metra_departures.adapters.config.route_configuration_store import JsonRouteConfigurationStore

__all__ = ["AppConfig", "JsonRouteConfigurationStore", "RouteConfigurationLoader"]
