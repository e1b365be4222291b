"""Route configuration loader."""

import logging
import uuid
from typing import Any

from metra_departures.adapters.config.app_config import AppConfig
from metra_departures.domain.models.route_configuration import RouteConfiguration
from metra_departures.domain.models.route_slot import RouteSlot, minutes_of_day

logger = logging.getLogger(__name__)

DEFAULT_LINE_ID = "BNSF"
DEFAULT_MAX_TRAINS = 5
FULL_DAY_START = "00:00"
FULL_DAY_END = "24:00"
LEGACY_KEYS = ("stop_id", "stopId", "stop_name", "stopName", "direction_id", "directionId")


def _get(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key. Saved files may use snake_case or camelCase."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class RouteConfigurationLoader:
    """Builds route configurations from plain data (TOML tables, JSON documents)."""

    @staticmethod
    def default() -> RouteConfiguration:
        """Built-in configuration used when nothing has been configured."""
        return RouteConfiguration(
            line_id=DEFAULT_LINE_ID,
            max_trains=DEFAULT_MAX_TRAINS,
            slots=(
                RouteSlot(
                    id=str(uuid.uuid5(uuid.NAMESPACE_URL, "metra-departures/default-slot")),
                    start_time=FULL_DAY_START,
                    end_time=FULL_DAY_END,
                    departure_stop_id="NAPERVILLE",
                    departure_stop_name="Naperville",
                    direction_id=1,
                ),
            ),
        )

    @staticmethod
    def load_slot_from_data(slot_data: dict[str, Any]) -> RouteSlot | None:
        """Load a single slot from a data dict. Returns None for unusable entries."""
        if not isinstance(slot_data, dict):
            return None

        stop_id = _optional_str(_get(slot_data, "departure_stop_id", "departureStopId"))
        if not stop_id:
            return None

        start_time = str(_get(slot_data, "start_time", "startTime", default=FULL_DAY_START))
        end_time = str(_get(slot_data, "end_time", "endTime", default=FULL_DAY_END))
        try:
            minutes_of_day(start_time)
            minutes_of_day(end_time)
        except ValueError:
            logger.warning(
                f"Skipping slot for {stop_id} with invalid window {start_time}-{end_time}"
            )
            return None

        stop_name = _optional_str(_get(slot_data, "departure_stop_name", "departureStopName"))
        destination_id = _optional_str(
            _get(slot_data, "destination_stop_id", "destinationStopId")
        )
        destination_name = _optional_str(
            _get(slot_data, "destination_stop_name", "destinationStopName")
        )
        slot_id = _optional_str(_get(slot_data, "id")) or str(uuid.uuid4())

        return RouteSlot(
            id=slot_id,
            start_time=start_time,
            end_time=end_time,
            departure_stop_id=stop_id,
            departure_stop_name=stop_name or stop_id,
            direction_id=_as_int(_get(slot_data, "direction_id", "directionId"), 0),
            destination_stop_id=destination_id,
            destination_stop_name=(destination_name or destination_id) if destination_id else None,
        )

    @staticmethod
    def migrate_legacy(data: dict[str, Any]) -> dict[str, Any]:
        """Wrap the single stop/direction of the old schema into one full-day slot."""
        if "slots" in data or _get(data, "stop_id", "stopId") is None:
            return data
        logger.info("Migrating single-stop route configuration to slot schema")
        migrated = {key: value for key, value in data.items() if key not in LEGACY_KEYS}
        migrated["slots"] = [
            {
                "start_time": FULL_DAY_START,
                "end_time": FULL_DAY_END,
                "departure_stop_id": _get(data, "stop_id", "stopId"),
                "departure_stop_name": _get(data, "stop_name", "stopName"),
                "direction_id": _get(data, "direction_id", "directionId", default=0),
            }
        ]
        return migrated

    @staticmethod
    def load_from_data(data: dict[str, Any]) -> RouteConfiguration:
        """Load a route configuration from a data dict, migrating older schemas.

        Raises ValueError if the line id is missing or max_trains is not positive.
        """
        if not isinstance(data, dict):
            raise ValueError("Route configuration must be a table/object")
        data = RouteConfigurationLoader.migrate_legacy(data)

        line_id = _optional_str(_get(data, "line_id", "lineId"))
        if not line_id:
            raise ValueError("Route configuration must have a 'line_id'")
        max_trains = _as_int(_get(data, "max_trains", "maxTrains"), DEFAULT_MAX_TRAINS)

        slots_data = data.get("slots", [])
        if not isinstance(slots_data, list):
            raise ValueError("Route configuration 'slots' must be a list")
        slots: list[RouteSlot] = []
        for slot_data in slots_data:
            slot = RouteConfigurationLoader.load_slot_from_data(slot_data)
            if slot:
                slots.append(slot)

        return RouteConfiguration(line_id=line_id, max_trains=max_trains, slots=tuple(slots))

    @staticmethod
    def to_data(configuration: RouteConfiguration) -> dict[str, Any]:
        """Serialize a configuration into the current (slot) schema."""
        return {
            "line_id": configuration.line_id,
            "max_trains": configuration.max_trains,
            "slots": [
                {
                    "id": slot.id,
                    "start_time": slot.start_time,
                    "end_time": slot.end_time,
                    "departure_stop_id": slot.departure_stop_id,
                    "departure_stop_name": slot.departure_stop_name,
                    "destination_stop_id": slot.destination_stop_id,
                    "destination_stop_name": slot.destination_stop_name,
                    "direction_id": slot.direction_id,
                }
                for slot in configuration.slots
            ],
        }

    @staticmethod
    def load(config: AppConfig) -> RouteConfiguration:
        """Load the seed route configuration from the app config's TOML file."""
        return RouteConfigurationLoader.load_from_data(config.get_route_config())
