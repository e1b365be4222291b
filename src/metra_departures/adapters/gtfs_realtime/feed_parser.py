"""GTFS-Realtime trip-updates parser.

Walks a ``FeedMessage`` and extracts only the fields used for filtering and
display. Field numbers follow the GTFS-Realtime protobuf definition.
"""

import logging

from metra_departures.adapters.gtfs_realtime.wire_reader import (
    TruncatedMessageError,
    WireReader,
    to_signed64,
)
from metra_departures.domain.models.feed import (
    FeedEntity,
    StopTimeEvent,
    StopTimeUpdate,
    TripDescriptor,
    TripUpdate,
)

logger = logging.getLogger(__name__)

# FeedMessage
FEED_ENTITY = 2
# FeedEntity
ENTITY_ID = 1
ENTITY_TRIP_UPDATE = 3
# TripUpdate
TRIP_UPDATE_TRIP = 1
TRIP_UPDATE_STOP_TIME_UPDATE = 2
# TripDescriptor
TRIP_ID = 1
TRIP_ROUTE_ID = 5
TRIP_DIRECTION_ID = 6
# StopTimeUpdate
STU_STOP_SEQUENCE = 1
STU_ARRIVAL = 2
STU_DEPARTURE = 3
STU_STOP_ID = 4
# StopTimeEvent
EVENT_DELAY = 1
EVENT_TIME = 2


def parse_feed(data: bytes) -> list[FeedEntity]:
    """Decode a feed into its entities, in feed order.

    A malformed entity is dropped and decoding continues with the next one.

    Raises:
        TruncatedMessageError: The top-level message itself is malformed.
    """
    reader = WireReader(data)
    entities: list[FeedEntity] = []
    dropped = 0
    while (tag := reader.next_tag()) is not None:
        field_number, wire_type = tag
        if field_number != FEED_ENTITY:
            reader.skip(wire_type)
            continue
        payload = reader.read_bytes()
        try:
            entities.append(_parse_entity(payload))
        except TruncatedMessageError as e:
            dropped += 1
            logger.debug(f"Dropping malformed feed entity: {e}")
    if dropped:
        logger.warning(f"Dropped {dropped} malformed entities, kept {len(entities)}")
    return entities


def _parse_entity(data: bytes) -> FeedEntity:
    reader = WireReader(data)
    entity_id = ""
    trip_update = None
    while (tag := reader.next_tag()) is not None:
        field_number, wire_type = tag
        if field_number == ENTITY_ID:
            entity_id = reader.read_string()
        elif field_number == ENTITY_TRIP_UPDATE:
            trip_update = _parse_trip_update(reader.read_bytes())
        else:
            reader.skip(wire_type)
    return FeedEntity(id=entity_id, trip_update=trip_update)


def _parse_trip_update(data: bytes) -> TripUpdate:
    reader = WireReader(data)
    trip = TripDescriptor()
    stop_time_updates: list[StopTimeUpdate] = []
    while (tag := reader.next_tag()) is not None:
        field_number, wire_type = tag
        if field_number == TRIP_UPDATE_TRIP:
            trip = _parse_trip_descriptor(reader.read_bytes())
        elif field_number == TRIP_UPDATE_STOP_TIME_UPDATE:
            stop_time_updates.append(_parse_stop_time_update(reader.read_bytes()))
        else:
            reader.skip(wire_type)
    return TripUpdate(trip=trip, stop_time_updates=tuple(stop_time_updates))


def _parse_trip_descriptor(data: bytes) -> TripDescriptor:
    reader = WireReader(data)
    trip_id = route_id = None
    direction_id = None
    while (tag := reader.next_tag()) is not None:
        field_number, wire_type = tag
        if field_number == TRIP_ID:
            trip_id = reader.read_string()
        elif field_number == TRIP_ROUTE_ID:
            route_id = reader.read_string()
        elif field_number == TRIP_DIRECTION_ID:
            direction_id = reader.read_varint()
        else:
            reader.skip(wire_type)
    return TripDescriptor(trip_id=trip_id, route_id=route_id, direction_id=direction_id)


def _parse_stop_time_update(data: bytes) -> StopTimeUpdate:
    reader = WireReader(data)
    stop_sequence = None
    stop_id = None
    arrival = departure = None
    while (tag := reader.next_tag()) is not None:
        field_number, wire_type = tag
        if field_number == STU_STOP_SEQUENCE:
            stop_sequence = reader.read_varint()
        elif field_number == STU_ARRIVAL:
            arrival = _parse_stop_time_event(reader.read_bytes())
        elif field_number == STU_DEPARTURE:
            departure = _parse_stop_time_event(reader.read_bytes())
        elif field_number == STU_STOP_ID:
            stop_id = reader.read_string()
        else:
            reader.skip(wire_type)
    return StopTimeUpdate(
        stop_sequence=stop_sequence, stop_id=stop_id, arrival=arrival, departure=departure
    )


def _parse_stop_time_event(data: bytes) -> StopTimeEvent:
    reader = WireReader(data)
    delay = time = None
    while (tag := reader.next_tag()) is not None:
        field_number, wire_type = tag
        if field_number == EVENT_DELAY:
            delay = to_signed64(reader.read_varint())
        elif field_number == EVENT_TIME:
            time = to_signed64(reader.read_varint())
        else:
            reader.skip(wire_type)
    return StopTimeEvent(delay=delay, time=time)
