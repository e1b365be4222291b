"""Domain models for Metra departures."""

from metra_departures.domain.models.departures_snapshot import DeparturesSnapshot
from metra_departures.domain.models.error_details import ErrorDetails
from metra_departures.domain.models.feed import (
    FeedEntity,
    StopTimeEvent,
    StopTimeUpdate,
    TripDescriptor,
    TripUpdate,
)
from metra_departures.domain.models.fetched_response import FetchedResponse
from metra_departures.domain.models.route_configuration import RouteConfiguration
from metra_departures.domain.models.route_slot import RouteSlot
from metra_departures.domain.models.schedule import (
    CalendarException,
    ExceptionType,
    Route,
    ServiceCalendar,
    Stop,
    StopTimeEntry,
    Trip,
)
from metra_departures.domain.models.train_departure import TrainDeparture

__all__ = [
    "CalendarException",
    "DeparturesSnapshot",
    "ErrorDetails",
    "ExceptionType",
    "FeedEntity",
    "FetchedResponse",
    "Route",
    "RouteConfiguration",
    "RouteSlot",
    "ServiceCalendar",
    "Stop",
    "StopTimeEntry",
    "StopTimeEvent",
    "StopTimeUpdate",
    "TrainDeparture",
    "Trip",
    "TripDescriptor",
    "TripUpdate",
]
