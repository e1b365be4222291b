"""Metra GTFS-Realtime departure repository adapter."""

import logging
from dataclasses import replace
from datetime import UTC, datetime, timedelta

from metra_departures.adapters.gtfs_realtime.feed_parser import parse_feed
from metra_departures.adapters.gtfs_realtime.wire_reader import TruncatedMessageError
from metra_departures.adapters.metra_api.constants import (
    DEPARTED_GRACE_SECONDS,
    FEED_TIMEOUT_SECONDS,
    METRA_FEED_URL,
    TOKEN_PARAM,
)
from metra_departures.domain.errors import DecodingError, HttpError, NoTokenError
from metra_departures.domain.models.feed import FeedEntity, StopTimeEvent
from metra_departures.domain.models.train_departure import TrainDeparture
from metra_departures.domain.ports.byte_fetcher import ByteFetcher
from metra_departures.domain.ports.departure_repository import RealtimeDepartureRepository

logger = logging.getLogger(__name__)


class MetraRealtimeDepartureRepository(RealtimeDepartureRepository):
    """Live departures from the Metra trip-updates feed."""

    def __init__(
        self,
        fetcher: ByteFetcher,
        feed_url: str = METRA_FEED_URL,
        timeout: float = FEED_TIMEOUT_SECONDS,
        grace_seconds: int = DEPARTED_GRACE_SECONDS,
    ) -> None:
        """Initialize the repository.

        Args:
            fetcher: Transport used for the feed request.
            feed_url: Trip-updates endpoint.
            timeout: Request timeout in seconds.
            grace_seconds: Departures whose effective time lies further in
                the past than this are dropped.
        """
        self._fetcher = fetcher
        self._feed_url = feed_url
        self._timeout = timeout
        self._grace = timedelta(seconds=grace_seconds)

    async def get_departures(
        self,
        token: str | None,
        line_id: str,
        stop_id: str,
        destination_stop_id: str | None,
        direction_id: int,
        max_trains: int,
        now: datetime | None = None,
    ) -> list[TrainDeparture]:
        """Fetch the feed and return the next live departures from ``stop_id``.

        Raises:
            NoTokenError: ``token`` is missing; no request is made.
            TransportError: The request did not complete.
            HttpError: The feed answered with a non-2xx status.
            DecodingError: The body is not a valid feed.
        """
        if not token:
            raise NoTokenError()

        response = await self._fetcher.fetch(
            self._feed_url, params={TOKEN_PARAM: token}, timeout_seconds=self._timeout
        )
        if not response.ok:
            logger.warning(f"Realtime feed returned HTTP {response.status}")
            raise HttpError(response.status)

        try:
            entities = parse_feed(response.body)
        except TruncatedMessageError as e:
            raise DecodingError(f"Malformed realtime feed: {e}") from e

        if now is None:
            now = datetime.now(UTC)
        cutoff = now - self._grace

        departures = []
        for entity in entities:
            departure = self._to_departure(
                entity, line_id, stop_id, destination_stop_id, direction_id
            )
            if departure is not None and departure.effective_time > cutoff:
                departures.append(departure)

        departures.sort(key=lambda d: d.effective_time)
        logger.debug(f"Realtime feed: {len(entities)} entities, {len(departures)} matching")
        return [
            replace(d, minutes_until=max(0, int((d.effective_time - now).total_seconds() // 60)))
            for d in departures[:max_trains]
        ]

    @staticmethod
    def _to_departure(
        entity: FeedEntity,
        line_id: str,
        stop_id: str,
        destination_stop_id: str | None,
        direction_id: int,
    ) -> TrainDeparture | None:
        """Match one entity against the filters. Returns None when it does not qualify."""
        trip_update = entity.trip_update
        if trip_update is None:
            return None
        trip = trip_update.trip
        if trip.route_id is not None and trip.route_id != line_id:
            return None
        if (
            destination_stop_id is None
            and trip.direction_id is not None
            and trip.direction_id != direction_id
        ):
            return None

        updates = trip_update.stop_time_updates
        stop_ids = [u.stop_id for u in updates]
        if stop_id not in stop_ids:
            return None
        position = stop_ids.index(stop_id)
        if destination_stop_id is not None and (
            destination_stop_id not in stop_ids or stop_ids.index(destination_stop_id) <= position
        ):
            return None

        event: StopTimeEvent | None = updates[position].departure or updates[position].arrival
        if event is None or event.time is None:
            return None

        return TrainDeparture(
            id=entity.id,
            trip_id=trip.trip_id or entity.id,
            scheduled_time=datetime.fromtimestamp(event.time, tz=UTC),
            delay_seconds=event.delay or 0,
            minutes_until=0,
            is_realtime=True,
        )
