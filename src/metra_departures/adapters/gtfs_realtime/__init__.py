"""GTFS-Realtime wire-format decoding."""

from metra_departures.adapters.gtfs_realtime.feed_parser import parse_feed
from metra_departures.adapters.gtfs_realtime.wire_reader import (
    TruncatedMessageError,
    WireReader,
    encode_varint,
)

__all__ = ["TruncatedMessageError", "WireReader", "encode_varint", "parse_feed"]
