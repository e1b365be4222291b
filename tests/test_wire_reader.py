"""Tests for the protobuf wire reader."""

import pytest

from metra_departures.adapters.gtfs_realtime import TruncatedMessageError, WireReader, encode_varint
from metra_departures.adapters.gtfs_realtime.wire_reader import to_signed64


def test_reads_multi_byte_varint() -> None:
    """Given the varint 300, when reading it, then the value is decoded from two bytes."""
    reader = WireReader(b"\xac\x02")

    assert reader.read_varint() == 300
    assert reader.is_at_end


def test_encode_varint_matches_protobuf_encoding() -> None:
    """Given known values, when encoding, then the bytes match the protobuf wire format."""
    assert encode_varint(0) == b"\x00"
    assert encode_varint(1) == b"\x01"
    assert encode_varint(300) == b"\xac\x02"


def test_negative_values_are_ten_byte_twos_complement() -> None:
    """Given -1, when encoding and decoding, then it takes 10 bytes and sign-extends back."""
    encoded = encode_varint(-1)

    assert len(encoded) == 10
    assert to_signed64(WireReader(encoded).read_varint()) == -1


def test_next_tag_splits_field_number_and_wire_type() -> None:
    """Given the tag of field 2 length-delimited, when reading it, then (2, 2) is returned."""
    reader = WireReader(b"\x12\x00")

    assert reader.next_tag() == (2, 2)
    assert reader.read_bytes() == b""
    assert reader.next_tag() is None


def test_read_string_replaces_invalid_utf8() -> None:
    """Given invalid UTF-8, when reading a string, then invalid bytes are replaced."""
    reader = WireReader(b"\x03a\xffb")

    assert reader.read_string() == "a\ufffdb"


@pytest.mark.parametrize(
    ("wire_type", "payload"),
    [
        (0, b"\x96\x01"),
        (1, b"\x00" * 8),
        (2, b"\x03abc"),
        (5, b"\x00" * 4),
    ],
)
def test_skip_consumes_exactly_one_value(wire_type: int, payload: bytes) -> None:
    """Given a value of each skippable wire type, when skipping it, then the next byte is next."""
    reader = WireReader(payload + b"\x08")

    reader.skip(wire_type)

    assert reader.next_tag() == (1, 0)


@pytest.mark.parametrize("wire_type", [3, 4, 6, 7])
def test_unskippable_wire_types_raise(wire_type: int) -> None:
    """Given a group or undefined wire type, when skipping, then TruncatedMessageError is raised."""
    with pytest.raises(TruncatedMessageError):
        WireReader(b"\x00\x00").skip(wire_type)


def test_length_overrunning_buffer_raises() -> None:
    """Given a length prefix beyond the buffer, when reading bytes, then it raises."""
    with pytest.raises(TruncatedMessageError):
        WireReader(b"\x05ab").read_bytes()


def test_unterminated_varint_raises() -> None:
    """Given a varint whose last byte has the continuation bit, when reading, then it raises."""
    with pytest.raises(TruncatedMessageError):
        WireReader(b"\x80\x80").read_varint()


def test_fixed_width_overrun_raises() -> None:
    """Given fewer than 8 bytes, when skipping a 64-bit field, then it raises."""
    with pytest.raises(TruncatedMessageError):
        WireReader(b"\x00\x00\x00").skip(1)
