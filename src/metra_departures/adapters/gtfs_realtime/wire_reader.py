"""Minimal protobuf wire-format reader.

Supports exactly what the GTFS-Realtime trip-updates walk needs: tags,
varints, length-delimited fields and skipping of fixed-width fields.
"""

from __future__ import annotations

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LENGTH_DELIMITED = 2
WIRE_FIXED32 = 5

_MAX_VARINT_BYTES = 10
_UINT64_MASK = (1 << 64) - 1


class TruncatedMessageError(ValueError):
    """The buffer ended in the middle of a field, or a field cannot be skipped."""


def encode_varint(value: int) -> bytes:
    """Encode an integer as a varint. Negative values use their 64-bit two's complement."""
    value &= _UINT64_MASK
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def to_signed64(value: int) -> int:
    """Reinterpret an unsigned 64-bit varint value as a signed integer.

    int32 and int64 fields are written as sign-extended 64-bit varints (not
    zig-zag), so -1 arrives as 0xFFFFFFFFFFFFFFFF.
    """
    value &= _UINT64_MASK
    return value - (1 << 64) if value & (1 << 63) else value


class WireReader:
    """Sequential reader over one encoded message."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._pos = 0

    @property
    def is_at_end(self) -> bool:
        return self._pos >= len(self._data)

    def read_varint(self) -> int:
        result = 0
        shift = 0
        for _ in range(_MAX_VARINT_BYTES):
            if self._pos >= len(self._data):
                break
            byte = self._data[self._pos]
            self._pos += 1
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result & _UINT64_MASK
            shift += 7
        raise TruncatedMessageError(f"Unterminated varint at offset {self._pos}")

    def read_bytes(self) -> bytes:
        length = self.read_varint()
        end = self._pos + length
        if end > len(self._data):
            raise TruncatedMessageError(
                f"Length-delimited field of {length} bytes overruns buffer at offset {self._pos}"
            )
        chunk = self._data[self._pos : end].tobytes()
        self._pos = end
        return chunk

    def read_string(self) -> str:
        return self.read_bytes().decode("utf-8", errors="replace")

    def next_tag(self) -> tuple[int, int] | None:
        """Return ``(field_number, wire_type)`` of the next field, or None at the end."""
        if self.is_at_end:
            return None
        tag = self.read_varint()
        return tag >> 3, tag & 0x7

    def skip(self, wire_type: int) -> None:
        """Skip the value of a field we do not care about."""
        if wire_type == WIRE_VARINT:
            self.read_varint()
        elif wire_type == WIRE_FIXED64:
            self._advance(8)
        elif wire_type == WIRE_LENGTH_DELIMITED:
            self.read_bytes()
        elif wire_type == WIRE_FIXED32:
            self._advance(4)
        else:
            # Groups (3, 4) are deprecated and 6/7 are undefined
            raise TruncatedMessageError(f"Cannot skip wire type {wire_type}")

    def _advance(self, count: int) -> None:
        if self._pos + count > len(self._data):
            raise TruncatedMessageError(f"Fixed-width field overruns buffer at offset {self._pos}")
        self._pos += count
