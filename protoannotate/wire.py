"""
Protobuf wire format primitives.

Wire types, tags, varint and fixed-width consumers, and the decode errors
raised by the annotator. Consumers never raise: they return ``None`` when
the bytes cannot be parsed and leave it to the caller to decide what the
failure means.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

MAX_VARINT_LEN = 10
MIN_FIELD_NUMBER = 1
MAX_FIELD_NUMBER = (1 << 31) - 1


class WireType(IntEnum):
    """The 3-bit wire type carried in the low bits of every tag."""
    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    FIXED32 = 5


WIRE_TYPE_NAMES = {
    WireType.VARINT: "Varint",
    WireType.FIXED32: "Fixed32",
    WireType.FIXED64: "Fixed64",
    WireType.LENGTH_DELIMITED: "Bytes",
    WireType.START_GROUP: "StartGroup",
    WireType.END_GROUP: "EndGroup",
}


def type_name(code: int) -> str:
    """Display name for a wire type code, ``<Unknown>`` for 6 and 7."""
    return WIRE_TYPE_NAMES.get(code, "<Unknown>")


def to_wire_type(code: int) -> Optional[WireType]:
    try:
        return WireType(code)
    except ValueError:
        return None


class DecodeError(ValueError):
    """Base class for every error raised while annotating a stream."""

    def __init__(self, message: str, offset: int = 0):
        super().__init__(message)
        self.offset = offset

    def __str__(self) -> str:
        return f"{self.args[0]} at offset {self.offset}"


class MalformedTag(DecodeError):
    """The tag varint is truncated, overlong, or names an invalid field."""


class MalformedValue(DecodeError):
    """The value cannot be read in full from the remaining bytes."""


class UnknownWireType(DecodeError):
    """The tag's wire type code is not one of the six known types."""

    def __init__(self, wire_type: int, offset: int = 0):
        super().__init__(f"invalid type: {wire_type}", offset)
        self.wire_type = wire_type


@dataclass(frozen=True)
class FieldTag:
    """A decoded tag and the raw bytes it came from."""
    number: int
    wire_type: int
    raw: bytes

    @property
    def type_name(self) -> str:
        return type_name(self.wire_type)


def consume_varint(data: bytes) -> Optional[Tuple[int, int]]:
    """
    Read a base-128 varint from the start of data.

    Returns (value, bytes_consumed), or None if the varint is truncated,
    longer than 10 bytes, or does not fit in 64 bits.
    """
    value = 0
    for i in range(min(len(data), MAX_VARINT_LEN)):
        byte = data[i]
        if i == MAX_VARINT_LEN - 1 and byte > 1:
            return None  # overflows uint64
        value |= (byte & 0x7F) << (7 * i)
        if not (byte & 0x80):
            return value, i + 1
    return None


def consume_fixed32(data: bytes) -> Optional[Tuple[int, int]]:
    if len(data) < 4:
        return None
    return int.from_bytes(data[:4], "little", signed=False), 4


def consume_fixed64(data: bytes) -> Optional[Tuple[int, int]]:
    if len(data) < 8:
        return None
    return int.from_bytes(data[:8], "little", signed=False), 8


def consume_bytes(data: bytes) -> Optional[Tuple[bytes, int]]:
    """
    Read a length-prefixed payload.

    Returns (payload, bytes_consumed) where bytes_consumed covers both the
    length prefix and the payload, or None if either is truncated.
    """
    prefix = consume_varint(data)
    if prefix is None:
        return None
    length, n = prefix
    if length > len(data) - n:
        return None
    return data[n:n + length], n + length


def consume_tag(data: bytes) -> Optional[FieldTag]:
    """Read a tag, rejecting field numbers outside 1 .. 2**31 - 1."""
    decoded = consume_varint(data)
    if decoded is None:
        return None
    key, n = decoded
    number = key >> 3
    if number < MIN_FIELD_NUMBER or number > MAX_FIELD_NUMBER:
        return None
    return FieldTag(number=number, wire_type=key & 0x07, raw=bytes(data[:n]))


def hex_bytes(data: bytes) -> str:
    """Lowercase hex octets separated by single spaces."""
    return " ".join(f"{b:02x}" for b in data)
