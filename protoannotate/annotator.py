"""
Annotated hex dump of a protobuf wire stream.

Every field produces two lines: the tag bytes with the field number and
wire type, then the value bytes with the decoded value. Group markers
indent the lines that follow them.

    >>> import io
    >>> out = io.StringIO()
    >>> annotate(bytes.fromhex("089601"), out)
    >>> print(out.getvalue(), end="")
    08 // field id=1 type=Varint
    96 01 // 150
"""

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional, TextIO, Union

from .wire import (
    DecodeError,
    FieldTag,
    MalformedTag,
    MalformedValue,
    UnknownWireType,
    WireType,
    consume_bytes,
    consume_fixed32,
    consume_fixed64,
    consume_tag,
    consume_varint,
    hex_bytes,
    to_wire_type,
)

log = logging.getLogger(__name__)

NON_UTF8_PLACEHOLDER = "<non-utf8 byte array>"

Sink = Union[BinaryIO, TextIO]


@dataclass
class AnnotatorOptions:
    """Rendering knobs for an Annotator."""
    indent_width: int = 2
    # Keep the depth counter at or above zero on unmatched End Group markers.
    clamp_depth: bool = False
    non_utf8_placeholder: str = NON_UTF8_PLACEHOLDER


class Annotator:
    """
    Writes an annotated dump of one or more wire streams to a sink.

    The nesting depth lives on the instance, so separate annotators can run
    side by side without sharing anything. Each call to annotate() starts
    back at depth zero.
    """

    def __init__(self, sink: Sink, options: Optional[AnnotatorOptions] = None):
        self.sink = sink
        self.options = options or AnnotatorOptions()
        self.depth = 0
        self._text_sink = isinstance(sink, io.TextIOBase)

    def annotate(self, data: bytes) -> int:
        """
        Annotate every field in data.

        Returns the number of fields written. Raises the first DecodeError
        met; lines written before it stay in the sink.
        """
        self.depth = 0
        view = memoryview(data)
        offset = 0
        fields = 0

        while offset < len(view):
            tag = self.read_tag(view[offset:], offset)
            if isinstance(tag, DecodeError):
                raise tag
            value_offset = offset + len(tag.raw)

            n = self.render_value(tag.wire_type, view[value_offset:], value_offset)
            if isinstance(n, DecodeError):
                raise n

            log.debug(
                "field %d (%s) at offset %d, %d tag + %d value bytes",
                tag.number, tag.type_name, offset, len(tag.raw), n,
            )
            offset = value_offset + n
            fields += 1

        log.debug("annotated %d fields in %d bytes, final depth %d", fields, offset, self.depth)
        return fields

    def read_tag(self, data: bytes, offset: int = 0) -> Union[FieldTag, MalformedTag]:
        """Read and print the tag at the start of data."""
        indent = self._indent()
        tag = consume_tag(data)
        if tag is None:
            self._write(f"{indent}// error: unknown tag: {hex_bytes(data[:4])}\n")
            return MalformedTag("unknown tag", offset)

        self._write(f"{indent}{hex_bytes(tag.raw)} // field id={tag.number} type={tag.type_name}\n")
        return tag

    def render_value(self, wire_type: int, data: bytes, offset: int = 0) -> Union[int, DecodeError]:
        """
        Decode and print the value that follows a tag.

        Returns the number of bytes consumed, or the error describing why
        the value could not be read.
        """
        indent = self._indent()
        typ = to_wire_type(wire_type)

        if typ is WireType.VARINT:
            decoded = consume_varint(data)
            if decoded is None:
                return MalformedValue("failed to parse varint", offset)
            value, n = decoded
            text = str(value)
        elif typ is WireType.FIXED32:
            decoded = consume_fixed32(data)
            if decoded is None:
                return MalformedValue("failed to parse fixed32", offset)
            value, n = decoded
            text = str(value)
        elif typ is WireType.FIXED64:
            decoded = consume_fixed64(data)
            if decoded is None:
                return MalformedValue("failed to parse fixed64", offset)
            value, n = decoded
            text = str(value)
        elif typ is WireType.LENGTH_DELIMITED:
            decoded = consume_bytes(data)
            if decoded is None:
                return MalformedValue("failed to parse bytes", offset)
            payload, n = decoded
            try:
                text = str(payload, "utf-8")
            except UnicodeDecodeError:
                text = self.options.non_utf8_placeholder
        elif typ is WireType.START_GROUP:
            self.depth += 1
            n = 0
            text = "Start Group"
        elif typ is WireType.END_GROUP:
            self.depth -= 1
            if self.options.clamp_depth and self.depth < 0:
                self.depth = 0
            n = 0
            text = "End Group"
        else:
            return UnknownWireType(wire_type, offset)

        self._write(f"{indent}{hex_bytes(data[:n])} // {text}\n")
        return n

    def _indent(self) -> str:
        return " " * (self.options.indent_width * max(self.depth, 0))

    def _write(self, line: str):
        if self._text_sink:
            self.sink.write(line)
        else:
            self.sink.write(line.encode("utf-8"))


def annotate(data: bytes, sink: Sink, options: Optional[AnnotatorOptions] = None) -> None:
    """Write the annotated dump of data to sink, raising DecodeError on bad input."""
    Annotator(sink, options).annotate(data)
