"""Serialize commands to, and parse replies from, the RESP wire format.

Commands always go out as an array of bulk strings:

    *<argc>\\r\\n
    $<length>\\r\\n<argument bytes>\\r\\n     (once per argument)

Replies are a type tag, a line, and for bulk strings an exact byte count:

    +<status>\\r\\n
    -<error>\\r\\n
    :<integer>\\r\\n
    $<length>\\r\\n<length bytes>\\r\\n      ($-1 for nil)
    *<count>\\r\\n<count elements>          (*-1 for an absent array)

Nothing here performs I/O; :func:`decode` pulls bytes from any reader
offering ``read_line()`` and ``read_exact(n)``.
"""

from __future__ import annotations

from typing import Iterable, List, Union

from ..transport.base import ProtocolError
from . import fields
from .message import Array, BulkString, Error, Integer, Response, Status


Argument = Union[bytes, bytearray, memoryview, str, int, float]


def _as_bytes(argument: Argument) -> bytes:

    if isinstance(argument, bytes):
        return argument
    if isinstance(argument, (bytearray, memoryview)):
        return bytes(argument)
    if isinstance(argument, str):
        return argument.encode("utf-8")
    if isinstance(argument, (int, float)) and not isinstance(argument, bool):
        return str(argument).encode("utf-8")

    raise TypeError("command arguments must be bytes, str or numbers, not "
                    + type(argument).__name__)


def encode(command: Iterable[Argument]) -> bytes:
    """Serialize *command* into a single buffer ready for one write."""

    arguments = [_as_bytes(argument) for argument in command]

    if not arguments:
        raise ValueError("cannot encode an empty command")

    parts: List[bytes] = [b"*%d\r\n" % len(arguments)]
    for argument in arguments:
        parts.append(b"$%d\r\n" % len(argument))
        parts.append(argument)
        parts.append(fields.CRLF)

    return b"".join(parts)


def _number(line: bytes) -> int:
    digits = line[1:]
    if digits[:1] in (b"-", b"+"):
        digits = digits[1:]

    # int() alone would also take whitespace and underscores.
    if not digits.isdigit():
        raise ProtocolError(f"malformed length or number in reply line: {line!r}")

    return int(line[1:])


def _read_bulk(reader, line: bytes) -> BulkString:
    length = _number(line)

    if length == fields.NIL_LENGTH:
        return BulkString(None)
    if length < 0:
        raise ProtocolError(f"invalid bulk length: {line!r}")

    data = reader.read_exact(length + 2)
    if data[-2:] != fields.CRLF:
        raise ProtocolError(f"bulk string of length {length} not terminated by CRLF")

    return BulkString(data[:-2])


def _read_array(reader, line: bytes) -> Array:
    count = _number(line)

    if count == fields.NIL_LENGTH:
        return Array(None)
    if count < 0:
        raise ProtocolError(f"invalid array length: {line!r}")

    items = []
    for _index in range(count):
        element = reader.read_line()
        tag = element[:1]

        if tag == fields.INTEGER:
            items.append(_number(element))
        elif tag == fields.BULK:
            items.append(_read_bulk(reader, element).data)
        else:
            raise ProtocolError(f"invalid array element: {element!r}")

    return Array(tuple(items))


def decode(reader) -> Response:
    """Read exactly one reply from *reader* and return it as a Response."""

    line = reader.read_line()
    tag = line[:1]

    if tag == fields.STATUS:
        return Status(line[1:].decode("utf-8", "surrogateescape"))
    if tag == fields.ERROR:
        return Error(line[1:].decode("utf-8", "surrogateescape"))
    if tag == fields.INTEGER:
        return Integer(_number(line))
    if tag == fields.BULK:
        return _read_bulk(reader, line)
    if tag == fields.ARRAY:
        return _read_array(reader, line)

    if tag == b"":
        raise ProtocolError("empty reply line")
    raise ProtocolError(f"unknown reply type {tag!r} in line {line!r}")


class _BufferReader:
    """Reader over an in-memory buffer, see :func:`decode_bytes`."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.offset = 0

    def read_line(self) -> bytes:
        end = self.data.find(fields.CRLF, self.offset)
        if end == -1:
            raise ProtocolError("truncated reply: missing CRLF")
        line = self.data[self.offset:end]
        self.offset = end + 2
        return line

    def read_exact(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise ProtocolError(f"truncated reply: wanted {size} bytes")
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk


def decode_bytes(data: bytes) -> Response:
    """Decode one complete reply held in *data*; leftovers are an error."""

    reader = _BufferReader(data)
    response = decode(reader)

    if reader.offset != len(reader.data):
        raise ProtocolError(f"{len(reader.data) - reader.offset} unexpected trailing bytes")

    return response
