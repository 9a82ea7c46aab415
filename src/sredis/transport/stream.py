"""Buffered byte stream over a connected socket.

The wire decoder mixes line reads (control tokens) with exact byte-count
reads (bulk payloads). Both are served from one receive buffer so that a
single ``recv()`` spanning several replies loses nothing, and so that
:meth:`Stream.wait_readable` can report bytes that have already been
pulled off the socket but not yet decoded.
"""

from __future__ import annotations

import select
import socket
from typing import Optional

from ..protocol import fields
from .base import TransportConnectionError


class Stream:
    """Owns one socket plus its receive buffer.

    *position* counts every byte written to or read from the socket since
    it was opened; a non-zero position means the socket has been used.
    """

    chunk_size = 65536

    def __init__(self, sock: socket.socket):
        self.socket: Optional[socket.socket] = sock
        self._buffer = bytearray()
        self.position = 0

    @property
    def closed(self) -> bool:
        return self.socket is None

    def _sock(self) -> socket.socket:
        if self.socket is None:
            raise TransportConnectionError("stream is closed")
        return self.socket

    def write(self, data: bytes) -> None:
        sock = self._sock()
        try:
            sock.sendall(data)
        except OSError as exc:
            raise TransportConnectionError.from_os_error("write failed", exc) from exc
        self.position += len(data)

    def _fill(self) -> None:
        sock = self._sock()
        try:
            chunk = sock.recv(self.chunk_size)
        except OSError as exc:
            raise TransportConnectionError.from_os_error("read failed", exc) from exc

        if not chunk:
            raise TransportConnectionError("connection closed by server")

        self._buffer.extend(chunk)
        self.position += len(chunk)

    def read_line(self) -> bytes:
        """Return the next line without its CRLF terminator."""

        start = 0
        while True:
            end = self._buffer.find(fields.CRLF, start)
            if end != -1:
                break
            # The CR may be the last byte buffered so far.
            start = max(len(self._buffer) - 1, 0)
            self._fill()

        line = bytes(self._buffer[:end])
        del self._buffer[:end + 2]
        return line

    def read_exact(self, size: int) -> bytes:
        """Return exactly *size* bytes, reading as often as needed."""

        while len(self._buffer) < size:
            self._fill()

        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def wait_readable(self, timeout: Optional[float]) -> bool:
        """Wait up to *timeout* seconds (None: forever) for input.

        Nothing is consumed. Bytes already sitting in the buffer count as
        readable without touching the socket.
        """

        if self._buffer:
            return True

        sock = self._sock()
        try:
            readable, _writable, _errored = select.select([sock], [], [], timeout)
        except OSError as exc:
            raise TransportConnectionError.from_os_error("error while waiting for stream", exc) from exc
        except ValueError as exc:
            # select() refuses a socket whose descriptor is already gone.
            raise TransportConnectionError("error while waiting for stream: " + str(exc)) from exc

        return bool(readable)

    def close(self) -> None:
        sock = self.socket
        if sock is None:
            return

        self.socket = None
        self._buffer.clear()
        try:
            sock.close()
        except OSError:
            pass
