"""A single client connection and its blocking send/receive primitives.

A :class:`Connection` has no internal locking: it must only ever be used
from one call site at a time. Persistent connections are shared by key
over time through :class:`sredis.transport.opener.ConnectionCache`, never
concurrently.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from .. import config
from ..protocol import fields
from ..protocol import wire
from ..protocol.message import Response
from .base import TransportConnectionError, TransportError
from .stream import Stream

if TYPE_CHECKING:
    from .opener import ConnectionCache


logger = logging.getLogger(__name__)

# Sentinel timeout for await_receive(): block until a reply arrives.
FOREVER = -1


class Connection:
    """Client side of one RESP connection.

    :ivar pipelining: True while replies are being deferred, see
        :mod:`sredis.transport.pipeline`.
    :ivar pending_count: Commands sent while pipelining whose replies have
        not been read yet.
    :ivar broken: Set after any transport or decode failure; the reply
        framing can no longer be trusted and the connection refuses
        further use.
    """

    def __init__(self, stream: Stream, host: str = None, port: int = None,
                 persistent: bool = False, cache: Optional[ConnectionCache] = None):
        self.stream = stream
        self.host = host
        self.port = port
        self.persistent = persistent
        self.cache = cache

        self.pipelining = False
        self.pending_count = 0
        self.broken = False
        self.released = False

    def __repr__(self):
        kind = "persistent " if self.persistent else ""
        state = "closed" if self.closed else ("broken" if self.broken else "open")
        return f"<{kind}Connection {self.host}:{self.port} {state}>"

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release()

    @property
    def closed(self) -> bool:
        return self.released or self.stream.closed

    def _check(self) -> None:
        if self.closed:
            raise TransportConnectionError("connection is closed")
        if self.broken:
            raise TransportConnectionError("connection is unusable after an earlier failure")

    def send(self, command: Iterable) -> None:
        """Write *command*. While pipelining, the reply is owed and counted
        in :attr:`pending_count`; otherwise the caller must read it next.
        """

        self._check()
        data = wire.encode(command)

        try:
            self.stream.write(data)
        except TransportError:
            self.broken = True
            raise

        if self.pipelining:
            self.pending_count += 1

    def send_and_receive(self, command: Iterable) -> Optional[Response]:
        """Send *command* and return its reply, or None while pipelining
        (the reply is collected later by the pipeline).
        """

        self.send(command)
        if self.pipelining:
            return None
        return self.receive()

    def receive(self) -> Response:
        """Block, with no timeout, until one complete reply is read."""

        self._check()
        try:
            return wire.decode(self.stream)
        except TransportError:
            self.broken = True
            raise

    def await_receive(self, timeout: Optional[float] = 1) -> Optional[Response]:
        """Wait up to *timeout* seconds for a reply and return it, or return
        None if nothing arrived in time. A *timeout* of -1 or None waits
        forever. A timeout never consumes any part of a reply; once input
        is ready the whole reply is read without a deadline.
        """

        if timeout is None or timeout == FOREVER:
            return self.receive()
        if timeout < 0:
            raise ValueError(f"timeout must be -1 or non-negative, not {timeout!r}")

        self._check()
        try:
            ready = self.stream.wait_readable(timeout)
        except TransportError:
            self.broken = True
            raise

        if not ready:
            return None
        return self.receive()

    def close(self) -> None:
        """Send QUIT, ignoring the outcome, and release the socket. A
        persistent connection is also dropped from its cache. Calling this
        on a closed or broken connection only releases what is left.
        """

        if self.closed:
            return

        if not self.broken:
            self.pipelining = False
            try:
                self.stream.write(wire.encode([fields.QUIT]))
                if self.stream.wait_readable(config.quit_timeout):
                    self.stream.read_line()
            except TransportError as exc:
                logger.debug("QUIT on %s:%s failed: %s", self.host, self.port, exc)

        if self.persistent and self.cache is not None:
            self.cache.discard(self.host, self.port, self.stream)

        self.stream.close()
        logger.debug("closed connection to %s:%s", self.host, self.port)

    def drain(self, timeout: Optional[float]) -> bool:
        """Stop pipelining and read off every reply still owed, waiting up
        to *timeout* seconds for each. Returns False, leaving the
        connection broken, if a reply did not arrive in time or could not
        be read.
        """

        self.pipelining = False
        try:
            while self.pending_count > 0:
                if self.await_receive(timeout) is None:
                    logger.debug("%s:%s still owes %d replies",
                                 self.host, self.port, self.pending_count)
                    self.broken = True
                    return False
                self.pending_count -= 1
        except TransportError as exc:
            logger.debug("draining %s:%s failed: %s", self.host, self.port, exc)
            return False

        return True

    def release(self) -> None:
        """Give up this handle. An ephemeral or broken connection is
        closed. A healthy persistent one stays open in its cache for the
        next :func:`sredis.pconnect`, after any replies still owed by a
        pipeline have been read off the socket. A reply that takes longer
        than the QUIT timeout to arrive leaves the socket out of step, so
        it is closed instead.
        """

        if self.closed:
            return

        if not self.persistent or self.broken:
            self.close()
            return

        if not self.drain(config.quit_timeout):
            self.close()
            return

        self.released = True


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
