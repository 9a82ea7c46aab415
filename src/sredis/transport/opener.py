"""Open connections, ephemeral or persistent.

A persistent connection keeps its socket in a :class:`ConnectionCache`
after the caller is done with it, and the next :func:`open` for the same
host and port picks it up again. The previous owner may have left that
socket subscribed to pub/sub channels, where ordinary commands are
rejected; :func:`open` probes a reused socket and tries to bring it back to
normal mode before handing it out.
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import Dict, Optional, Tuple

from .. import config
from ..protocol import fields
from .base import TransportConnectionError, TransportError, TransportTimeout
from .connection import Connection
from .stream import Stream


logger = logging.getLogger(__name__)


class ConnectionCache:
    """Persistent sockets, keyed by (host, port). The cache itself is
    thread-safe; the connections it yields are not.
    """

    def __init__(self):
        self._streams: Dict[Tuple[str, int], Stream] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._streams)

    def __contains__(self, key):
        host, port = key
        with self._lock:
            return (host, int(port)) in self._streams

    def get(self, host: str, port: int) -> Optional[Stream]:
        """Return the live cached stream for *host*:*port*, if any. A
        stream found closed is dropped.
        """

        key = (host, int(port))
        with self._lock:
            stream = self._streams.get(key)
            if stream is not None and stream.closed:
                del self._streams[key]
                stream = None
            return stream

    def put(self, host: str, port: int, stream: Stream) -> None:
        with self._lock:
            self._streams[(host, int(port))] = stream

    def discard(self, host: str, port: int, stream: Optional[Stream] = None) -> None:
        """Forget the stream cached for *host*:*port*. If *stream* is given,
        only forget it if it is still the one cached. The socket itself is
        left alone.
        """

        key = (host, int(port))
        with self._lock:
            cached = self._streams.get(key)
            if cached is None:
                return
            if stream is not None and cached is not stream:
                return
            del self._streams[key]

    def clear(self) -> None:
        """Close and forget every cached socket."""

        with self._lock:
            streams = list(self._streams.values())
            self._streams.clear()

        for stream in streams:
            stream.close()


default_cache = ConnectionCache()


def _connect_socket(host: str, port: int, timeout: float) -> socket.socket:

    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except socket.timeout as exc:
        raise TransportTimeout(f"connection error: timed out after {timeout} sec connecting to {host}:{port}") from exc
    except OSError as exc:
        raise TransportConnectionError.from_os_error("connection error", exc) from exc

    # The connect timeout must not leak into reads; await_receive() applies
    # its own deadline.
    sock.settimeout(None)
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    return sock


def _recover(connection: Connection) -> bool:
    """Try to take a reused persistent connection out of pub/sub mode.
    Return False if it should be abandoned.
    """

    reply = connection.send_and_receive([fields.PING])
    if not reply.is_error:
        return True

    logger.debug("PING on reused connection to %s:%s failed (%s), unsubscribing",
                 connection.host, connection.port, reply.value)

    reply = connection.send_and_receive([fields.UNSUBSCRIBE])
    return not reply.is_error


def open(persistent: bool, host: str = None, port: int = None, timeout: float = None,
         cache: ConnectionCache = None) -> Connection:
    """Return a new :class:`Connection` to *host*:*port*.

    With *persistent* set, a socket cached for the same address in *cache*
    (the module-level :data:`default_cache` if None) is reused when
    possible, and a newly opened one is cached. *timeout* bounds the
    connect, in seconds.
    """

    if host is None:
        host = config.host
    if port is None:
        port = config.port
    if timeout is None:
        timeout = config.connect_timeout
    port = int(port)

    if not persistent:
        stream = Stream(_connect_socket(host, port, timeout))
        logger.debug("connected to %s:%d", host, port)
        return Connection(stream, host, port)

    if cache is None:
        cache = default_cache

    stream = cache.get(host, port)
    if stream is None:
        stream = Stream(_connect_socket(host, port, timeout))
        cache.put(host, port, stream)
        logger.debug("connected to %s:%d (persistent)", host, port)
        return Connection(stream, host, port, persistent=True, cache=cache)

    logger.debug("reusing persistent connection to %s:%d", host, port)
    connection = Connection(stream, host, port, persistent=True, cache=cache)

    if stream.position == 0:
        return connection

    try:
        recovered = _recover(connection)
    except TransportError as exc:
        # The socket died while parked in the cache. Replace it once; the
        # replacement has never been used, so it is not probed again.
        logger.warning("persistent connection to %s:%d is dead (%s), reconnecting",
                       host, port, exc)
        cache.discard(host, port, stream)
        stream.close()
        return open(True, host, port, timeout, cache)

    if recovered:
        return connection

    logger.warning("persistent connection to %s:%d is stuck, using a fresh non-persistent one",
                   host, port)
    cache.discard(host, port, stream)
    stream.close()
    return open(False, host, port, timeout)


def connect(host: str = None, port: int = None, timeout: float = None) -> Connection:
    return open(False, host, port, timeout)


def pconnect(host: str = None, port: int = None, timeout: float = None,
             cache: ConnectionCache = None) -> Connection:
    return open(True, host, port, timeout, cache)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
