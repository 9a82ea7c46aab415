"""Transport exceptions.

Everything the client raises about the wire derives from
:class:`TransportError`. Error replies from the server are not exceptions;
they arrive as :class:`sredis.protocol.message.Error` values.
"""

from __future__ import annotations

from typing import Optional


class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportConnectionError(TransportError):
    """The connection could not be established, or failed while in use.

    When the failure came from the operating system, *errno* and *strerror*
    carry its code and message.
    """

    def __init__(self, message: str, errno: Optional[int] = None, strerror: Optional[str] = None):
        super().__init__(message)
        self.errno = errno
        self.strerror = strerror

    @classmethod
    def from_os_error(cls, prefix: str, exc: OSError) -> TransportConnectionError:
        strerror = exc.strerror or str(exc)
        if exc.errno is None:
            message = f"{prefix}: {strerror}"
        else:
            message = f"{prefix}: {exc.errno}: {strerror}"
        return cls(message, exc.errno, strerror)


class TransportTimeout(TransportConnectionError):
    """A connection attempt did not complete in time."""


class ProtocolError(TransportError):
    """A reply could not be parsed. The stream is out of sync and the
    connection must not be used again.
    """
