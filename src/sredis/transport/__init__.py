"""Socket transport: connections, pipelining and pub/sub on top of them.

Only the exceptions are imported here so that :mod:`sredis.protocol` can
raise them without pulling in the socket layer.
"""

from .base import (
    TransportError,
    TransportTimeout,
    TransportConnectionError,
    ProtocolError,
)
