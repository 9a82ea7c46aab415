"""
sredis Protocol Layer
=====================

Pure data and framing: what a reply looks like once parsed
(:mod:`.message`), the fixed vocabulary of tags and client-issued commands
(:mod:`.fields`), and the RESP encoder/decoder (:mod:`.wire`).

Nothing in this package opens sockets. The decoder reads from any object
with ``read_line()`` and ``read_exact(n)``; the socket-backed one lives in
:mod:`sredis.transport.stream`.
"""

from . import fields
from . import message
from . import wire

from .message import (
    Response,
    Status,
    Error,
    Integer,
    BulkString,
    Array,
    PubSubMessage,
)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
