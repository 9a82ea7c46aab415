""" Python implementation of a socket-level RESP client. This includes
    opening plain and persistent connections, issuing commands and reading
    their typed replies, pipelining, and receiving pub/sub messages.

    Command-specific helpers are deliberately absent: every command is a
    list of words passed to :func:`cmd` or :func:`cmd_array`.
"""

# Utility components.

from . import config

# Submodules used by multiple other components.

from . import protocol
from . import transport

from .protocol.message import (
    Response,
    Status,
    Error,
    Integer,
    BulkString,
    Array,
    PubSubMessage,
)
from .transport.base import (
    TransportError,
    TransportConnectionError,
    TransportTimeout,
    ProtocolError,
)

from .transport import opener as _opener
from .transport import pipeline as _pipeline
from .transport import pubsub as _pubsub

# Primary public-facing interfaces.

from .transport.connection import Connection, FOREVER
from .transport.opener import ConnectionCache, default_cache
from .transport.pipeline import Pipeline
from .transport.pubsub import STOP

connect = _opener.connect
pconnect = _opener.pconnect


def close(connection):
    """ Send QUIT and close *connection*.
    """

    connection.close()


def cmd(connection, *words):
    """ Run the command made of *words* and return its reply, or None if
        *connection* is pipelining.
    """

    if not words:
        raise ValueError('cmd() needs a connection and at least one command word')

    return cmd_array(connection, words)


def cmd_array(connection, words):
    """ Same as :func:`cmd`, with the command passed as one sequence.
    """

    return connection.send_and_receive(words)


def write_cmd(connection, words):
    """ Send a command without reading its reply.
    """

    connection.send(words)


pipeline_start = _pipeline.start
pipeline_end = _pipeline.end
pipeline_end_discard = _pipeline.end_discard

await_resp = Connection.await_receive

pubsub_try_receive = _pubsub.try_receive
pubsub_receive = _pubsub.receive
pubsub_listen = _pubsub.listen
pubsub_receive_all = _pubsub.receive_all


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
