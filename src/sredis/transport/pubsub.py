""" Receive published messages on a connection that has subscribed to one
    or more channels. Subscribing is an ordinary command, for example::

        sredis.cmd(connection, 'SUBSCRIBE', 'news')

    after which the server pushes one array reply per published message.
    Everything here runs on the caller's thread; a slow handler delays the
    next message.
"""

from __future__ import annotations

from typing import Callable, Iterator, Optional

from ..protocol import fields
from ..protocol.message import Array, PubSubMessage
from .connection import FOREVER, Connection


# Return this from a receive_all() handler to stop the loop.
STOP = False


def try_receive(connection: Connection, timeout: Optional[float] = 1) -> Optional[PubSubMessage]:
    """ Wait up to *timeout* seconds for a reply. Return it as a
        :class:`PubSubMessage` if it is a published message; return None if
        the wait timed out or the reply was anything else, such as a
        subscribe confirmation. Retrying is up to the caller.
    """

    reply = connection.await_receive(timeout)

    if not isinstance(reply, Array) or reply.is_nil:
        return None
    if len(reply) < 3 or reply[0] != fields.MESSAGE:
        return None

    return PubSubMessage.from_array(reply)


def receive(connection: Connection) -> PubSubMessage:
    """ Block until a published message arrives, skipping other replies.
    """

    while True:
        message = try_receive(connection, FOREVER)
        if message is not None:
            return message


def listen(connection: Connection) -> Iterator[PubSubMessage]:
    """ Yield published messages as they arrive. Nothing is read from the
        socket until the consumer asks for the next message, so breaking
        out of the loop leaves the connection with nothing half-read.
    """

    while True:
        yield receive(connection)


def receive_all(connection: Connection, handler: Callable[[PubSubMessage], object]) -> None:
    """ Pass every published message to *handler* until it returns
        :data:`STOP`. Receive errors propagate to the caller.
    """

    for message in listen(connection):
        if handler(message) is STOP:
            break


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
