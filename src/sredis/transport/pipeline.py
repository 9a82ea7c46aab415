""" Pipelining: send a batch of commands without waiting, then read all of
    their replies at once. Replies come back in the order the commands were
    sent, so the batch is drained first-in, first-out.
"""

from __future__ import annotations

from typing import List

from .. import config
from ..protocol.message import Response
from .connection import Connection


def start(connection: Connection) -> None:
    """ Defer reading replies on *connection* until :func:`end` or
        :func:`end_discard`.
    """

    connection.pipelining = True
    connection.pending_count = 0


def end(connection: Connection) -> List[Response]:
    """ Stop pipelining and return every deferred reply, in order.
    """

    connection.pipelining = False
    replies = list()

    while connection.pending_count > 0:
        replies.append(connection.receive())
        connection.pending_count -= 1

    return replies


def end_discard(connection: Connection) -> None:
    """ Stop pipelining and read every deferred reply without keeping it.
        Leaving them unread would hand stale replies to the next command.
    """

    connection.pipelining = False

    while connection.pending_count > 0:
        connection.receive()
        connection.pending_count -= 1


class Pipeline:
    """ Context manager wrapping :func:`start` and :func:`end`. The replies
        are available as :attr:`results` after the block exits normally.
        If the block raises, the deferred replies are drained and dropped
        so the connection stays in sync; if they do not all arrive within
        the QUIT timeout the connection is closed instead.

        ::

            with Pipeline(connection) as pipe:
                connection.send(['SET', 'a', '1'])
                connection.send(['GET', 'a'])
            pipe.results
    """

    def __init__(self, connection: Connection):
        self.connection = connection
        self.results: List[Response] = list()

    def __enter__(self) -> Pipeline:
        start(self.connection)
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:

        if exc_type is None:
            self.results = end(self.connection)
            return

        if self.connection.broken or self.connection.closed:
            self.connection.pipelining = False
            return

        # The original exception is the one worth reporting.
        if not self.connection.drain(config.quit_timeout):
            self.connection.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
