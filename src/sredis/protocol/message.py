""" Typed representations of the replies a server can send. Every decoded
    reply is exactly one of :class:`Status`, :class:`Error`,
    :class:`Integer`, :class:`BulkString` or :class:`Array`; all of them
    share the :class:`Response` base so callers can inspect ``.value``,
    ``.is_error`` and ``.is_nil`` without caring which kind arrived.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


# Values allowed inside an Array reply: integers, bulk strings, nil bulks.
Element = Union[int, bytes, None]


class Response(ABC):
    """ Common base for all reply types. Instances are immutable, and always
        true in a boolean context, even an empty or absent Array; test
        :attr:`is_nil` to tell absent replies apart.
    """

    __slots__ = ()

    def __bool__(self) -> bool:
        return True

    @property
    @abstractmethod
    def value(self):
        """ The reply payload. """

    @property
    def is_error(self) -> bool:
        return False

    @property
    def is_nil(self) -> bool:
        return False


@dataclass(frozen=True)
class Status(Response):
    """ A short confirmation, such as ``OK`` or ``PONG``. """

    text: str

    @property
    def value(self) -> str:
        return self.text


@dataclass(frozen=True)
class Error(Response):
    """ An error reported by the server. This is an ordinary reply, not a
        transport failure; the connection remains usable.
    """

    text: str

    @property
    def value(self) -> str:
        return self.text

    @property
    def is_error(self) -> bool:
        return True


@dataclass(frozen=True)
class Integer(Response):

    number: int

    @property
    def value(self) -> int:
        return self.number


@dataclass(frozen=True)
class BulkString(Response):
    """ A length-prefixed, binary-safe byte string. A *data* of None is the
        nil marker sent for missing keys.
    """

    data: Optional[bytes]

    @property
    def value(self) -> Optional[bytes]:
        return self.data

    @property
    def is_nil(self) -> bool:
        return self.data is None


@dataclass(frozen=True)
class Array(Response):
    """ A flat sequence of integers, byte strings and nils. An *items* of
        None is the absent array, which is not the same thing as an empty
        one.
    """

    items: Optional[Tuple[Element, ...]]

    @property
    def value(self) -> Optional[Tuple[Element, ...]]:
        return self.items

    @property
    def is_nil(self) -> bool:
        return self.items is None

    def __len__(self):
        return 0 if self.items is None else len(self.items)

    def __getitem__(self, index):
        if self.items is None:
            raise IndexError('absent array has no elements')
        return self.items[index]


@dataclass(frozen=True)
class PubSubMessage:
    """ A message published to a subscribed channel. The raw payload bytes
        are kept in *data*; *payload* is the same bytes decoded as UTF-8,
        with undecodable bytes preserved as surrogates.
    """

    channel: str
    payload: str
    data: bytes = field(default=b'', compare=False, repr=False)

    @classmethod
    def from_array(cls, reply: Array) -> PubSubMessage:
        channel = reply[1]
        data = reply[2]

        if channel is None:
            channel = b''
        if data is None:
            data = b''
        if isinstance(channel, int):
            channel = str(channel).encode()
        if isinstance(data, int):
            data = str(data).encode()

        return cls(_text(channel), _text(data), data)


def _text(raw: bytes) -> str:
    return raw.decode('utf-8', 'surrogateescape')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
