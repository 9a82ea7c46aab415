""" End-to-end tests against a real redis-server, started by the
    redis_server fixture in conftest.py. Skipped if redis-server is not
    installed.
"""

import os
import threading

import pytest

import sredis
from sredis.protocol.message import Array, BulkString, Integer, Status


@pytest.fixture
def connection(redis_server):

    host, port = redis_server
    connection = sredis.connect(host, port)
    sredis.cmd(connection, 'FLUSHALL')

    yield connection

    connection.close()


def test_set_get(connection):

    assert sredis.cmd(connection, 'SET', 'foo', 'bar') == Status('OK')
    assert sredis.cmd(connection, 'GET', 'foo') == BulkString(b'bar')
    assert sredis.cmd(connection, 'GET', 'missing') == BulkString(None)


def test_error_reply(connection):

    sredis.cmd(connection, 'SET', 'foo', 'bar')

    reply = sredis.cmd(connection, 'LPUSH', 'foo', 'x')
    assert reply.is_error
    assert reply.text.startswith('WRONGTYPE')

    # An error reply leaves the connection usable.
    assert sredis.cmd(connection, 'PING') == Status('PONG')


def test_binary_values(connection):

    value = os.urandom(4096) + b'\r\n\x00\r\n'

    sredis.cmd(connection, 'SET', b'bin\x00key', value)
    assert sredis.cmd(connection, 'GET', b'bin\x00key') == BulkString(value)


def test_arrays(connection):

    sredis.cmd(connection, 'RPUSH', 'list', 'a', 'b', 'c')

    assert sredis.cmd(connection, 'LRANGE', 'list', 0, -1) == Array((b'a', b'b', b'c'))
    assert sredis.cmd(connection, 'LRANGE', 'empty', 0, -1) == Array(())

    sredis.cmd(connection, 'SET', 'one', '1')
    assert sredis.cmd(connection, 'MGET', 'one', 'none') == Array((b'1', None))


def test_pipeline(connection):

    sredis.pipeline_start(connection)
    for index in range(50):
        sredis.cmd(connection, 'INCR', 'counter')
    sredis.cmd(connection, 'GET', 'counter')

    replies = sredis.pipeline_end(connection)

    assert replies[:50] == [Integer(index + 1) for index in range(50)]
    assert replies[50] == BulkString(b'50')


def test_await_does_not_consume(redis_server, connection):

    host, port = redis_server

    sredis.write_cmd(connection, ['BLPOP', 'queue', 0])
    assert sredis.await_resp(connection, 0.1) is None

    with sredis.connect(host, port) as pusher:
        sredis.cmd(pusher, 'RPUSH', 'queue', 'job')

    assert sredis.await_resp(connection, 5) == Array((b'queue', b'job'))


def test_pubsub(redis_server, connection):

    host, port = redis_server

    subscribed = sredis.cmd(connection, 'SUBSCRIBE', 'chan')
    assert subscribed == Array((b'subscribe', b'chan', 1))

    assert sredis.pubsub_try_receive(connection, 0.1) is None

    with sredis.connect(host, port) as publisher:
        assert sredis.cmd(publisher, 'PUBLISH', 'chan', 'hello') == Integer(1)

    message = sredis.pubsub_receive(connection)
    assert message == sredis.PubSubMessage(channel='chan', payload='hello')


def test_pubsub_receive_all(redis_server, connection):

    host, port = redis_server

    sredis.cmd(connection, 'SUBSCRIBE', 'chan')

    def publish():
        with sredis.connect(host, port) as publisher:
            for word in ('one', 'two', 'three', 'four'):
                sredis.cmd(publisher, 'PUBLISH', 'chan', word)

    thread = threading.Thread(target=publish)
    thread.start()

    seen = list()

    def handler(message):
        seen.append(message.payload)
        if message.payload == 'three':
            return sredis.STOP

    sredis.pubsub_receive_all(connection, handler)
    thread.join()

    assert seen == ['one', 'two', 'three']


def test_pconnect(redis_server, cache):

    host, port = redis_server

    with sredis.pconnect(host, port, cache=cache) as first:
        sredis.cmd(first, 'SET', 'kept', 'yes')

    with sredis.pconnect(host, port, cache=cache) as second:
        assert second.stream is first.stream
        assert sredis.cmd(second, 'GET', 'kept') == BulkString(b'yes')

    assert len(cache) == 1


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
