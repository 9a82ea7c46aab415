import shutil
import socket
import subprocess
import tempfile
import threading
import time

import pytest

import sredis
from sredis.protocol import wire
from sredis.transport.stream import Stream


def default_responder(command):
    """ Minimal server behaviour: enough for the client's own commands plus
        ECHO, which is handy for round trips.
    """

    verb = command[0].upper()

    if verb == b'PING':
        return b'+PONG\r\n'
    if verb == b'ECHO':
        return b'$%d\r\n%s\r\n' % (len(command[1]), command[1])
    return b'+OK\r\n'


class ScriptedServer:
    """ A tiny TCP server on localhost. Every command received is recorded
        in *commands* and answered with whatever *responder* returns for it;
        a None reply sends nothing.
    """

    def __init__(self, responder=default_responder):

        self.responder = responder
        self.commands = list()
        self.accepted = 0
        self.clients = list()
        self.shutdown = False

        self.listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.listener.bind(('127.0.0.1', 0))
        self.listener.listen(8)
        self.listener.settimeout(0.05)
        self.host, self.port = self.listener.getsockname()

        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()


    def run(self):

        while self.shutdown == False:
            try:
                client, _address = self.listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return

            client.settimeout(None)
            self.accepted += 1
            self.clients.append(client)

            thread = threading.Thread(target=self.serve, args=(client,))
            thread.daemon = True
            thread.start()


    def serve(self, client):

        stream = Stream(client)

        while self.shutdown == False:
            try:
                request = wire.decode(stream)
            except sredis.TransportError:
                break

            command = tuple(request.items)
            self.commands.append(command)

            reply = self.responder(command)
            if reply is not None:
                try:
                    client.sendall(reply)
                except OSError:
                    break

            if command[0].upper() == b'QUIT':
                break

        stream.close()


    def drop_clients(self):
        """ Close every accepted client socket from the server side.
        """

        for client in self.clients:
            try:
                client.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            client.close()


    def close(self):
        self.shutdown = True
        self.listener.close()
        self.drop_clients()
        self.thread.join(1)


@pytest.fixture
def server():
    scripted = ScriptedServer()
    yield scripted
    scripted.close()


@pytest.fixture
def pair():
    """ A connection whose far end is a plain socket driven by the test.
    """

    near, far = socket.socketpair()
    connection = sredis.Connection(Stream(near), 'socketpair', 0)

    yield connection, far

    connection.stream.close()
    far.close()


@pytest.fixture
def cache():
    cache = sredis.ConnectionCache()
    yield cache
    cache.clear()


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(('127.0.0.1', 0))
        return probe.getsockname()[1]


def _wait_ready(host, port, timeout=8.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            with socket.create_connection((host, port), timeout=0.5):
                return
        except OSError:
            time.sleep(0.05)
    raise RuntimeError('redis-server did not become ready on %s:%d' % (host, port))


@pytest.fixture(scope='session')
def redis_server():
    """ A throwaway redis-server for the live tests, skipped if none is
        installed.
    """

    executable = shutil.which('redis-server')
    if executable is None:
        pytest.skip('redis-server not found')

    port = _free_port()
    workdir = tempfile.mkdtemp(prefix='sredis-test-')

    arguments = list()
    arguments.append(executable)
    arguments.extend(('--port', str(port)))
    arguments.extend(('--bind', '127.0.0.1'))
    arguments.extend(('--save', ''))
    arguments.extend(('--appendonly', 'no'))
    arguments.extend(('--dir', workdir))

    pipe = subprocess.DEVNULL
    process = subprocess.Popen(arguments, stdout=pipe, stderr=pipe)

    try:
        _wait_ready('127.0.0.1', port)
        yield ('127.0.0.1', port)
    finally:
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait(timeout=2)
        shutil.rmtree(workdir, ignore_errors=True)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
