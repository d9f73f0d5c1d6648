import socket
import threading

import pytest
from unittest import mock

import zqueue


class FakeSocket(zqueue.EventEmitter):
    """ Stand-in for a transport socket. The bind completes immediately,
        calling back with the factory's *bind_error*; everything else is
        a mock that records its calls.
    """

    def __init__(self, role, bind_error=None):
        zqueue.EventEmitter.__init__(self)
        self.role = role
        self.bind = mock.Mock(side_effect=lambda address, callback: callback(bind_error))
        self.connect = mock.Mock()
        self.subscribe = mock.Mock()
        self.send = mock.Mock()
        self.close = mock.Mock()


class FakeFactory:

    def __init__(self):
        self.roles = list()
        self.bind_error = None

    def __call__(self, role):
        self.roles.append(role)
        return FakeSocket(role, self.bind_error)


@pytest.fixture
def factory():
    return FakeFactory()


@pytest.fixture
def loop():
    instance = zqueue.loop.Loop()
    yield instance
    instance.stop(timeout=1)


@pytest.fixture
def gate(loop):
    """ Hold the loop until the test sets the returned event, so that
        anything deferred afterwards is guaranteed to run later.
    """

    event = threading.Event()
    loop.defer(event.wait, 5)
    yield event
    event.set()


@pytest.fixture
def options():
    return dict(queue_name='queue', hostname='test', port=1234)


@pytest.fixture
def free_port():
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(('127.0.0.1', 0))
    port = probe.getsockname()[1]
    probe.close()
    return port


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
