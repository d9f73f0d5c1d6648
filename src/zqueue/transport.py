"""ZeroMQ sockets for the queue provider.

:func:`socket` is the default socket factory. The returned :class:`Socket`
wraps a single ZeroMQ PUB or SUB socket behind the small surface the
provider relies on: bind with a completion callback, connect, subscribe,
send a multipart frame, close, and a ``'message'`` event for inbound
frames.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional, Union

import zmq

from .emitter import EventEmitter

logger = logging.getLogger(__name__)

zmq_context = zmq.Context()

roles = {
    'pub': zmq.PUB,
    'sub': zmq.SUB,
}


class Socket(EventEmitter):
    """One ZeroMQ socket. SUB sockets run a receiver thread once subscribed,
    emitting ``'message'`` with ``(payload, topic)`` for every frame.
    """

    poll_timeout = 100      # milliseconds

    def __init__(self, role: str, context: Optional[zmq.Context] = None):
        EventEmitter.__init__(self)

        try:
            kind = roles[role]
        except KeyError:
            raise ValueError(f"unknown socket role: {role!r}") from None

        if context is None:
            context = zmq_context

        self.role = role
        self.socket = context.socket(kind)
        self.socket.setsockopt(zmq.LINGER, 0)

        # Multipart sends from different threads would otherwise interleave
        # their frames on the wire.
        self.socket_lock = threading.Lock()

        self.closed = False
        self.shutdown = False
        self.thread: Optional[threading.Thread] = None

    def bind(self, address: str, callback: Callable[[Optional[Exception]], None]) -> None:
        """Bind to *address*, then invoke *callback* with None on success or
        with the :class:`zmq.ZMQError` on failure.
        """

        try:
            self.socket.bind(address)
        except zmq.ZMQError as exc:
            logger.debug("%s bind to %s failed: %s", self.role, address, exc)
            error: Optional[Exception] = exc
        else:
            logger.debug("%s bound to %s", self.role, address)
            error = None

        callback(error)

    def connect(self, address: str) -> None:
        self.socket.connect(address)
        logger.debug("%s connected to %s", self.role, address)

    def subscribe(self, topic: Union[str, bytes]) -> None:
        if isinstance(topic, str):
            topic = topic.encode()

        self.socket.setsockopt(zmq.SUBSCRIBE, topic)

        if self.thread is None:
            self._poll_flush()
            self._start_receiver()

    def _poll_flush(self, timeout: float = 0.01) -> None:
        # A short poll after subscribing helps avoid the PUB/SUB "slow
        # joiner" case where early broadcasts never arrive.
        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN | zmq.POLLOUT)
        poller.poll(timeout * 1000)

    def send(self, frame: Iterable[Union[str, bytes]]) -> None:
        parts = [part.encode() if isinstance(part, str) else bytes(part) for part in frame]

        with self.socket_lock:
            self.socket.send_multipart(parts)

    def close(self) -> None:
        if self.closed:
            return

        self.closed = True
        self.shutdown = True

        thread = self.thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

        self.socket.close(linger=0)
        logger.debug("%s socket closed", self.role)

    def _start_receiver(self) -> None:
        if self.thread is not None:
            return

        self.thread = threading.Thread(target=self.run, name=f"zqueue.Socket-{id(self)}")
        self.thread.daemon = True
        self.thread.start()

    def run(self) -> None:
        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)

        while not self.shutdown:
            try:
                sockets = dict(poller.poll(self.poll_timeout))
                if self.socket in sockets:
                    parts = self.socket.recv_multipart(zmq.NOBLOCK)
                else:
                    continue
            except zmq.Again:
                continue
            except zmq.ZMQError:
                if self.shutdown:
                    break
                logger.exception("%s receiver stopped", self.role)
                break

            self._incoming(parts)

    def _incoming(self, parts) -> None:
        if len(parts) < 2:
            logger.debug("dropping %d-part frame", len(parts))
            return

        topic = parts[0].decode('utf-8', errors='replace')
        self.emit('message', parts[1], topic)


def socket(role: str) -> Socket:
    """Default socket factory: a new :class:`Socket` for *role*, either
    ``'pub'`` or ``'sub'``.
    """

    return Socket(role)
