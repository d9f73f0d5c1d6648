""" The queue provider: one named queue, exposed over a ZeroMQ PUB socket
    for outbound messages and a SUB socket for inbound messages.
"""

import collections
import logging
import threading

from . import codec
from . import config
from . import loop as loopmodule
from . import transport
from .errors import DecodeError, MissingEmitter

logger = logging.getLogger(__name__)


class QueueProvider:
    """ Publish and receive messages on a single queue. The *emitter* is an
        event sink owned by the caller, typically a
        :class:`zqueue.emitter.EventEmitter`; the provider emits 'ready',
        'error', and 'message' events on it, and never does anything else
        with it. The *options* identify the queue, and may be a
        :class:`zqueue.config.Options` instance, a dictionary, or an object
        with matching attributes.

        Construction never blocks. Both sockets are requested from the
        *factory* immediately, first the 'pub' role and then the 'sub'
        role; binding the publish socket is deferred to the next turn of
        the *loop*. Until that bind succeeds, published messages are held
        in order, and subscribe requests are held until readiness.

        Nothing that goes wrong after construction is raised to the caller:
        bind failures, send failures, and undecodable inbound payloads are
        all emitted as 'error' events.

        :ivar ready: True once the publish socket is bound.
        :ivar failed: True if the publish socket could not be bound; the
            provider will never become ready, and further publishes are
            dropped.
        :ivar closed: True once :func:`unsubscribe` has been called.
        :ivar pending: Messages published before the provider was ready.
    """

    def __init__(self, emitter, options, factory=None, loop=None):

        if emitter is None:
            raise MissingEmitter()

        options = config.coerce(options)

        if factory is None:
            factory = transport.socket

        if loop is None:
            loop = loopmodule.default

        self.emitter = emitter
        self.options = options
        self.queue_name = options.queue_name
        self.address = options.address
        self.loop = loop

        self.ready = False
        self.failed = False
        self.closed = False
        self.shutdown = False
        self.pending = collections.deque()
        self.deferred = list()

        # Re-entrant: handlers for events emitted while the lock is held
        # (send errors during the drain) are allowed to call publish().

        self.lock = threading.RLock()

        self.publish_socket = factory('pub')
        self.subscribe_socket = factory('sub')

        self.loop.defer(self._bind)


    def __enter__(self):
        return self


    def __exit__(self, *exc_info):
        self.close()


    def __repr__(self):
        return '<QueueProvider %s at %s>' % (self.queue_name, self.address)


    def _bind(self):

        with self.lock:
            if self.shutdown == True:
                return

        logger.debug('binding %s for queue %s', self.address, self.queue_name)
        self.publish_socket.bind(self.address, self._bound)


    def _bound(self, error=None):
        """ Completion callback for the publish socket bind.
        """

        if error is not None:
            with self.lock:
                if self.shutdown == True:
                    # Closed while the bind was in flight; nobody is
                    # waiting on this provider any longer.
                    logger.debug('bind to %s failed after close: %s', self.address, error)
                    return

                self.failed = True
                discarded = len(self.pending)
                self.pending.clear()

            logger.debug('bind to %s failed: %s', self.address, error)
            if discarded:
                logger.warning('discarded %d unsent messages for %s', discarded, self.queue_name)

            self.emitter.emit('error', error)
            return

        with self.lock:
            if self.ready == True or self.shutdown == True:
                return
            self.ready = True

        logger.debug('queue %s is ready', self.queue_name)
        self.emitter.emit('ready')

        # Anything published while the 'ready' handlers ran was appended to
        # the pending queue, since it was not yet empty; those messages go
        # out here, after the ones published earlier.

        with self.lock:
            count = len(self.pending)
            while self.pending:
                message = self.pending.popleft()
                self._send(message)

            deferred = self.deferred
            self.deferred = list()

        if count:
            logger.debug('sent %d pending messages for %s', count, self.queue_name)

        for method in deferred:
            method()


    def publish(self, message):
        """ Send *message* to every subscriber of this queue. There is no
            confirmation; a failure to send is emitted as an 'error' event.
            Byte buffers are sent as base64, strings as-is, and anything
            else as JSON.
        """

        with self.lock:
            if self.shutdown == True:
                logger.warning('publish to closed queue %s ignored', self.queue_name)
                return

            if self.failed == True:
                logger.warning('publish to unavailable queue %s ignored', self.queue_name)
                return

            if self.ready == False or self.pending:
                self.pending.append(message)
                return

            self._send(message)


    def _send(self, message):

        try:
            payload = codec.encode(message)
            self.publish_socket.send([self.queue_name, payload])
        except Exception as e:
            logger.debug('send to %s failed: %s', self.queue_name, e)
            self.emitter.emit('error', e)


    def subscribe(self):
        """ Start emitting 'message' events for anything published on this
            queue. If the provider is not ready yet the subscription takes
            effect once it is. Each call connects and subscribes again; it
            is up to the caller to only call this once.
        """

        with self.lock:
            if self.closed == True:
                logger.warning('subscribe to closed queue %s ignored', self.queue_name)
                return

            if self.ready == False:
                self.deferred.append(self._subscribe)
                return

        self._subscribe()


    def _subscribe(self):

        if self.closed == True:
            return

        socket = self.subscribe_socket

        try:
            socket.on('message', self._incoming)
            socket.connect(self.address)
            socket.subscribe(self.queue_name)
        except Exception as e:
            logger.debug('subscribe to %s failed: %s', self.queue_name, e)
            self.emitter.emit('error', e)
            return

        logger.debug('subscribed to %s at %s', self.queue_name, self.address)


    def _incoming(self, payload, topic=None):
        """ Listener for inbound messages on the subscribe socket.
        """

        # ZeroMQ subscriptions are prefix matches; a subscription to 'queue'
        # also receives 'queue2'. Only exact matches belong to this queue.

        if topic is not None and topic != self.queue_name:
            return

        try:
            message = codec.decode(payload, self.options.encoding)
        except DecodeError as e:
            self.emitter.emit('error', e)
            return

        self.emitter.emit('message', message)


    def unsubscribe(self):
        """ Stop emitting 'message' events and close the subscribe socket.
            Only the first call has any effect; there is no way to subscribe
            again afterwards.
        """

        with self.lock:
            if self.closed == True:
                return

            self.closed = True
            self.deferred = [method for method in self.deferred if method != self._subscribe]

        self.subscribe_socket.remove_all_listeners('message')
        self.subscribe_socket.close()
        logger.debug('unsubscribed from %s', self.queue_name)


    def close(self):
        """ Unsubscribe, discard any messages still waiting for readiness,
            and close the publish socket. Safe to call more than once.
        """

        self.unsubscribe()

        with self.lock:
            if self.shutdown == True:
                return

            self.shutdown = True
            discarded = len(self.pending)
            self.pending.clear()

        if discarded:
            logger.warning('discarded %d unsent messages for %s', discarded, self.queue_name)

        self.publish_socket.close()


# end of class QueueProvider


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
