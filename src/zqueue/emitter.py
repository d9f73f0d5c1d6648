""" A minimal event emitter. An :class:`EventEmitter` is the capability a
    caller hands to a :class:`zqueue.provider.QueueProvider`: the provider
    emits lifecycle and data events on it, the caller registers callbacks
    to receive them. Sockets returned by :mod:`zqueue.transport` are also
    emitters, which is how inbound messages reach the provider.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class _Listener:

    __slots__ = ('callback', 'once')

    def __init__(self, callback, once=False):
        self.callback = callback
        self.once = once


class EventEmitter:
    """ Keep a list of callbacks for each named event, and invoke them in
        registration order when the event is emitted.

        Removing a listener emits a 'removeListener' event, with the event
        name and the removed callback as arguments, once per removed
        callback.

        Emitting 'error' with nobody listening does not raise; the error
        is logged instead, since emits frequently happen on background
        threads where there is no caller to raise to.
    """

    def __init__(self):
        self._events = dict()
        self._events_lock = threading.Lock()


    def on(self, event, callback=None):
        """ Register *callback* to be invoked every time *event* is emitted.
            If no *callback* is given a decorator is returned instead.
        """

        if callback is None:
            def decorator(callback):
                return self.on(event, callback)
            return decorator

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        with self._events_lock:
            try:
                listeners = self._events[event]
            except KeyError:
                listeners = list()
                self._events[event] = listeners

            listeners.append(_Listener(callback))

        return callback

    add_listener = on


    def once(self, event, callback):
        """ Register *callback* to be invoked the next time *event* is
            emitted, and then discarded.
        """

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        with self._events_lock:
            listeners = self._events.setdefault(event, list())
            listeners.append(_Listener(callback, once=True))

        return callback


    def emit(self, event, *args):
        """ Invoke every callback registered for *event* with the supplied
            arguments. Returns True if there were any callbacks.
        """

        with self._events_lock:
            try:
                listeners = self._events[event]
            except KeyError:
                listeners = ()

            listeners = tuple(listeners)
            expired = list()
            for listener in listeners:
                if listener.once:
                    self._events[event].remove(listener)
                    expired.append(listener.callback)

            if event in self._events and not self._events[event]:
                del self._events[event]

        if expired:
            self._removed(event, expired)

        if not listeners:
            if event == 'error':
                error = args[0] if args else None
                if isinstance(error, BaseException):
                    logger.error('unhandled error event: %s', error, exc_info=error)
                else:
                    logger.error('unhandled error event: %r', error)
            return False

        for listener in listeners:
            try:
                listener.callback(*args)
            except Exception:
                logger.exception('%r listener %r raised', event, listener.callback)
                continue

        return True


    def remove_listener(self, event, callback):
        """ Remove the most recently registered instance of *callback* for
            *event*. Nothing happens if it is not registered.
        """

        with self._events_lock:
            try:
                listeners = self._events[event]
            except KeyError:
                return

            for listener in reversed(listeners):
                if listener.callback == callback:
                    listeners.remove(listener)
                    break
            else:
                return

            if not listeners:
                del self._events[event]

        self._removed(event, (callback,))


    def remove_all_listeners(self, event=None):
        """ Remove every callback for *event*, or for every event if no
            *event* is specified. When removing everything, the
            'removeListener' callbacks are removed last, so that they are
            still notified about everything else.
        """

        if event is None:
            with self._events_lock:
                events = [name for name in self._events if name != 'removeListener']

            for name in events:
                self.remove_all_listeners(name)

            with self._events_lock:
                self._events.pop('removeListener', None)

            return

        with self._events_lock:
            try:
                listeners = self._events.pop(event)
            except KeyError:
                return

        self._removed(event, [listener.callback for listener in listeners])


    def _removed(self, event, callbacks):

        if event == 'removeListener':
            return

        for callback in callbacks:
            self.emit('removeListener', event, callback)


    def listeners(self, event):
        """ Return a copy of the callbacks registered for *event*.
        """

        with self._events_lock:
            try:
                listeners = self._events[event]
            except KeyError:
                return list()

            return [listener.callback for listener in listeners]


    def listener_count(self, event):
        return len(self.listeners(event))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
