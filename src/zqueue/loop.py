""" Deferred execution. A :class:`Loop` owns a single background thread that
    invokes deferred calls one at a time, in the order they were deferred.
    Work deferred from a constructor runs on the next turn of the loop,
    after the constructor has returned to its caller.
"""

import atexit
import itertools
import logging
import queue
import threading

logger = logging.getLogger(__name__)

_sequence = itertools.count(1)


class Loop:
    """ Run deferred callables on a dedicated daemon thread. The thread is
        started on the first call to :func:`defer`.
    """

    def __init__(self, name=None):

        if name is None:
            name = 'zqueue.Loop-' + str(next(_sequence))

        self.name = name
        self.shutdown = False
        self.thread = None

        self._queue = queue.SimpleQueue()
        self._start_lock = threading.Lock()


    def defer(self, method, *args):
        """ Arrange for *method* to be invoked with *args* on the loop thread,
            after everything deferred before it.
        """

        if self.shutdown == True:
            raise RuntimeError('loop is stopped: ' + self.name)

        self._queue.put((method, args))
        self._start()


    def _start(self):

        with self._start_lock:
            if self.thread is not None:
                return

            self.thread = threading.Thread(target=self.run, name=self.name)
            self.thread.daemon = True
            self.thread.start()


    def run(self):

        while True:
            method, args = self._queue.get()

            if method is None:
                break

            try:
                method(*args)
            except Exception:
                logger.exception('deferred call %r failed', method)
                continue


    def in_loop(self):
        """ Return True if the calling thread is the loop thread.
        """

        return self.thread is not None and threading.current_thread() is self.thread


    def wait(self, timeout=None):
        """ Block until every call deferred so far has been invoked. Returns
            False if the *timeout* (in seconds) expired first.
        """

        if self.in_loop():
            raise RuntimeError('cannot wait on the loop from within the loop')

        done = threading.Event()
        self.defer(done.set)
        return done.wait(timeout)


    def stop(self, timeout=None):
        """ Invoke anything already deferred, then stop the background thread.
            Further calls to :func:`defer` will raise an exception.
        """

        if self.shutdown == True:
            return

        self.shutdown = True
        self._queue.put((None, ()))

        thread = self.thread
        if thread is not None and not self.in_loop():
            thread.join(timeout)


# end of class Loop



default = Loop('zqueue.loop')


def _cleanup():
    default.stop(timeout=1)


atexit.register(_cleanup)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
