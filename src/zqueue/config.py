""" Provider options. An :class:`Options` instance is validated when it is
    created and is not modified afterwards; the checks happen in a fixed
    order, and the first missing field is the one reported.
"""

import os

from . import json
from .errors import InvalidOption, MissingField, MissingOptions

encodings = ('auto', 'text', 'json', 'base64')

environment_prefix = 'ZQUEUE_'


class Options:
    """ The queue a provider is attached to: the *queue_name* is the topic
        used for publishing and the subscription filter; *hostname* and
        *port* form the ``tcp://`` address the publish socket binds and the
        subscribe socket connects to. The *encoding* determines how inbound
        payloads are decoded, see :mod:`zqueue.codec`.
    """

    __slots__ = ('queue_name', 'hostname', 'port', 'encoding')

    def __init__(self, queue_name=None, hostname=None, port=None, encoding=None):

        if not queue_name:
            raise MissingField('queue_name')

        if not hostname:
            raise MissingField('hostname')

        if port is None or port == 0 or port == '':
            raise MissingField('port')

        try:
            port = int(port)
        except (TypeError, ValueError):
            raise InvalidOption('port', port, 'not an integer')

        if port == 0:
            raise MissingField('port')

        if port < 0 or port > 65535:
            raise InvalidOption('port', port, 'out of range')

        if encoding is None:
            encoding = 'auto'
        elif encoding not in encodings:
            raise InvalidOption('encoding', encoding, 'expected one of ' + ', '.join(encodings))

        assign = object.__setattr__
        assign(self, 'queue_name', str(queue_name))
        assign(self, 'hostname', str(hostname))
        assign(self, 'port', port)
        assign(self, 'encoding', encoding)


    def __setattr__(self, name, value):
        raise AttributeError('Options instances are immutable')


    def __eq__(self, other):
        if isinstance(other, Options):
            return self.as_dict() == other.as_dict()
        return NotImplemented


    def __hash__(self):
        return hash(tuple(self.as_dict().items()))


    def __repr__(self):
        return 'Options(queue_name=%r, hostname=%r, port=%d, encoding=%r)' % (
                self.queue_name, self.hostname, self.port, self.encoding)


    @property
    def address(self):
        """ The ``tcp://`` address used for both bind and connect.
        """

        return 'tcp://%s:%d' % (self.hostname, self.port)


    def as_dict(self):
        return dict(queue_name=self.queue_name,
                    hostname=self.hostname,
                    port=self.port,
                    encoding=self.encoding)


    @classmethod
    def from_mapping(cls, mapping):
        """ Build an :class:`Options` instance from a dictionary. The
            camel-case 'queueName' key is accepted as an alias for
            'queue_name'.
        """

        queue_name = mapping.get('queue_name')
        if queue_name is None:
            queue_name = mapping.get('queueName')

        return cls(queue_name, mapping.get('hostname'), mapping.get('port'), mapping.get('encoding'))


# end of class Options



def coerce(options):
    """ Return an :class:`Options` instance for whatever the caller handed
        over: an existing instance, a dictionary, or any object with
        matching attributes.
    """

    if options is None:
        raise MissingOptions()

    if isinstance(options, Options):
        return options

    try:
        options.keys
    except AttributeError:
        pass
    else:
        return Options.from_mapping(options)

    queue_name = getattr(options, 'queue_name', None)
    if queue_name is None:
        queue_name = getattr(options, 'queueName', None)

    hostname = getattr(options, 'hostname', None)
    port = getattr(options, 'port', None)
    encoding = getattr(options, 'encoding', None)

    return Options(queue_name, hostname, port, encoding)



def from_environment(environ=None):
    """ Build an :class:`Options` instance from ZQUEUE_QUEUE, ZQUEUE_HOSTNAME,
        ZQUEUE_PORT, and ZQUEUE_ENCODING.
    """

    if environ is None:
        environ = os.environ

    queue_name = environ.get(environment_prefix + 'QUEUE')
    hostname = environ.get(environment_prefix + 'HOSTNAME')
    port = environ.get(environment_prefix + 'PORT')
    encoding = environ.get(environment_prefix + 'ENCODING')

    return Options(queue_name, hostname, port, encoding)



def load(path):
    """ Read a JSON file containing a single dictionary of options.
    """

    with open(path, 'rb') as contents:
        raw = contents.read()

    loaded = json.loads(raw)

    if isinstance(loaded, dict):
        pass
    else:
        raise InvalidOption('path', path, 'file does not contain a JSON object')

    return Options.from_mapping(loaded)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
