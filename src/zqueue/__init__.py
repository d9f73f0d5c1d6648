""" Publish and subscribe to a named queue over ZeroMQ. A
    :class:`QueueProvider` owns the sockets for one queue, and reports
    readiness, errors, and inbound messages on an :class:`EventEmitter`
    supplied by the caller.
"""

# Utility components.

from . import json
from . import errors
from . import emitter
from . import loop

# Submodules used by the provider.

from . import config
from . import codec
from . import transport

# Primary public-facing interfaces.

from .emitter import EventEmitter
from .config import Options
from .provider import QueueProvider
from .errors import (
    QueueError,
    ConstructionError,
    MissingEmitter,
    MissingOptions,
    MissingField,
    InvalidOption,
    DecodeError,
)

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
