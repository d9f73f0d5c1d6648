"""Exception taxonomy.

Construction errors are raised synchronously and are programmer errors.
Everything that goes wrong after construction is delivered through the
``'error'`` event of the provider's emitter instead of being raised.
"""

from __future__ import annotations

from typing import Optional


class QueueError(Exception):
    """Base class for all zqueue errors."""


class ConstructionError(QueueError, ValueError):
    """A provider could not be constructed from the supplied arguments."""


class MissingEmitter(ConstructionError):
    """No event emitter was supplied."""

    def __init__(self, message: str = "emitter argument is not set"):
        super().__init__(message)


class MissingOptions(ConstructionError):
    """No options were supplied."""

    def __init__(self, message: str = "options argument is not set"):
        super().__init__(message)


class MissingField(ConstructionError):
    """A required option is absent or empty."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        if message is None:
            message = f"{field} option is not set"
        super().__init__(message)


class InvalidOption(ConstructionError):
    """An option is present but cannot be used."""

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        super().__init__(f"{field} option is invalid ({value!r}): {reason}")


class DecodeError(QueueError, ValueError):
    """An inbound payload could not be decoded."""

    def __init__(self, encoding: str, payload, reason: str):
        self.encoding = encoding
        self.payload = payload
        super().__init__(f"cannot decode {encoding} payload: {reason}")
