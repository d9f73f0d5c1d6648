"""Payload codec.

Outbound values are converted to text by type: byte buffers become base64,
strings pass through, everything else becomes compact JSON. Inbound text is
converted back according to the queue's configured encoding.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Any, Union

from . import json
from .errors import DecodeError

Binary = (bytes, bytearray, memoryview)

_number = re.compile(r"-?(0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?")


def encode(message: Any) -> str:
    """Return the wire text for *message*."""

    if isinstance(message, Binary):
        return base64.b64encode(bytes(message)).decode('ascii')

    if isinstance(message, str):
        return message

    return json.dumps(message)


def decode(payload: Union[str, bytes], encoding: str = 'auto') -> Any:
    """Reconstruct a value from wire text using the named *encoding*."""

    if isinstance(payload, Binary):
        try:
            payload = bytes(payload).decode('utf-8')
        except UnicodeDecodeError as exc:
            raise DecodeError(encoding, payload, 'not UTF-8 text') from exc

    if encoding == 'text':
        return payload

    if encoding == 'json':
        try:
            return json.loads(payload)
        except (json.DecodeError, ValueError) as exc:
            raise DecodeError(encoding, payload, str(exc)) from exc

    if encoding == 'base64':
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeError(encoding, payload, str(exc)) from exc

    if encoding == 'auto':
        return _decode_auto(payload)

    raise DecodeError(encoding, payload, 'unknown encoding')


def _decode_auto(payload: str) -> Any:

    # Only JSON containers are treated as structured values; a bare JSON
    # scalar such as '12' or 'true' is far more likely to be plain text.
    # Scalars must be settled before the base64 check, since 'true',
    # 'null', and '1234' are all canonical base64.

    if payload[:1] in ('{', '['):
        try:
            return json.loads(payload)
        except (json.DecodeError, ValueError):
            pass

    if _is_json_scalar(payload):
        return payload

    decoded = _canonical_base64(payload)
    if decoded is not None:
        return decoded

    return payload


def _is_json_scalar(payload: str) -> bool:

    if payload in ('true', 'false', 'null'):
        return True

    if _number.fullmatch(payload):
        return True

    return False


def _canonical_base64(payload: str):
    """Return the decoded bytes if *payload* is exactly what
    :func:`base64.b64encode` would produce for them, otherwise None.
    """

    if not payload or len(payload) % 4 != 0:
        return None

    try:
        decoded = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None

    if base64.b64encode(decoded).decode('ascii') != payload:
        return None

    return decoded
