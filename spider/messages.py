"""Message headers exchanged between a worker and its task executor."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, TypeVar

import msgpack
from msgpack.exceptions import UnpackException


class ResponseType(IntEnum):
    """Kind of a message sent by the task executor."""

    UNKNOWN = 0
    RESULT = 1
    ERROR = 2
    BLOCK = 3
    READY = 4
    CANCEL = 5


class RequestType(IntEnum):
    """Kind of a message sent to the task executor."""

    UNKNOWN = 0
    ARGUMENTS = 1
    RESUME = 2


_E = TypeVar("_E", ResponseType, RequestType)


def _decode(payload: bytes) -> Any:
    try:
        return msgpack.unpackb(payload, raw=False, strict_map_key=False)
    except (ValueError, TypeError, UnpackException) as exc:
        raise ValueError(f"malformed message: {exc}") from exc


def _header(enum_cls: type[_E], payload: bytes) -> _E:
    message = _decode(payload)
    if not isinstance(message, list) or len(message) < 2:
        return enum_cls.UNKNOWN
    header = message[0]
    if isinstance(header, bool) or not isinstance(header, int):
        return enum_cls.UNKNOWN
    try:
        return enum_cls(header)
    except ValueError:
        return enum_cls.UNKNOWN


def get_response_type(payload: bytes) -> ResponseType:
    """Return the response type in the header of ``payload``.

    Messages that are not arrays of at least two items, or whose header is
    not a known response type, give ``ResponseType.UNKNOWN``.
    Raises ValueError if ``payload`` is not valid msgpack.
    """
    return _header(ResponseType, payload)


def get_request_type(payload: bytes) -> RequestType:
    """Return the request type in the header of ``payload``.

    Raises ValueError if ``payload`` is not valid msgpack.
    """
    return _header(RequestType, payload)


def get_message_body(payload: bytes) -> Any:
    """Return the item that follows the header of ``payload``.

    Raises ValueError if ``payload`` is not a msgpack array of at least two items.
    """
    message = _decode(payload)
    if not isinstance(message, list) or len(message) < 2:
        raise ValueError("message is not an array with a header and a body")
    return message[1]