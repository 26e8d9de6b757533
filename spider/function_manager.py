"""Registry of task functions and the msgpack messages used to call them."""

from __future__ import annotations

import functools
import logging
import uuid
from collections.abc import Callable, Iterable
from enum import IntEnum
from typing import Any, ClassVar, TypeVar

import msgpack
from msgpack.exceptions import UnpackException

from spider.data import Data, StorageError
from spider.messages import RequestType, ResponseType

_log = logging.getLogger(__name__)

Invoker = Callable[[Any, bytes], bytes]
_F = TypeVar("_F", bound=Callable[..., Any])

_HINTS_BY_NAME = {
    "Data": Data,
    "spider.data.Data": Data,
    "UUID": uuid.UUID,
    "uuid.UUID": uuid.UUID,
}


class FunctionInvokeError(IntEnum):
    """Outcome of invoking a task function."""

    SUCCESS = 0
    WRONG_NUMBER_OF_ARGUMENTS = 1
    ARGUMENT_PARSING_ERROR = 2
    RESULT_PARSING_ERROR = 3
    FUNCTION_EXECUTION_ERROR = 4


def _default(value: Any) -> Any:
    if isinstance(value, Data):
        return value.id.bytes
    if isinstance(value, uuid.UUID):
        return value.bytes
    raise TypeError(f"cannot serialize {type(value).__name__}")


def _pack(value: Any) -> bytes:
    return msgpack.packb(value, default=_default, use_bin_type=True)


def _decode(payload: bytes) -> Any:
    try:
        return msgpack.unpackb(payload, raw=False, strict_map_key=False)
    except (ValueError, TypeError, UnpackException) as exc:
        raise ValueError(f"malformed message: {exc}") from exc


def _header_is(value: Any, expected: IntEnum) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value == expected


def _to_uuid(value: Any) -> uuid.UUID:
    if not isinstance(value, bytes) or len(value) != 16:
        raise ValueError("argument is not a 16-byte id")
    return uuid.UUID(bytes=value)


def response_get_error(payload: bytes) -> tuple[FunctionInvokeError, str] | None:
    """Return the error code and message of an error response, or None.

    Raises ValueError if ``payload`` is not valid msgpack.
    """
    message = _decode(payload)
    if not isinstance(message, list) or len(message) != 3:
        return None
    header, code, text = message
    if not _header_is(header, ResponseType.ERROR):
        return None
    if isinstance(code, bool) or not isinstance(code, int):
        return None
    try:
        error = FunctionInvokeError(code)
    except ValueError:
        return None
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    if not isinstance(text, str):
        return None
    return error, text


def create_error_response(error: FunctionInvokeError, message: str) -> bytes:
    """Pack an error response: header, error code and message."""
    return _pack([int(ResponseType.ERROR), int(error), message])


def create_error_buffer(error: FunctionInvokeError, message: str) -> bytes:
    """Pack an error code and message without a response header."""
    return _pack([int(error), message])


def response_get_result(payload: bytes, count: int = 1) -> Any:
    """Return the result of a result response holding ``count`` values, or None.

    With ``count`` 1 the single value is returned, otherwise a tuple.
    Raises ValueError if ``count`` is below 1 or ``payload`` is not valid msgpack.
    """
    if count < 1:
        raise ValueError("count must be at least 1")
    message = _decode(payload)
    if not isinstance(message, list) or len(message) != count + 1:
        return None
    if not _header_is(message[0], ResponseType.RESULT):
        return None
    if count == 1:
        return message[1]
    return tuple(message[1:])


def response_get_result_buffers(payload: bytes) -> list[bytes] | None:
    """Split a result response into the packed bytes of each result value.

    Returns None if ``payload`` is not a result response.
    Raises ValueError if ``payload`` is not valid msgpack.
    """
    message = _decode(payload)
    if not isinstance(message, list) or len(message) < 2:
        _log.error("Cannot split result into buffers: Wrong type")
        return None
    if not _header_is(message[0], ResponseType.RESULT):
        _log.error("Cannot split result into buffers: Wrong response type %r", message[0])
        return None

    unpacker = msgpack.Unpacker(raw=False, strict_map_key=False)
    unpacker.feed(payload)
    unpacker.read_array_header()
    unpacker.skip()
    buffers = []
    for _ in message[1:]:
        start = unpacker.tell()
        unpacker.skip()
        buffers.append(bytes(payload[start : unpacker.tell()]))
    return buffers


def create_result_response(value: Any) -> bytes:
    """Pack a result response; a tuple gives one result per item."""
    if isinstance(value, tuple):
        return _pack([int(ResponseType.RESULT), *value])
    return _pack([int(ResponseType.RESULT), value])


def create_args_buffer(*args: Any) -> bytes:
    """Pack task arguments as an array; data objects and ids pack as 16-byte ids."""
    return _pack(list(args))


def create_args_request(*args: Any) -> bytes:
    """Pack an arguments request carrying ``args``."""
    return _pack([int(RequestType.ARGUMENTS), list(args)])


def create_args_request_from_buffers(buffers: Iterable[bytes]) -> bytes:
    """Build an arguments request from arguments that are already packed."""
    buffers = list(buffers)
    packer = msgpack.Packer(use_bin_type=True)
    parts = [
        packer.pack_array_header(2),
        packer.pack(int(RequestType.ARGUMENTS)),
        packer.pack_array_header(len(buffers)),
        *buffers,
    ]
    return b"".join(parts)


def _resolve_hint(hint: Any) -> Any:
    if isinstance(hint, str):
        return _HINTS_BY_NAME.get(hint)
    return hint


def _task_parameters(function: Callable[..., Any]) -> list[Any]:
    """Return the type hints of the parameters that follow the context."""
    code = getattr(function, "__code__", None)
    if code is None:
        raise TypeError("a task function must be a Python function")
    names = list(code.co_varnames[: code.co_argcount])
    if getattr(function, "__self__", None) is not None:
        names = names[1:]
    if not names:
        raise TypeError("a task function must take the task context as its first argument")
    annotations = getattr(function, "__annotations__", None) or {}
    return [_resolve_hint(annotations.get(name)) for name in names[1:]]


def _convert_argument(value: Any, hint: Any, context: Any) -> Any:
    if hint is Data:
        return context.data_store.get_data(_to_uuid(value))
    if hint is uuid.UUID:
        return _to_uuid(value)
    return value


def invoke_function(function: Callable[..., Any], context: Any, args_buffer: bytes) -> bytes:
    """Call ``function`` with ``context`` and the packed arguments; return a response.

    Parameters annotated with ``Data`` are loaded through
    ``context.data_store.get_data(data_id)``; parameters annotated with
    ``uuid.UUID`` receive the id itself. Every failure is reported in the
    returned error response.
    """
    hints = _task_parameters(function)
    try:
        args = _decode(args_buffer)
    except ValueError:
        return create_error_response(
            FunctionInvokeError.ARGUMENT_PARSING_ERROR, "Cannot parse arguments."
        )
    if not isinstance(args, list):
        return create_error_response(
            FunctionInvokeError.ARGUMENT_PARSING_ERROR, "Cannot parse arguments."
        )
    if len(args) != len(hints):
        return create_error_response(
            FunctionInvokeError.WRONG_NUMBER_OF_ARGUMENTS,
            f"Wrong number of arguments. Expect {len(hints) + 1}. Get {len(args)}.",
        )

    try:
        values = [_convert_argument(arg, hint, context) for arg, hint in zip(args, hints)]
    except StorageError as exc:
        return create_error_response(
            FunctionInvokeError.ARGUMENT_PARSING_ERROR,
            f"Cannot parse arguments: {exc.description}.",
        )
    except (TypeError, ValueError):
        return create_error_response(
            FunctionInvokeError.ARGUMENT_PARSING_ERROR, "Cannot parse arguments."
        )

    try:
        result = function(context, *values)
    except Exception:
        return create_error_response(
            FunctionInvokeError.FUNCTION_EXECUTION_ERROR, "Function execution error"
        )
    try:
        return create_result_response(result)
    except (TypeError, ValueError, OverflowError):
        return create_error_response(
            FunctionInvokeError.RESULT_PARSING_ERROR, "Cannot parse result."
        )


class FunctionManager:
    """Maps task names to invokers and task functions back to their names."""

    _shared: ClassVar[FunctionManager | None] = None

    def __init__(self) -> None:
        self._invokers: dict[str, Invoker] = {}
        self._names: dict[Callable[..., Any], str] = {}

    @classmethod
    def instance(cls) -> FunctionManager:
        """Return the process-wide manager."""
        if cls._shared is None:
            cls._shared = cls()
        return cls._shared

    def __contains__(self, name: object) -> bool:
        return name in self._invokers

    def register_function(self, name: str, function: Callable[..., Any]) -> None:
        """Register ``function`` under ``name``.

        Raises ValueError if the name is taken and TypeError if the function
        takes no context argument.
        """
        if name in self._invokers:
            raise ValueError(f"function {name!r} already registered")
        _task_parameters(function)
        self._names[function] = name
        self._invokers[name] = functools.partial(invoke_function, function)

    def register_function_invoker(self, name: str, invoker: Invoker) -> None:
        """Register a ready-made invoker. Raises ValueError if the name is taken."""
        if name in self._invokers:
            raise ValueError(f"function {name!r} already registered")
        self._invokers[name] = invoker

    def get_function(self, name: str) -> Invoker | None:
        return self._invokers.get(name)

    def get_function_name(self, function: Callable[..., Any]) -> str | None:
        return self._names.get(function)


def register_task(function: _F) -> _F:
    """Register ``function`` under its own name with the shared manager."""
    FunctionManager.instance().register_function(function.__name__, function)
    return function