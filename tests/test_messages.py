import msgpack
import pytest

from spider.messages import (
    RequestType,
    ResponseType,
    get_message_body,
    get_request_type,
    get_response_type,
)


@pytest.mark.parametrize("response_type", list(ResponseType))
def test_response_type_round_trip(response_type):
    payload = msgpack.packb([int(response_type), "body"])
    assert get_response_type(payload) is response_type


@pytest.mark.parametrize("request_type", list(RequestType))
def test_request_type_round_trip(request_type):
    payload = msgpack.packb([int(request_type), [1, 2]])
    assert get_request_type(payload) is request_type


def test_response_type_from_wire_bytes():
    assert get_response_type(b"\x92\x02\xc0") is ResponseType.ERROR


@pytest.mark.parametrize(
    "message",
    [
        [int(ResponseType.RESULT)],
        "not an array",
        {"header": 1},
        ["text", 1],
        [True, 1],
        [len(ResponseType) + 10, 1],
    ],
)
def test_response_type_unknown(message):
    assert get_response_type(msgpack.packb(message)) is ResponseType.UNKNOWN


@pytest.mark.parametrize("message", [[int(RequestType.ARGUMENTS)], 7, [-1, 0]])
def test_request_type_unknown(message):
    assert get_request_type(msgpack.packb(message)) is RequestType.UNKNOWN


def test_message_body():
    payload = msgpack.packb([int(RequestType.ARGUMENTS), [1, "two"]])
    assert get_message_body(payload) == [1, "two"]


def test_message_body_rejects_non_array():
    with pytest.raises(ValueError):
        get_message_body(msgpack.packb("plain"))


def test_message_body_rejects_short_array():
    with pytest.raises(ValueError):
        get_message_body(msgpack.packb([int(RequestType.RESUME)]))


@pytest.mark.parametrize("payload", [b"", msgpack.packb([1, 2])[:-1]])
def test_malformed_payload(payload):
    with pytest.raises(ValueError):
        get_response_type(payload)
    with pytest.raises(ValueError):
        get_request_type(payload)