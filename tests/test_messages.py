import json

import pytest

from signal_relay import Decoded, Malformed, MessageType, decode_message
from signal_relay.messages import create_joined_message


@pytest.mark.parametrize(
    "frame",
    (
        "not json",
        "",
        "[1, 2]",
        '"join"',
        "{}",
        '{"roomId": "abcd1234"}',
        '{"type": 1}',
        '{"type": null}',
        b"\xff\xfe",
    ),
)
def test_malformed(frame):
    assert isinstance(decode_message(frame), Malformed)


def test_decoded_keeps_raw_frame():
    frame = '{"type":"offer","sdp":"v=0..."}'
    message = decode_message(frame)
    assert isinstance(message, Decoded)
    assert message.raw == frame
    assert message.type == MessageType.OFFER
    assert message.room_id is None


def test_binary_frame():
    message = decode_message(b'{"type": "join", "roomId": "abcd1234"}')
    assert isinstance(message, Decoded)
    assert message.type == "join"
    assert message.room_id == "abcd1234"


def test_joined_message():
    assert json.loads(create_joined_message("abcd1234")) == {
        "type": "joined",
        "roomId": "abcd1234",
    }
