from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class MessageType(str, Enum):
    JOIN = "join"
    JOINED = "joined"
    OFFER = "offer"
    ANSWER = "answer"
    CANDIDATE = "candidate"


# message types whose relay is worth a log line
NEGOTIATION_TYPES = frozenset(
    t.value for t in (MessageType.OFFER, MessageType.ANSWER, MessageType.CANDIDATE)
)


@dataclass(frozen=True)
class Decoded:
    """A frame that decoded to a message object with a type."""

    raw: str
    data: dict[str, Any] = field(hash=False)

    @property
    def type(self) -> str:
        return self.data["type"]

    @property
    def room_id(self) -> Any:
        return self.data.get("roomId")


@dataclass(frozen=True)
class Malformed:
    """A frame that was dropped, and why."""

    reason: str


DecodeResult = Union[Decoded, Malformed]


def decode_message(frame: str | bytes) -> DecodeResult:
    if isinstance(frame, (bytes, bytearray, memoryview)):
        try:
            frame = bytes(frame).decode("utf-8")
        except UnicodeDecodeError:
            return Malformed("not UTF-8")
    try:
        data = json.loads(frame)
    except ValueError:
        return Malformed("not JSON")
    if not isinstance(data, dict):
        return Malformed("not a JSON object")
    if not isinstance(data.get("type"), str):
        return Malformed("missing type")
    return Decoded(frame, data)


def create_message(msg_type: MessageType, **fields: Any) -> str:
    return json.dumps({"type": msg_type.value, **fields})


def create_joined_message(room_id: str) -> str:
    return create_message(MessageType.JOINED, roomId=room_id)
