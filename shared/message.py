from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

Frame = Union[str, bytes]


class MessageType(str, Enum):
    """WebSocket data frame kinds. Control frames never surface as messages."""

    TEXT = "text"
    BINARY = "binary"


@dataclass(frozen=True)
class Message:
    """
    One WebSocket message: an opaque payload plus its type tag.

    ``websockets`` hands text frames over as ``str`` and binary frames as
    ``bytes``; ``from_frame``/``to_frame`` convert without touching the
    payload so an echoed message keeps its type and bytes.
    """
    type: MessageType
    data: bytes

    @classmethod
    def from_frame(cls, frame: Union[str, bytes, bytearray, memoryview]) -> "Message":
        if isinstance(frame, str):
            return cls(MessageType.TEXT, frame.encode("utf-8"))
        if isinstance(frame, (bytes, bytearray, memoryview)):
            return cls(MessageType.BINARY, bytes(frame))
        raise TypeError(f"unsupported frame type: {type(frame).__name__}")

    @classmethod
    def text(cls, value: str) -> "Message":
        return cls(MessageType.TEXT, value.encode("utf-8"))

    def to_frame(self) -> Frame:
        if self.type is MessageType.TEXT:
            return self.data.decode("utf-8")
        return self.data

    def __str__(self) -> str:
        if self.type is MessageType.TEXT:
            return self.data.decode("utf-8", errors="replace")
        return repr(self.data)
