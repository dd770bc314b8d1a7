"""Session level value objects."""
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, fields
from enum import Enum
from typing import List, Sequence


@dataclass(frozen=True, slots=True)
class Persona:
    """Who is asking and about which document."""

    domain: str = ""
    industry: str = ""
    role: str = ""
    doc_title: str = ""
    doc_topic: str = ""

    def is_complete(self) -> bool:
        return all(getattr(self, item.name).strip() for item in fields(self))


class MessageRole(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    role: MessageRole
    text: str
    timestamp: int


class MessageLog:
    """Append-only ordered conversation history.

    Timestamps are epoch milliseconds bumped so they strictly increase even
    when two messages land within the same millisecond.
    """

    def __init__(self) -> None:
        self._messages: List[Message] = []
        self._last_timestamp = 0

    def append(self, role: MessageRole, text: str) -> Message:
        timestamp = max(time.time_ns() // 1_000_000, self._last_timestamp + 1)
        self._last_timestamp = timestamp
        message = Message(id=uuid.uuid4().hex, role=role, text=text, timestamp=timestamp)
        self._messages.append(message)
        return message

    @property
    def messages(self) -> Sequence[Message]:
        return tuple(self._messages)
