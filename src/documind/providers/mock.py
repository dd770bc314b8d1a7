"""Deterministic chat provider for tests and offline development."""
from __future__ import annotations

from typing import List, Optional

from .base import ChatContext, ChatProvider


class MockChatContext(ChatContext):
    """Echo each message back with a predictable prefix."""

    def __init__(self, system_instruction: str, temperature: float) -> None:
        self.system_instruction = system_instruction
        self.temperature = temperature
        self.received: List[str] = []

    async def send(self, message: str) -> str:
        self.received.append(message)
        return f"MOCK_ANSWER: {message[:100]}"


class MockChatProvider(ChatProvider):
    """Provider handing out :class:`MockChatContext` instances."""

    name = "mock"

    def __init__(self) -> None:
        self.contexts: List[MockChatContext] = []

    @property
    def last_context(self) -> Optional[MockChatContext]:
        return self.contexts[-1] if self.contexts else None

    async def start_chat(self, system_instruction: str, *, temperature: float) -> ChatContext:
        context = MockChatContext(system_instruction, temperature)
        self.contexts.append(context)
        return context
