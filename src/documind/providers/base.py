"""Base provider interfaces for grounded chat sessions."""

from __future__ import annotations

from abc import ABC, abstractmethod

__all__ = ["ChatContext", "ChatProvider"]


class ChatContext(ABC):
    """Opaque handle to one live conversation held by a provider."""

    @abstractmethod
    async def send(self, message: str) -> str:
        """Send ``message`` and return the model's text reply (may be empty)."""


class ChatProvider(ABC):
    """Abstract interface for generative chat providers."""

    name: str = "provider"

    @abstractmethod
    async def start_chat(self, system_instruction: str, *, temperature: float) -> ChatContext:
        """Create a new conversation seeded with ``system_instruction``."""
