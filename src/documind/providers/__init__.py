"""Chat provider implementations and factory."""
from __future__ import annotations

from documind.config import Settings

from .base import ChatContext, ChatProvider
from .mock import MockChatContext, MockChatProvider

__all__ = [
    "ChatContext",
    "ChatProvider",
    "MockChatContext",
    "MockChatProvider",
    "create_provider",
]


def create_provider(credential: str, settings: Settings) -> ChatProvider:
    """Build the configured provider for ``credential``.

    Raises ``ValueError`` when the credential is unusable.
    """

    if settings.llm_provider == "mock":
        return MockChatProvider()

    from .gemini import GeminiChatProvider

    return GeminiChatProvider(credential, model_name=settings.model_name)
