"""Gemini chat sessions through ``google-generativeai``."""
from __future__ import annotations

import logging

import google.generativeai as genai

from documind.config import DEFAULT_MODEL

from .base import ChatContext, ChatProvider

LOGGER = logging.getLogger(__name__)


class GeminiChatContext(ChatContext):
    def __init__(self, session: genai.ChatSession) -> None:
        self._session = session

    async def send(self, message: str) -> str:
        response = await self._session.send_message_async(message)
        try:
            return response.text
        except ValueError:
            # Raised when the candidate carries no text parts (e.g. blocked).
            LOGGER.warning("Gemini response contained no text parts")
            return ""


class GeminiChatProvider(ChatProvider):
    """Start Gemini chats seeded with a system instruction."""

    name = "gemini"

    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL) -> None:
        if not api_key:
            raise ValueError("Gemini API key is not set")
        genai.configure(api_key=api_key)
        self.model_name = model_name

    async def start_chat(self, system_instruction: str, *, temperature: float) -> ChatContext:
        model = genai.GenerativeModel(
            self.model_name,
            system_instruction=system_instruction,
            generation_config=genai.GenerationConfig(temperature=temperature),
        )
        return GeminiChatContext(model.start_chat())
