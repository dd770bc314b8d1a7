"""Ownership of the single grounded chat context."""
from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

from documind.config import DEFAULT_TEMPERATURE
from documind.errors import ConversationNotActiveError, InitFailure, SendFailure
from documind.prompt_builder import PRIMING_MESSAGE, build_system_instruction
from documind.providers import ChatContext, ChatProvider
from documind.session.models import Persona
from documind.telemetry import emit_conversation_init, emit_conversation_turn, emit_exception

LOGGER = logging.getLogger(__name__)

EMPTY_RESPONSE_PLACEHOLDER = "I processed that, but couldn't generate a text response."

ProviderFactory = Callable[[str], ChatProvider]


class ConversationStatus(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    ACTIVE = "ACTIVE"


class ConversationManager:
    """Start, hold and talk to exactly one provider chat context.

    ``initialize`` replaces any previous context; a failed initialisation
    leaves the manager without a context rather than keeping the old one.
    """

    def __init__(
        self,
        provider_factory: ProviderFactory,
        *,
        temperature: float = DEFAULT_TEMPERATURE,
        session_id: str | None = None,
    ) -> None:
        self._provider_factory = provider_factory
        self.temperature = temperature
        self.session_id = session_id
        self._context: Optional[ChatContext] = None

    @property
    def status(self) -> ConversationStatus:
        return ConversationStatus.ACTIVE if self._context is not None else ConversationStatus.UNINITIALIZED

    @property
    def is_active(self) -> bool:
        return self._context is not None

    def reset(self) -> None:
        if self._context is not None:
            LOGGER.info("Discarding active chat context")
        self._context = None

    async def initialize(self, credential: str, persona: Persona, document_text: str) -> None:
        self.reset()
        if not credential or not credential.strip():
            raise InitFailure("API key is missing")

        instruction = build_system_instruction(persona, document_text)
        started = time.perf_counter()
        provider_name = "unknown"
        try:
            provider = self._provider_factory(credential.strip())
            provider_name = provider.name
            context = await provider.start_chat(instruction, temperature=self.temperature)
            # Surfaces credential and quota errors here instead of on the first question.
            await context.send(PRIMING_MESSAGE)
        except Exception as error:
            LOGGER.exception("Chat initialisation failed")
            failure = InitFailure("Failed to initialize the chat session", cause=error)
            emit_conversation_init(
                session_id=self.session_id,
                provider=provider_name,
                temperature=self.temperature,
                instruction_len=len(instruction),
                duration_ms=(time.perf_counter() - started) * 1000.0,
                error=error,
            )
            raise failure from error

        self._context = context
        emit_conversation_init(
            session_id=self.session_id,
            provider=provider_name,
            temperature=self.temperature,
            instruction_len=len(instruction),
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )

    async def send(self, query: str) -> str:
        if self._context is None:
            raise ConversationNotActiveError("Chat session not initialized")

        started = time.perf_counter()
        try:
            text = await self._context.send(query)
        except Exception as error:
            emit_exception(module=f"{__name__}.send", error=error, session_id=self.session_id)
            emit_conversation_turn(
                session_id=self.session_id,
                query=query,
                answer=None,
                duration_ms=(time.perf_counter() - started) * 1000.0,
                error=error,
            )
            raise SendFailure("Failed to communicate with the AI model.", cause=error) from error

        fallback = not text
        answer = text or EMPTY_RESPONSE_PLACEHOLDER
        emit_conversation_turn(
            session_id=self.session_id,
            query=query,
            answer=answer,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            fallback=fallback,
        )
        return answer
