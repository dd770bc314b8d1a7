from __future__ import annotations

import asyncio

import pytest

from documind.conversation import (
    EMPTY_RESPONSE_PLACEHOLDER,
    ConversationManager,
    ConversationStatus,
)
from documind.errors import ConversationNotActiveError, InitFailure, SendFailure
from documind.prompt_builder import PRIMING_MESSAGE
from documind.session.models import Persona

from conftest import ScriptedChatProvider

DOCUMENT = "[Page 1] Revenue grew 12% in Q3.\n\n"


def _manager(provider: ScriptedChatProvider) -> ConversationManager:
    return ConversationManager(lambda credential: provider, temperature=0.3)


def test_initialize_seeds_instruction_and_primes(persona: Persona) -> None:
    provider = ScriptedChatProvider(["Acknowledged."])
    manager = _manager(provider)

    asyncio.run(manager.initialize("key", persona, DOCUMENT))

    assert manager.status is ConversationStatus.ACTIVE
    assert provider.temperatures == [0.3]
    instruction = provider.instructions[0]
    assert DOCUMENT in instruction
    for value in ("Finance", "Banking", "Senior Analyst", "Q3 Earnings Report"):
        assert value in instruction
    assert provider.contexts[0].received == [PRIMING_MESSAGE]


def test_send_forwards_query_verbatim(persona: Persona) -> None:
    provider = ScriptedChatProvider(["ack", "Revenue grew 12% [Page 1]."])
    manager = _manager(provider)

    async def scenario() -> str:
        await manager.initialize("key", persona, DOCUMENT)
        return await manager.send("  How did revenue change?  ")

    assert asyncio.run(scenario()) == "Revenue grew 12% [Page 1]."
    assert provider.contexts[0].received[-1] == "  How did revenue change?  "


def test_empty_reply_uses_placeholder(persona: Persona) -> None:
    manager = _manager(ScriptedChatProvider(["ack", ""]))

    async def scenario() -> str:
        await manager.initialize("key", persona, DOCUMENT)
        return await manager.send("question")

    assert asyncio.run(scenario()) == EMPTY_RESPONSE_PLACEHOLDER


def test_send_before_initialize_is_a_programming_error() -> None:
    manager = _manager(ScriptedChatProvider())

    with pytest.raises(ConversationNotActiveError):
        asyncio.run(manager.send("hello"))


def test_missing_credential_fails_initialization(persona: Persona) -> None:
    provider = ScriptedChatProvider()
    manager = _manager(provider)

    with pytest.raises(InitFailure):
        asyncio.run(manager.initialize("  ", persona, DOCUMENT))

    assert provider.instructions == []
    assert manager.status is ConversationStatus.UNINITIALIZED


def test_provider_error_during_priming_fails_initialization(persona: Persona) -> None:
    manager = _manager(ScriptedChatProvider([PermissionError("API key not valid")]))

    with pytest.raises(InitFailure) as excinfo:
        asyncio.run(manager.initialize("bad-key", persona, DOCUMENT))

    assert isinstance(excinfo.value.__cause__, PermissionError)
    assert not manager.is_active


def test_factory_error_fails_initialization(persona: Persona) -> None:
    def factory(credential: str) -> ScriptedChatProvider:
        raise ValueError("unreachable")

    manager = ConversationManager(factory)

    with pytest.raises(InitFailure):
        asyncio.run(manager.initialize("key", persona, DOCUMENT))


def test_send_failure_keeps_conversation_active(persona: Persona) -> None:
    manager = _manager(ScriptedChatProvider(["ack", ConnectionError("reset"), "recovered"]))

    async def scenario() -> str:
        await manager.initialize("key", persona, DOCUMENT)
        with pytest.raises(SendFailure):
            await manager.send("first")
        assert manager.is_active
        return await manager.send("second")

    assert asyncio.run(scenario()) == "recovered"


def test_reinitialize_replaces_context(persona: Persona) -> None:
    provider = ScriptedChatProvider()
    manager = _manager(provider)

    async def scenario() -> None:
        await manager.initialize("key", persona, DOCUMENT)
        await manager.initialize("key", persona, "[Page 1] another document\n\n")
        await manager.send("which document?")

    asyncio.run(scenario())

    assert len(provider.contexts) == 2
    assert provider.contexts[0].received == [PRIMING_MESSAGE]
    assert provider.contexts[1].received == [PRIMING_MESSAGE, "which document?"]


def test_failed_reinitialize_drops_previous_context(persona: Persona) -> None:
    provider = ScriptedChatProvider()
    manager = _manager(provider)

    async def scenario() -> None:
        await manager.initialize("key", persona, DOCUMENT)
        provider.start_error = TimeoutError("unreachable")
        with pytest.raises(InitFailure):
            await manager.initialize("key", persona, DOCUMENT)

    asyncio.run(scenario())

    assert manager.status is ConversationStatus.UNINITIALIZED


def test_reset_discards_context(persona: Persona) -> None:
    manager = _manager(ScriptedChatProvider())
    asyncio.run(manager.initialize("key", persona, DOCUMENT))

    manager.reset()

    assert manager.status is ConversationStatus.UNINITIALIZED
