"""Shared fixtures: deterministic extractors and chat providers."""
from __future__ import annotations

import asyncio
import os
import tempfile
from typing import Callable, List, Optional, Sequence

import pytest

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="documind-logs-"))
os.environ.setdefault("LLM_PROVIDER", "mock")

from documind.config import Settings  # noqa: E402
from documind.conversation import ConversationManager  # noqa: E402
from documind.ingest import DocumentFormat, DocumentIngestor, PageSource, PageTextExtractor  # noqa: E402
from documind.providers import ChatContext, ChatProvider  # noqa: E402
from documind.session.models import Persona  # noqa: E402
from documind.session.service import SessionService  # noqa: E402


class FakePageSource(PageSource):
    def __init__(self, pages: Sequence[str], fail_on: Optional[int] = None) -> None:
        self._pages = list(pages)
        self.fail_on = fail_on
        self.requested: List[int] = []

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def page_text(self, page_number: int) -> str:
        self.requested.append(page_number)
        if page_number == self.fail_on:
            raise RuntimeError(f"page {page_number} is corrupt")
        return self._pages[page_number - 1]


class FakeExtractor(PageTextExtractor):
    """Serves fixed page texts regardless of the payload bytes."""

    def __init__(
        self,
        pages: Sequence[str],
        *,
        fail_on: Optional[int] = None,
        open_error: Optional[Exception] = None,
    ) -> None:
        self.source = FakePageSource(pages, fail_on=fail_on)
        self.open_error = open_error

    def open(self, data: bytes) -> PageSource:
        if self.open_error is not None:
            raise self.open_error
        return self.source


class ScriptedChatContext(ChatContext):
    """Replies from a script; exceptions in the script are raised instead."""

    def __init__(self, replies: Sequence[object], gate: Optional[asyncio.Event] = None) -> None:
        self._replies = list(replies)
        self.gate = gate
        self.received: List[str] = []

    async def send(self, message: str) -> str:
        self.received.append(message)
        if self.gate is not None and len(self.received) > 1:
            await self.gate.wait()
        reply = self._replies.pop(0) if self._replies else f"answer to {message}"
        if isinstance(reply, Exception):
            raise reply
        return str(reply)


class ScriptedChatProvider(ChatProvider):
    name = "scripted"

    def __init__(
        self,
        replies: Sequence[object] = (),
        *,
        start_error: Optional[Exception] = None,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.replies = list(replies)
        self.start_error = start_error
        self.gate = gate
        self.instructions: List[str] = []
        self.temperatures: List[float] = []
        self.contexts: List[ScriptedChatContext] = []

    async def start_chat(self, system_instruction: str, *, temperature: float) -> ChatContext:
        self.instructions.append(system_instruction)
        self.temperatures.append(temperature)
        if self.start_error is not None:
            raise self.start_error
        context = ScriptedChatContext(self.replies, gate=self.gate)
        self.contexts.append(context)
        return context


@pytest.fixture()
def persona() -> Persona:
    return Persona(
        domain="Finance",
        industry="Banking",
        role="Senior Analyst",
        doc_title="Q3 Earnings Report",
        doc_topic="Revenue Growth & Risks",
    )


@pytest.fixture()
def settings() -> Settings:
    return Settings(api_key="test-key", llm_provider="mock", temperature=0.3)


@pytest.fixture()
def make_service(settings: Settings) -> Callable[..., SessionService]:
    def _make(
        pages: Sequence[str] = (
            "Overview\n1. Introduction\nRevenue grew.",
            "Summary\n2. Risks\nMarkets are volatile.",
        ),
        provider: Optional[ChatProvider] = None,
        **extractor_kwargs: object,
    ) -> SessionService:
        extractor = FakeExtractor(pages, **extractor_kwargs)  # type: ignore[arg-type]
        ingestor = DocumentIngestor({fmt: extractor for fmt in DocumentFormat})
        chat_provider = provider or ScriptedChatProvider()
        conversation = ConversationManager(
            lambda credential: chat_provider, temperature=settings.temperature
        )
        return SessionService(settings, ingestor=ingestor, conversation=conversation)

    return _make
