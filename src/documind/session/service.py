"""Orchestration of the single process-wide document chat session."""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

from documind.config import Settings
from documind.conversation import ConversationManager
from documind.errors import InitFailure, ParseFailure, SendFailure, SessionBusyError
from documind.ingest import DocumentIngestor, ParsedDocument
from documind.logging_config import AUDIT_LOGGER_NAME
from documind.providers import create_provider

from .models import Message, MessageLog, MessageRole, Persona
from .state import SessionState, SessionStateMachine

LOGGER = logging.getLogger(__name__)
AUDIT_LOGGER = logging.getLogger(AUDIT_LOGGER_NAME)

SEND_FAILURE_MESSAGE = "I encountered an error retrieving that information. Please try again."


def greeting_for(persona: Persona) -> str:
    return (
        f"Hello. I have analyzed **{persona.doc_title}**. As a specialist in "
        f"**{persona.doc_topic}**, I am ready to assist you with your **{persona.role}** "
        "tasks. What specific information do you need?"
    )


class BusyGuard:
    """Single request-in-flight flag shared by every user-triggered action."""

    def __init__(self) -> None:
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @contextmanager
    def hold(self, action: str) -> Iterator[None]:
        if self._busy:
            raise SessionBusyError(f"Cannot {action} while another request is in progress")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Read-only view of the session for presentation layers."""

    session_id: str
    state: SessionState
    persona: Persona
    file_name: Optional[str]
    page_count: int
    toc: Tuple[str, ...]
    messages: Tuple[Message, ...]
    busy: bool


class SessionService:
    """Drive onboarding, parsing, assurance and chat for one document."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        ingestor: DocumentIngestor | None = None,
        conversation: ConversationManager | None = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.session_id = uuid.uuid4().hex
        self.ingestor = ingestor or DocumentIngestor()
        self.conversation = conversation or ConversationManager(
            lambda credential: create_provider(credential, self.settings),
            temperature=self.settings.temperature,
            session_id=self.session_id,
        )
        self.machine = SessionStateMachine(self.session_id)
        self.guard = BusyGuard()
        self._persona = Persona()
        self._document: Optional[ParsedDocument] = None
        self._log = MessageLog()

    @property
    def state(self) -> SessionState:
        return self.machine.state

    @property
    def persona(self) -> Persona:
        return self._persona

    @property
    def document(self) -> Optional[ParsedDocument]:
        return self._document

    @property
    def messages(self) -> Sequence[Message]:
        return self._log.messages

    def update_persona(self, persona: Persona) -> bool:
        if self.state is not SessionState.ONBOARDING:
            LOGGER.info("Persona is locked while in %s", self.state.value)
            return False
        self._persona = persona
        return True

    async def upload(
        self, data: bytes, file_name: str = "document.pdf", mime_type: Optional[str] = None
    ) -> Optional[ParsedDocument]:
        """Parse an uploaded document; returns ``None`` when the upload is not accepted."""

        with self.guard.hold("upload"):
            if not self.machine.begin_parsing(self._persona, bool(data)):
                return None
            try:
                document = await self.ingestor.ingest(
                    data, file_name, mime_type, session_id=self.session_id
                )
            except ParseFailure:
                self._document = None
                self.machine.parse_failed()
                raise
            self._document = document
            self.machine.parse_succeeded()
            AUDIT_LOGGER.info(
                {
                    "event": "upload",
                    "session_id": self.session_id,
                    "file_name": file_name,
                    "pages": document.page_count,
                    "toc_entries": len(document.toc),
                }
            )
            return document

    def retake(self) -> bool:
        with self.guard.hold("start over"):
            if not self.machine.retake():
                return False
            self._document = None
            self.conversation.reset()
            AUDIT_LOGGER.info({"event": "retake", "session_id": self.session_id})
            return True

    async def confirm(self, credential: Optional[str] = None) -> bool:
        """Start the grounded chat; on failure the session stays in assurance."""

        with self.guard.hold("start the chat"):
            if self.state is not SessionState.ASSURANCE or self._document is None:
                return False
            key = credential or self.settings.api_key
            try:
                await self.conversation.initialize(key, self._persona, self._document.full_text)
            except InitFailure:
                LOGGER.warning("Chat initialisation failed; staying in %s", self.state.value)
                raise
            self.machine.confirm()
            self._log.append(MessageRole.MODEL, greeting_for(self._persona))
            AUDIT_LOGGER.info(
                {"event": "confirm", "session_id": self.session_id, "file_name": self._document.file_name}
            )
            return True

    async def send(self, text: str) -> Optional[Message]:
        """Append the user's question and the model's reply; returns the reply."""

        with self.guard.hold("send a message"):
            if self.state is not SessionState.CHAT or not text.strip():
                return None
            self._log.append(MessageRole.USER, text)
            try:
                answer = await self.conversation.send(text)
            except SendFailure:
                LOGGER.warning("Send failed; appending apology message")
                return self._log.append(MessageRole.MODEL, SEND_FAILURE_MESSAGE)
            return self._log.append(MessageRole.MODEL, answer)

    def snapshot(self) -> SessionSnapshot:
        document = self._document
        return SessionSnapshot(
            session_id=self.session_id,
            state=self.state,
            persona=self._persona,
            file_name=document.file_name if document else None,
            page_count=document.page_count if document else 0,
            toc=document.toc if document else (),
            messages=tuple(self._log.messages),
            busy=self.guard.busy,
        )


_session_service: Optional[SessionService] = None


def get_session_service() -> SessionService:
    """FastAPI dependency returning the shared :class:`SessionService` instance."""

    global _session_service
    if _session_service is None:
        _session_service = SessionService()
    return _session_service
