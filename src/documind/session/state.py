"""Four-step session flow: onboarding, parsing, assurance, chat."""
from __future__ import annotations

import logging
from enum import Enum
from typing import List, Sequence

from documind.telemetry import emit_state_transition

from .models import Persona

LOGGER = logging.getLogger(__name__)


class SessionState(str, Enum):
    ONBOARDING = "ONBOARDING"
    PARSING = "PARSING"
    ASSURANCE = "ASSURANCE"
    CHAT = "CHAT"


class SessionStateMachine:
    """Owns the current step and the only legal ways to leave it.

    Every transition method returns ``True`` when the state moved and
    ``False`` when the request was not legal from the current state, in which
    case nothing changes.
    """

    def __init__(self, session_id: str | None = None) -> None:
        self.session_id = session_id
        self._state = SessionState.ONBOARDING
        self._history: List[SessionState] = [self._state]

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def history(self) -> Sequence[SessionState]:
        return tuple(self._history)

    def begin_parsing(self, persona: Persona, has_document: bool) -> bool:
        if not persona.is_complete() or not has_document:
            LOGGER.info("Upload ignored: persona complete=%s document=%s", persona.is_complete(), has_document)
            return False
        return self._move((SessionState.ONBOARDING,), SessionState.PARSING, "select_document")

    def parse_succeeded(self) -> bool:
        return self._move((SessionState.PARSING,), SessionState.ASSURANCE, "parse_succeeded")

    def parse_failed(self) -> bool:
        return self._move((SessionState.PARSING,), SessionState.ONBOARDING, "parse_failed")

    def retake(self) -> bool:
        return self._move(
            (SessionState.ASSURANCE, SessionState.CHAT), SessionState.ONBOARDING, "retake"
        )

    def confirm(self) -> bool:
        return self._move((SessionState.ASSURANCE,), SessionState.CHAT, "confirm")

    def _move(
        self, allowed_from: Sequence[SessionState], target: SessionState, trigger: str
    ) -> bool:
        source = self._state
        if source not in allowed_from:
            LOGGER.debug("Ignoring %s while in %s", trigger, source.value)
            return False
        self._state = target
        self._history.append(target)
        emit_state_transition(
            session_id=self.session_id, source=source.value, target=target.value, trigger=trigger
        )
        return True
