"""Session state, value objects and orchestration."""

from .models import Message, MessageLog, MessageRole, Persona
from .state import SessionState, SessionStateMachine

__all__ = [
    "Message",
    "MessageLog",
    "MessageRole",
    "Persona",
    "SessionState",
    "SessionStateMachine",
]
