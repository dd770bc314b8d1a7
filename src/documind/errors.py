"""Failure taxonomy shared by ingestion, conversation and session layers."""
from __future__ import annotations


class DocumindError(RuntimeError):
    """Base class for recoverable service failures."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.__cause__ = cause


class ParseFailure(DocumindError):
    """Raised when a document cannot be read or yields no pages."""


class InitFailure(DocumindError):
    """Raised when a grounded chat session cannot be started."""


class SendFailure(DocumindError):
    """Raised when the provider fails to answer a conversational turn."""


class ConversationNotActiveError(RuntimeError):
    """Raised when a message is sent before the conversation is initialised."""


class SessionBusyError(RuntimeError):
    """Raised when a user action arrives while another one is still running."""
