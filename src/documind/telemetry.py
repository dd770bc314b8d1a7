"""Structured lifecycle events for ingestion, session and conversation steps."""

from __future__ import annotations

import logging
import os
import platform
import sys
import traceback
from typing import Any, Optional

LOGGER = logging.getLogger("documind.telemetry")

PREVIEW_CHARS = 120

_ENV_KEYS_TO_LOG: tuple[str, ...] = (
    "LLM_PROVIDER",
    "LLM_MODEL",
    "LLM_TEMPERATURE",
    "LOG_DIR",
    "LOG_LEVEL",
)


def _format_exception(error: BaseException) -> str:
    return "".join(traceback.format_exception(error.__class__, error, error.__traceback__))


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    """Return a single-line, length-capped preview of ``text``."""

    flattened = " ".join(text.split())
    return flattened[:limit]


def log_event(
    logger: Optional[logging.Logger],
    step: str,
    *,
    level: str = "info",
    session_id: str | None = None,
    duration_ms: float | None = None,
    exc: BaseException | str | None = None,
    details: dict[str, Any] | None = None,
    **payload: Any,
) -> None:
    """Emit a structured log event with the agreed-upon schema."""

    logger = logger or LOGGER
    event: dict[str, Any] = {"step": step, "module": logger.name}
    if session_id:
        event["session_id"] = session_id
    if duration_ms is not None:
        event["duration_ms"] = round(duration_ms, 3)
    if details is not None:
        event["details"] = details
    event.update(payload)

    exc_info = None
    if exc is not None:
        if isinstance(exc, BaseException):
            event["exc"] = _format_exception(exc)
            exc_info = (exc.__class__, exc, exc.__traceback__)
        else:
            event["exc"] = str(exc)

    log_method = getattr(logger, level.lower(), logger.info)
    log_method(event, exc_info=exc_info)


def emit_app_startup_event() -> None:
    env_values = {key: os.getenv(key) for key in _ENV_KEYS_TO_LOG if os.getenv(key) is not None}
    details = {
        "env": env_values,
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "pid": os.getpid(),
    }
    log_event(LOGGER, "app.startup", details=details)


def emit_ingest_event(
    step: str,
    *,
    file_name: str,
    session_id: str | None = None,
    size_bytes: int | None = None,
    duration_ms: float | None = None,
    pages: int | None = None,
    toc_entries: int | None = None,
    error: BaseException | None = None,
) -> None:
    details = {
        "file": file_name,
        "size_bytes": size_bytes,
        "pages": pages,
        "toc_entries": toc_entries,
    }
    log_event(
        LOGGER,
        step,
        level="error" if error is not None else "info",
        session_id=session_id,
        duration_ms=duration_ms,
        details=details,
        exc=error,
    )


def emit_state_transition(
    *, session_id: str | None, source: str, target: str, trigger: str
) -> None:
    details = {"from": source, "to": target, "trigger": trigger}
    log_event(LOGGER, "session.transition", session_id=session_id, details=details)


def emit_conversation_init(
    *,
    session_id: str | None,
    provider: str,
    temperature: float,
    instruction_len: int,
    duration_ms: float,
    error: BaseException | None = None,
) -> None:
    details = {
        "provider": provider,
        "temperature": temperature,
        "instruction_len": instruction_len,
        "ok": error is None,
    }
    log_event(
        LOGGER,
        "conversation.init",
        level="error" if error is not None else "info",
        session_id=session_id,
        duration_ms=duration_ms,
        details=details,
        exc=error,
    )


def emit_conversation_turn(
    *,
    session_id: str | None,
    query: str,
    answer: str | None,
    duration_ms: float,
    fallback: bool = False,
    error: BaseException | None = None,
) -> None:
    details = {
        "query_preview": preview(query),
        "answer_preview": preview(answer) if answer is not None else None,
        "fallback": fallback,
    }
    log_event(
        LOGGER,
        "conversation.turn",
        level="error" if error is not None else "info",
        session_id=session_id,
        duration_ms=duration_ms,
        details=details,
        exc=error,
    )


def emit_exception(
    *,
    module: str,
    error: BaseException,
    session_id: str | None = None,
) -> None:
    details = {"module": module}
    log_event(
        LOGGER,
        "exception",
        level="error",
        session_id=session_id,
        details=details,
        exc=error,
    )


__all__ = [
    "emit_app_startup_event",
    "emit_conversation_init",
    "emit_conversation_turn",
    "emit_exception",
    "emit_ingest_event",
    "emit_state_transition",
    "log_event",
    "preview",
]
