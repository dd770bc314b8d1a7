"""JSON logging for the service and its per-session audit trail."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

AUDIT_LOGGER_NAME = "documind.session.audit"
AUDIT_FILE_NAME = "session_audit.log"

REDACTED = "[redacted]"
# Credentials and whole-document payloads never reach a log sink.
SENSITIVE_KEYS = frozenset(
    {"api_key", "credential", "document_text", "full_text", "system_instruction"}
)

_STANDARD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _scrub(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            key: REDACTED if key in SENSITIVE_KEYS else _scrub(item)
            for key, item in value.items()
        }
    return value


class SessionJSONFormatter(logging.Formatter):
    """One JSON object per record; dict messages become top-level fields."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
        }

        if isinstance(record.msg, Mapping):
            payload.update(record.msg)
        elif record.getMessage():
            payload["message"] = record.getMessage()

        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRIBUTES and not key.startswith("_")
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(_scrub(payload), ensure_ascii=False, default=str)


def build_logging_config(log_dir: Path, level: str = "INFO") -> dict[str, Any]:
    """Return the ``dictConfig`` mapping for console output plus the audit file."""

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"session_json": {"()": SessionJSONFormatter}},
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "session_json"},
            "audit_file": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / AUDIT_FILE_NAME),
                "encoding": "utf-8",
                "delay": True,
                "formatter": "session_json",
            },
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            AUDIT_LOGGER_NAME: {
                "level": "INFO",
                "handlers": ["audit_file"],
                "propagate": False,
            }
        },
    }


def configure_logging(log_dir: str | Path = "logs", level: str = "INFO") -> Path:
    """Install JSON logging and return the audit file location."""

    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(directory, level))
    return directory / AUDIT_FILE_NAME
