"""Environment driven runtime settings."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.3
SUPPORTED_PROVIDERS = frozenset({"gemini", "mock"})


def _env_str(name: str, default: str = "") -> str:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip()


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Invalid float for %s: %s; using default %s", name, value, default)
        return default


@dataclass(frozen=True, slots=True)
class Settings:
    """Process configuration for the chat service."""

    api_key: str = ""
    llm_provider: str = "gemini"
    model_name: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    log_dir: str = "logs"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        provider = _env_str("LLM_PROVIDER", "gemini").lower()
        if provider not in SUPPORTED_PROVIDERS:
            LOGGER.warning("Unknown LLM_PROVIDER %s; using gemini", provider)
            provider = "gemini"
        return cls(
            api_key=_env_str("GOOGLE_API_KEY") or _env_str("API_KEY"),
            llm_provider=provider,
            model_name=_env_str("LLM_MODEL", DEFAULT_MODEL) or DEFAULT_MODEL,
            temperature=_env_float("LLM_TEMPERATURE", DEFAULT_TEMPERATURE),
            log_dir=_env_str("LOG_DIR", "logs") or "logs",
            log_level=_env_str("LOG_LEVEL", "INFO").upper() or "INFO",
        )
