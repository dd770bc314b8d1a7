"""Construction of the grounding system instruction for a chat session."""
from __future__ import annotations

from pathlib import Path

from documind.session.models import Persona

_SYSTEM_PROMPT_PATH = Path(__file__).resolve().parent / "prompts" / "system.txt"

PRIMING_MESSAGE = "Acknowledge receipt of the document and stand by."


def _load_template(path: Path) -> str:
    """Read and trim the contents of a template file."""
    return path.read_text(encoding="utf-8").strip()


_SYSTEM_TEMPLATE = _load_template(_SYSTEM_PROMPT_PATH)


def build_system_instruction(persona: Persona, document_text: str) -> str:
    """Embed the persona fields and the full document text verbatim."""

    if document_text is None:
        raise ValueError("document_text must not be None")

    return _SYSTEM_TEMPLATE.format(
        domain=persona.domain,
        industry=persona.industry,
        role=persona.role,
        doc_title=persona.doc_title,
        doc_topic=persona.doc_topic,
        document_text=document_text,
    )


__all__ = ["PRIMING_MESSAGE", "build_system_instruction"]
