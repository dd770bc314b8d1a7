"""Data models used by the ingestion pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True, slots=True)
class RawPage:
    """Text extracted from a single page of the source document."""

    page_number: int
    text: str

    def __post_init__(self) -> None:
        if self.page_number < 1:
            raise ValueError("page_number must be a positive integer")


@dataclass(frozen=True, slots=True)
class ParsedDocument:
    """Ordered full text of an uploaded document plus its detected outline."""

    full_text: str
    toc: Tuple[str, ...] = field(default_factory=tuple)
    page_count: int = 0
    file_name: str = ""
