"""Utilities for detecting the format of uploaded documents."""
from __future__ import annotations

import mimetypes
from enum import Enum
from pathlib import Path
from typing import Optional


class DocumentFormat(str, Enum):
    """Supported document formats."""

    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"


class DocumentFormatDetector:
    """Detects the document format based on file name and optional MIME type."""

    _MIME_MAP = {
        "application/pdf": DocumentFormat.PDF,
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DocumentFormat.DOCX,
        "text/plain": DocumentFormat.TXT,
    }

    @classmethod
    def detect(cls, file_name: str, mime_type: Optional[str] = None) -> DocumentFormat:
        """Return the detected document format.

        The result is advisory: an explicit MIME type wins, then
        `mimetypes.guess_type`, then the file suffix. Anything unrecognised is
        handed to the PDF extractor, which rejects payloads it cannot read.
        """

        if mime_type and mime_type in cls._MIME_MAP:
            return cls._MIME_MAP[mime_type]

        guessed_type, _ = mimetypes.guess_type(file_name or "")
        if guessed_type and guessed_type in cls._MIME_MAP:
            return cls._MIME_MAP[guessed_type]

        suffix = Path(file_name or "").suffix.lower().lstrip(".")
        try:
            return DocumentFormat(suffix)
        except ValueError:
            return DocumentFormat.PDF
