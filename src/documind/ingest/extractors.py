"""Page text extractors for supported document types."""
from __future__ import annotations

import io
import logging
import re
import unicodedata
from abc import ABC, abstractmethod
from typing import List, Sequence

from docx import Document as load_docx
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

LOGGER = logging.getLogger(__name__)

FORM_FEED = "\f"

_INLINE_SPACE_RE = re.compile(r"[ \t\x00\xa0]+")
_SPLIT_WORD_RE = re.compile(r"([A-Za-z])-\n([a-z])")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def clean_page_text(text: str) -> str:
    """Tidy extracted page text while keeping one heading candidate per line.

    Line breaks survive because the outline scan is line based. Words that a
    PDF layout hyphenated across a line end are rejoined so that
    ``1. Introduc-\\ntion`` still reads as a heading.
    """

    text = unicodedata.normalize("NFC", text).replace("\r\n", "\n").replace("\r", "\n")
    lines = [_INLINE_SPACE_RE.sub(" ", line).strip() for line in text.split("\n")]
    joined = _SPLIT_WORD_RE.sub(r"\1\2", "\n".join(lines))
    return _BLANK_RUN_RE.sub("\n\n", joined).strip()


class PageSource(ABC):
    """An opened document that serves page text by 1-based page number."""

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Return the number of pages available."""

    @abstractmethod
    def page_text(self, page_number: int) -> str:
        """Return the cleaned text of ``page_number``."""


class PageTextExtractor(ABC):
    """Open binary document data and expose it page by page."""

    @abstractmethod
    def open(self, data: bytes) -> PageSource:
        """Parse ``data``; raise on malformed or unreadable payloads."""


class StaticPageSource(PageSource):
    """Page source backed by text that was fully decoded up front."""

    def __init__(self, pages: Sequence[str]) -> None:
        self._pages: List[str] = [clean_page_text(page) for page in pages]

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def page_text(self, page_number: int) -> str:
        if not 1 <= page_number <= len(self._pages):
            raise IndexError(f"page {page_number} out of range 1..{len(self._pages)}")
        return self._pages[page_number - 1]


class _PdfPageSource(PageSource):
    def __init__(self, reader: PdfReader) -> None:
        self._reader = reader

    @property
    def page_count(self) -> int:
        return len(self._reader.pages)

    def page_text(self, page_number: int) -> str:
        page = self._reader.pages[page_number - 1]
        return clean_page_text(page.extract_text() or "")


class PDFExtractor(PageTextExtractor):
    """Extract page text from PDF documents with PyPDF2."""

    def open(self, data: bytes) -> PageSource:
        try:
            reader = PdfReader(io.BytesIO(data))
        except PdfReadError as error:
            raise ValueError(f"Unreadable PDF payload: {error}") from error

        if reader.is_encrypted:
            LOGGER.info("PDF is encrypted; trying an empty password")
            if not reader.decrypt(""):
                raise ValueError("PDF is password protected")
        return _PdfPageSource(reader)


class DocxExtractor(PageTextExtractor):
    """Extract paragraphs from Microsoft Word documents as a single page."""

    def open(self, data: bytes) -> PageSource:
        document = load_docx(io.BytesIO(data))
        paragraphs = [paragraph.text for paragraph in document.paragraphs if paragraph.text]
        return StaticPageSource(["\n".join(paragraphs)])


class TextExtractor(PageTextExtractor):
    """Extract plaintext documents, treating form feeds as page breaks."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def open(self, data: bytes) -> PageSource:
        text = data.decode(self.encoding)
        pages = text.split(FORM_FEED)
        if pages and not pages[-1].strip():
            pages = pages[:-1]
        return StaticPageSource(pages)
