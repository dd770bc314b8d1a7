"""High level ingestion entry point producing a :class:`ParsedDocument`."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional

from documind.errors import ParseFailure
from documind.telemetry import emit_ingest_event

from .extractors import DocxExtractor, PageSource, PageTextExtractor, PDFExtractor, TextExtractor
from .format_detection import DocumentFormat, DocumentFormatDetector
from .models import ParsedDocument, RawPage
from .outline import extract_outline

LOGGER = logging.getLogger(__name__)

OutlineFn = Callable[[str], List[str]]


def page_marker(page_number: int) -> str:
    """Literal marker prefixed to each page's text for citation references."""

    return f"[Page {page_number}]"


def render_page(page: RawPage) -> str:
    return f"{page_marker(page.page_number)} {page.text}\n\n"


class DocumentIngestor:
    """Turn uploaded document bytes into ordered full text and an outline."""

    def __init__(
        self,
        extractors: Optional[Dict[DocumentFormat, PageTextExtractor]] = None,
        outline: OutlineFn = extract_outline,
    ) -> None:
        self.extractors: Dict[DocumentFormat, PageTextExtractor] = extractors or {
            DocumentFormat.PDF: PDFExtractor(),
            DocumentFormat.DOCX: DocxExtractor(),
            DocumentFormat.TXT: TextExtractor(),
        }
        self.outline = outline

    async def ingest(
        self,
        data: bytes,
        file_name: str = "document.pdf",
        mime_type: Optional[str] = None,
        *,
        session_id: str | None = None,
    ) -> ParsedDocument:
        """Extract every page in order; any failure aborts the whole document."""

        started = time.perf_counter()
        emit_ingest_event(
            "ingest.start", file_name=file_name, session_id=session_id, size_bytes=len(data)
        )
        try:
            pages = await self._extract_pages(data, file_name, mime_type)
        except ParseFailure as error:
            emit_ingest_event(
                "ingest.error",
                file_name=file_name,
                session_id=session_id,
                size_bytes=len(data),
                duration_ms=(time.perf_counter() - started) * 1000.0,
                error=error,
            )
            raise

        full_text = "".join(render_page(page) for page in pages)
        toc = tuple(self.outline(full_text))
        LOGGER.info("Parsed %s: %s pages, %s outline entries", file_name, len(pages), len(toc))
        emit_ingest_event(
            "ingest.complete",
            file_name=file_name,
            session_id=session_id,
            size_bytes=len(data),
            duration_ms=(time.perf_counter() - started) * 1000.0,
            pages=len(pages),
            toc_entries=len(toc),
        )
        return ParsedDocument(full_text=full_text, toc=toc, page_count=len(pages), file_name=file_name)

    async def _extract_pages(
        self, data: bytes, file_name: str, mime_type: Optional[str]
    ) -> List[RawPage]:
        if not data:
            raise ParseFailure(f"{file_name} is empty")

        document_format = DocumentFormatDetector.detect(file_name, mime_type)
        extractor = self.extractors.get(document_format)
        if extractor is None:
            raise ParseFailure(f"No extractor configured for {document_format.value} documents")
        LOGGER.debug("Extracting %s as %s", file_name, document_format.value)

        try:
            source: PageSource = await asyncio.to_thread(extractor.open, data)
            page_count = source.page_count
        except Exception as error:
            LOGGER.exception("Failed to open %s", file_name)
            raise ParseFailure(f"Failed to parse {file_name}", cause=error) from error

        if page_count < 1:
            raise ParseFailure(f"{file_name} contains no pages")

        pages: List[RawPage] = []
        for page_number in range(1, page_count + 1):
            try:
                text = await asyncio.to_thread(source.page_text, page_number)
            except Exception as error:
                LOGGER.exception("Failed to extract page %s of %s", page_number, file_name)
                raise ParseFailure(
                    f"Failed to extract page {page_number} of {file_name}", cause=error
                ) from error
            pages.append(RawPage(page_number=page_number, text=text))
        return pages
