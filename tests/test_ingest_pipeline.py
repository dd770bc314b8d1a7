"""Tests for the document ingestor using fake and real extractors."""
from __future__ import annotations

import asyncio
import io
import re

import pytest
from PyPDF2 import PdfWriter

from documind.errors import ParseFailure
from documind.ingest import FALLBACK_OUTLINE, DocumentFormat, DocumentIngestor

from conftest import FakeExtractor


def _ingestor(extractor: FakeExtractor) -> DocumentIngestor:
    return DocumentIngestor({fmt: extractor for fmt in DocumentFormat})


def test_pages_are_marked_in_ascending_order() -> None:
    extractor = FakeExtractor(["alpha", "beta", "gamma", "delta"])

    document = asyncio.run(_ingestor(extractor).ingest(b"payload", "doc.pdf"))

    assert document.full_text == (
        "[Page 1] alpha\n\n[Page 2] beta\n\n[Page 3] gamma\n\n[Page 4] delta\n\n"
    )
    markers = [int(value) for value in re.findall(r"\[Page (\d+)\]", document.full_text)]
    assert markers == [1, 2, 3, 4]
    assert extractor.source.requested == [1, 2, 3, 4]
    assert document.page_count == 4
    assert document.file_name == "doc.pdf"


def test_outline_is_computed_from_full_text() -> None:
    extractor = FakeExtractor(["Cover page\n1. Introduction\nbody", "Summary\nII. Results"])

    document = asyncio.run(_ingestor(extractor).ingest(b"payload", "doc.pdf"))

    assert document.toc == ("1. Introduction", "II. Results")


def test_outline_falls_back_when_nothing_detected() -> None:
    extractor = FakeExtractor(["plain prose only"])

    document = asyncio.run(_ingestor(extractor).ingest(b"payload", "doc.pdf"))

    assert document.toc == FALLBACK_OUTLINE


def test_failure_on_any_page_aborts_ingestion() -> None:
    extractor = FakeExtractor(["one", "two", "three"], fail_on=2)

    with pytest.raises(ParseFailure) as excinfo:
        asyncio.run(_ingestor(extractor).ingest(b"payload", "doc.pdf"))

    assert "page 2" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert extractor.source.requested == [1, 2]


def test_unreadable_payload_raises_parse_failure() -> None:
    extractor = FakeExtractor([], open_error=ValueError("bad header"))

    with pytest.raises(ParseFailure):
        asyncio.run(_ingestor(extractor).ingest(b"payload", "doc.pdf"))


def test_zero_pages_raises_parse_failure() -> None:
    with pytest.raises(ParseFailure):
        asyncio.run(_ingestor(FakeExtractor([])).ingest(b"payload", "doc.pdf"))


def test_empty_payload_raises_parse_failure() -> None:
    with pytest.raises(ParseFailure):
        asyncio.run(_ingestor(FakeExtractor(["text"])).ingest(b"", "doc.pdf"))


def test_default_extractors_handle_real_pdf_and_text() -> None:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    ingestor = DocumentIngestor()

    pdf_document = asyncio.run(ingestor.ingest(buffer.getvalue(), "blank.pdf"))
    text_document = asyncio.run(
        ingestor.ingest(b"Table of Contents\nScope of work 4\fBody\n4. Scope Of Work", "notes.txt")
    )

    assert pdf_document.full_text == "[Page 1] \n\n[Page 2] \n\n"
    assert pdf_document.page_count == 2
    assert text_document.page_count == 2
    assert text_document.toc == ("Scope of work 4", "4. Scope Of Work")


def test_garbage_pdf_raises_parse_failure() -> None:
    with pytest.raises(ParseFailure):
        asyncio.run(DocumentIngestor().ingest(b"definitely not a pdf", "broken.pdf"))
