"""Document ingestion: page extraction, full-text assembly and outline detection."""

from .extractors import DocxExtractor, PageSource, PageTextExtractor, PDFExtractor, TextExtractor
from .format_detection import DocumentFormat, DocumentFormatDetector
from .models import ParsedDocument, RawPage
from .outline import FALLBACK_OUTLINE, extract_outline
from .pipeline import DocumentIngestor, page_marker

__all__ = [
    "DocumentFormat",
    "DocumentFormatDetector",
    "DocumentIngestor",
    "DocxExtractor",
    "FALLBACK_OUTLINE",
    "PDFExtractor",
    "PageSource",
    "PageTextExtractor",
    "ParsedDocument",
    "RawPage",
    "TextExtractor",
    "extract_outline",
    "page_marker",
]
