"""
Statement Text Extraction

PDF-to-text extraction behind a small interface so the dispatcher does not
depend on a particular PDF library:

    class TextExtractor(Protocol):
        async def extract_text(self, data: bytes) -> str: ...

PdfPlumberExtractor is the default implementation. Page texts are joined
with newlines so statement rows stay on separate lines for the classifier.
"""

import asyncio
import io
from typing import Protocol

import pdfplumber

from ..errors import ExtractionError
from ..logging_config import get_logger

logger = get_logger(__name__)


class TextExtractor(Protocol):
    """Turns document bytes into plain text."""

    async def extract_text(self, data: bytes) -> str:
        """Return the document text or raise ExtractionError."""


def extract_text_from_pdf(pdf_bytes: bytes) -> str:
    """
    Extract text content from a PDF file (blocking).

    Args:
        pdf_bytes: Raw PDF file content

    Returns:
        Extracted text, one page per block

    Raises:
        ExtractionError: If the bytes are not a readable PDF
    """
    if not pdf_bytes:
        raise ExtractionError("PDF file is empty")

    try:
        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            text_parts = []
            for page in pdf.pages:
                page_text = page.extract_text()
                if page_text:
                    text_parts.append(page_text)
            page_count = len(pdf.pages)
    except Exception as e:
        raise ExtractionError(f"PDF extraction failed: {e}") from e

    text = "\n".join(text_parts)
    logger.info(f"Extracted {len(text)} characters from {page_count} PDF pages")
    return text


class PdfPlumberExtractor:
    """TextExtractor backed by pdfplumber, run in a worker thread."""

    async def extract_text(self, data: bytes) -> str:
        return await asyncio.to_thread(extract_text_from_pdf, data)
