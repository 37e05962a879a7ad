# quiz_gateway/pdf_processor.py
"""PDF text extraction and the content gate in front of the model call."""

import io
import logging
import re
from typing import List

from pypdf import PdfReader

from quiz_gateway.errors import ExtractionError

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 100
MIN_WORD_COUNT = 20

_WHITESPACE_RE = re.compile(r"\s+")
_PAGE_MARKER_RE = re.compile(r"Page \d+ of \d+", re.IGNORECASE)


def clean_text(text: str) -> str:
    """Collapse whitespace, drop "Page N of M" footers and trim."""
    text = _WHITESPACE_RE.sub(" ", text)
    text = _PAGE_MARKER_RE.sub("", text)
    # removing a marker can leave a double space behind
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_text(pdf_bytes: bytes) -> str:
    """Extract plain text from a PDF buffer.

    Args:
        pdf_bytes: Raw PDF file bytes

    Returns:
        Cleaned text of all pages joined together

    Raises:
        ExtractionError: if pypdf cannot read the document
    """
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        pages: List[str] = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        logger.warning("PDF text extraction failed: %s", e)
        raise ExtractionError(f"Failed to extract text from PDF: {e}") from e

    text = clean_text("\n".join(pages))
    logger.debug("Extracted %d characters from %d pages", len(text), len(pages))
    return text


def is_content_sufficient(text: str) -> bool:
    """True when the text is long enough to be worth a model call."""
    if len(text) < MIN_CONTENT_LENGTH:
        return False
    return len(text.split()) >= MIN_WORD_COUNT
