"""PDF text extraction using pypdf.

Turns raw PDF bytes into page-delimited plain text. Every page is wrapped
with a marker line so the page count can be recovered from the text alone.
"""

import io
import logging
import re
from collections.abc import Sequence

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
PDF_MAGIC_BYTES = b"%PDF"
PAGE_MARKER_TEMPLATE = "--- Page {number} ---"
PAGE_MARKER_PATTERN = re.compile(r"^--- Page \d+ ---$", re.MULTILINE)


class ExtractionError(Exception):
    """Raised when a document cannot be parsed or none of its pages can be read."""

    pass


class PDFContent(BaseModel):
    """Extracted content from a PDF file.

    Attributes:
        page_texts: Plain text of each page, in page order.
        text: All pages joined, each preceded by its page marker.
        pages: Number of page markers in ``text``.
    """

    page_texts: list[str]
    text: str
    pages: int = Field(ge=0)

    @classmethod
    def from_pages(cls, page_texts: Sequence[str]) -> "PDFContent":
        """Build the combined, marker-delimited content from per-page text."""
        text = format_pages(page_texts)
        return cls(page_texts=list(page_texts), text=text, pages=count_page_markers(text))


def page_marker(number: int) -> str:
    """Return the marker line for a 1-based page number."""
    return PAGE_MARKER_TEMPLATE.format(number=number)


def format_pages(page_texts: Sequence[str]) -> str:
    """Join page texts, placing a page marker line before each page.

    Args:
        page_texts: Text of each page, in page order.

    Returns:
        Combined text, e.g. ``"--- Page 1 ---\\nA\\n--- Page 2 ---\\nB\\n"``.
    """
    return "".join(
        f"{page_marker(number)}\n{page_text}\n"
        for number, page_text in enumerate(page_texts, start=1)
    )


def count_page_markers(text: str) -> int:
    """Count page marker lines in combined text."""
    return len(PAGE_MARKER_PATTERN.findall(text))


def strip_page_markers(text: str) -> str:
    """Remove page markers and recover the concatenated page content."""
    parts = PAGE_MARKER_PATTERN.split(text)
    # Each page body sits between "\n" after its marker and "\n" before the next one
    return "".join(part.removeprefix("\n").removesuffix("\n") for part in parts)


def _validate_pdf_bytes(file_content: bytes) -> None:
    """Validate PDF file content before parsing.

    Args:
        file_content: Raw bytes of the PDF file.

    Raises:
        ExtractionError: If validation fails.
    """
    if not file_content:
        raise ExtractionError("Empty file provided")

    if len(file_content) > MAX_FILE_SIZE:
        size_mb = len(file_content) / (1024 * 1024)
        raise ExtractionError(f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)")

    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise ExtractionError("Invalid PDF: file does not start with PDF header")


def _page_text(page) -> str:
    """Join the text fragments of one page with single spaces.

    Positioning and line breaks are discarded; fragments are collected in
    content-stream order.
    """
    fragments: list[str] = []

    def visitor(text, cm, tm, font_dict, font_size) -> None:
        fragment = " ".join(text.split())
        if fragment:
            fragments.append(fragment)

    page.extract_text(visitor_text=visitor)
    return " ".join(fragments)


def extract_pages(file_content: bytes) -> list[str]:
    """Extract the plain text of every page, in page order.

    Args:
        file_content: Raw bytes of the PDF file.

    Returns:
        One string per page. Empty list for a document without pages.

    Raises:
        ExtractionError: If the bytes are not a readable PDF, or the document
            has pages and none of them can be read.
    """
    try:
        reader = PdfReader(io.BytesIO(file_content))
        pages = list(reader.pages)
    except PdfReadError as e:
        raise ExtractionError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise ExtractionError(f"Failed to read PDF: {e}") from e

    page_texts: list[str] = []
    failed = 0
    for i, page in enumerate(pages):
        try:
            page_texts.append(_page_text(page))
        except Exception as e:
            logger.warning(f"Failed to extract text from page {i + 1}: {e}")
            failed += 1
            page_texts.append("")

    if pages and failed == len(pages):
        raise ExtractionError("No pages could be read from the PDF")

    return page_texts


def parse_pdf(file_content: bytes) -> PDFContent:
    """Parse a PDF file and extract its page-delimited text content.

    Args:
        file_content: Raw bytes of the PDF file.

    Returns:
        PDFContent with per-page text, combined text and page count.

    Raises:
        ExtractionError: If the file is invalid, too large, empty, or corrupt.
    """
    _validate_pdf_bytes(file_content)

    content = PDFContent.from_pages(extract_pages(file_content))

    if not "".join(content.page_texts).strip():
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")

    return content
