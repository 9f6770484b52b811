"""PDF parsing utilities for document processing.

Turns uploaded documents into page-delimited plain text that the chat
session embeds in its grounding prompt.

Responsibilities:
    - PDF text extraction with pypdf, page by page
    - Page marker formatting, counting and stripping
    - Upload payload validation (header, size)
"""

from pdf_chat.parsing.pdf_parser import (
    ExtractionError,
    PDFContent,
    count_page_markers,
    extract_pages,
    format_pages,
    parse_pdf,
    strip_page_markers,
)

__all__ = [
    "ExtractionError",
    "PDFContent",
    "count_page_markers",
    "extract_pages",
    "format_pages",
    "parse_pdf",
    "strip_page_markers",
]
