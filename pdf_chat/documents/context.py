"""Immutable snapshot of one ingested document."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from pdf_chat.documents.handles import DisplayHandle
from pdf_chat.parsing.pdf_parser import PDFContent, count_page_markers


class DocumentContext(BaseModel):
    """Extracted text and metadata of the document a session talks about.

    Attributes:
        source_name: Display name of the uploaded file.
        extracted_text: Page-delimited text of the whole document.
        page_count: Number of page markers in ``extracted_text``.
        ingested_at: When the document was ingested.
        display_handle: Reference to the original bytes for rendering.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    source_name: str
    extracted_text: str
    page_count: int = Field(ge=0)
    ingested_at: datetime
    display_handle: DisplayHandle

    @classmethod
    def from_extraction(
        cls,
        content: PDFContent,
        source_name: str,
        display_handle: DisplayHandle,
        ingested_at: datetime | None = None,
    ) -> "DocumentContext":
        # Page count always comes from the markers, not the PDF page tree
        return cls(
            source_name=source_name,
            extracted_text=content.text,
            page_count=count_page_markers(content.text),
            ingested_at=ingested_at or datetime.now(timezone.utc),
            display_handle=display_handle,
        )

    def release(self) -> bool:
        """Release the display handle backing this document."""
        return self.display_handle.release()
