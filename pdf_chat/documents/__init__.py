"""Document snapshots and the byte handles that back their display."""

from pdf_chat.documents.context import DocumentContext
from pdf_chat.documents.handles import (
    DisplayHandle,
    HandleRegistry,
    StoredDocument,
    get_handle_registry,
)

__all__ = [
    "DisplayHandle",
    "DocumentContext",
    "HandleRegistry",
    "StoredDocument",
    "get_handle_registry",
]
