"""Pydantic models shared by the chat core and the HTTP API.

Models:
    - Role / Turn: Conversation messages
    - ChatRequest: Incoming user turn payload
    - DocumentInfo / SessionState: Read-only session views
    - PDFUploadResponse: Document upload result
"""

from pdf_chat.models.schemas import (
    ChatRequest,
    DocumentInfo,
    PDFUploadResponse,
    Role,
    SessionState,
    Turn,
)

__all__ = [
    "ChatRequest",
    "DocumentInfo",
    "PDFUploadResponse",
    "Role",
    "SessionState",
    "Turn",
]
