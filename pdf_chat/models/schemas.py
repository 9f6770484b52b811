import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


def _new_turn_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Turn(BaseModel):
    """One message in the conversation. Immutable once created.

    Attributes:
        id: Unique identifier, generated per turn.
        role: Who authored the turn.
        content: Message text.
        created_at: Creation timestamp (UTC).
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_turn_id)
    role: Role
    content: str
    created_at: datetime = Field(default_factory=_utcnow)


class ChatRequest(BaseModel):
    """Request payload for sending a user turn.

    Attributes:
        message: User's question about the open document.
    """

    message: str = Field(..., min_length=1)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class DocumentInfo(BaseModel):
    """Presentation view of the open document.

    Attributes:
        source_name: Uploaded file name.
        page_count: Number of extracted pages.
        ingested_at: When the document was ingested.
        display_url: Where the original bytes can be fetched for rendering.
    """

    source_name: str
    page_count: int = Field(ge=0)
    ingested_at: datetime
    display_url: str


class SessionState(BaseModel):
    """Read-only snapshot of a chat session.

    Attributes:
        session_id: Session identifier.
        turns: Conversation turns in order.
        pending: Whether a reply is being generated.
        loading: Whether a document is being ingested.
        document: The open document, if any.
    """

    session_id: str
    turns: list[Turn]
    pending: bool
    loading: bool
    document: DocumentInfo | None = None


class PDFUploadResponse(BaseModel):
    """Response after PDF upload processing.

    Attributes:
        filename: Name of the uploaded file.
        pages: Number of pages in the document.
        success: Whether the upload was successful.
        error: Error message if upload failed.
    """

    filename: str
    pages: int
    success: bool
    error: str | None = None
