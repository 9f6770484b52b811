"""PDF upload and display endpoints.

Handles file upload, validation and ingestion into a chat session, and
serves the original bytes behind a live display handle.
"""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile, status

from pdf_chat.api.chat import get_session_or_404
from pdf_chat.chat.session import SessionManager, get_session_manager
from pdf_chat.documents.handles import HandleRegistry, get_handle_registry
from pdf_chat.models.schemas import PDFUploadResponse
from pdf_chat.parsing.pdf_parser import MAX_FILE_SIZE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])


def _inline_disposition(filename: str) -> str:
    # Header values are latin-1; non-ASCII or quoted names use the RFC 5987 form
    quoted = quote(filename)
    if quoted != filename:
        return f"inline; filename*=utf-8''{quoted}"
    return f'inline; filename="{filename}"'


async def _read_upload(file: UploadFile) -> tuple[str, bytes]:
    """Check the upload's name and size and return both name and bytes.

    Raises:
        HTTPException: 400 if the filename is missing or not .pdf,
            413 if the content exceeds MAX_FILE_SIZE.
    """
    filename = file.filename
    if not filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Filename is required")
    if not filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only PDF files are accepted")

    content = await file.read()
    if len(content) > MAX_FILE_SIZE:
        limit_mb = MAX_FILE_SIZE // (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"File size ({len(content) / (1024 * 1024):.1f}MB) exceeds maximum allowed ({limit_mb}MB)",
        )
    return filename, content


@router.post("/sessions/{session_id}/document", response_model=PDFUploadResponse)
async def upload_pdf(
    session_id: str,
    file: UploadFile,
    manager: SessionManager = Depends(get_session_manager),
) -> PDFUploadResponse:
    """Upload a PDF and start a conversation about it.

    A PDF that cannot be extracted yields success=False; the session
    conversation then holds the failure explanation.

    Raises:
        400: File is not a PDF.
        404: Unknown session.
        413: File exceeds 10MB limit.
    """
    session = get_session_or_404(manager, session_id)
    filename, content = await _read_upload(file)

    context = await session.ingest_document(content, filename)
    if context is None:
        logger.warning(f"PDF ingestion failed for {filename}")
        return PDFUploadResponse(
            filename=filename,
            pages=0,
            success=False,
            error=session.turns[-1].content,
        )

    return PDFUploadResponse(filename=filename, pages=context.page_count, success=True)


@router.get("/documents/{token}")
async def get_document(
    token: str,
    handles: HandleRegistry = Depends(get_handle_registry),
) -> Response:
    """Serve the original bytes of an open document for rendering."""
    try:
        stored = handles.open(token)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found") from e

    return Response(
        content=stored.data,
        media_type=stored.media_type,
        headers={"Content-Disposition": _inline_disposition(stored.filename)},
    )
