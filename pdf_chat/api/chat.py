"""Session and chat endpoints.

Thin HTTP wrapper around ChatSession: create a session, read its state,
send user turns and reset it.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from pdf_chat.chat.session import (
    ChatSession,
    RejectionReason,
    SessionLimitError,
    SessionManager,
    SessionNotFoundError,
    TurnRejectedError,
    get_session_manager,
)
from pdf_chat.models.schemas import ChatRequest, SessionState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def get_session_or_404(manager: SessionManager, session_id: str) -> ChatSession:
    try:
        return manager.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found") from e


@router.post("", response_model=SessionState, status_code=status.HTTP_201_CREATED)
async def create_session(
    manager: SessionManager = Depends(get_session_manager),
) -> SessionState:
    """Start an empty session.

    Raises:
        503: The session limit is reached.
    """
    try:
        session = manager.create()
    except SessionLimitError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    return session.snapshot()


@router.get("/{session_id}", response_model=SessionState)
async def get_session_state(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionState:
    """Return turns, flags and document info of a session."""
    return get_session_or_404(manager, session_id).snapshot()


@router.post("/{session_id}/messages", response_model=SessionState)
async def send_message(
    session_id: str,
    request: ChatRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionState:
    """Send a user turn and wait for the assistant's reply.

    Raises:
        404: Unknown session.
        409: No document is open, or a reply is still pending.
        422: Empty message.
    """
    session = get_session_or_404(manager, session_id)

    try:
        await session.send_user_turn(request.message)
    except TurnRejectedError as e:
        code = (
            status.HTTP_422_UNPROCESSABLE_ENTITY
            if e.reason is RejectionReason.EMPTY_MESSAGE
            else status.HTTP_409_CONFLICT
        )
        raise HTTPException(status_code=code, detail=str(e)) from e

    return session.snapshot()


@router.post("/{session_id}/reset", response_model=SessionState)
async def reset_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionState:
    """Close the document and clear the conversation."""
    session = get_session_or_404(manager, session_id)
    session.reset()
    return session.snapshot()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> None:
    """Reset a session and forget it."""
    try:
        manager.discard(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found") from e
    logger.info(f"Deleted session {session_id}")
