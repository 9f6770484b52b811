"""FastAPI endpoints for PDF chat sessions.

Endpoints:
    - GET /health: Service health status
    - POST /sessions: Start a session
    - GET /sessions/{id}: Turns, flags and open document
    - POST /sessions/{id}/document: Upload a PDF into the session
    - POST /sessions/{id}/messages: Send a user turn
    - POST /sessions/{id}/reset: Close the document and clear the chat
    - DELETE /sessions/{id}: Forget the session
    - GET /documents/{token}: Original bytes of an open document
"""

from pdf_chat.api.app import app, create_app

__all__ = ["app", "create_app"]
