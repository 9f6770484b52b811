"""PDF Chat - conversations grounded in an uploaded document.

Combines FastAPI for HTTP, httpx for the chat completion endpoint,
pypdf for text extraction, and Pydantic for data validation.

Components:
    - api: HTTP endpoints for sessions, uploads and document bytes
    - chat: Conversation store, prompt assembly, completion client, sessions
    - documents: Document snapshots and display handles
    - parsing: Page-by-page PDF text extraction
    - models: Turn and request/response schemas
"""

__version__ = "0.1.0"
