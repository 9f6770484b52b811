"""Test package for PDF Chat.

Structure:
    - unit/: Individual function and class tests
    - integration/: HTTP API workflows through the real FastAPI app

PDFs are generated in memory by a conftest helper. The completion endpoint
is always replaced (stub client or httpx.MockTransport), so no API key is
needed. Leverages pytest with pytest-check for soft assertions.
"""
