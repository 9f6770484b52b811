"""Integration tests for the HTTP API working as a system.

Runs the real FastAPI app over ASGITransport with real PDF parsing of
in-memory documents. Only the completion endpoint is stubbed.
"""
