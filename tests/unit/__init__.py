"""Unit tests for individual components in isolation.

Coverage:
    - parsing/: Page extraction and the page marker scheme
    - chat/: Config, prompt assembly, completion client, sessions
    - documents/: Display handles and document snapshots

Uses a stub chat client and httpx.MockTransport for the completion endpoint.
"""
