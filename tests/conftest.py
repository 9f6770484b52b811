"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - make_pdf: Builds small text PDFs in memory
    - stub_client: Chat client double with a configurable outcome
    - handles: Fresh display handle registry
    - session: ChatSession wired to the doubles
    - async_client: HTTPX client for API testing

PDF bytes are written by hand so tests need no binary fixtures on disk.
"""

import asyncio
from collections.abc import AsyncGenerator, Callable, Sequence

import pytest
from httpx import ASGITransport, AsyncClient

from pdf_chat.api.app import create_app
from pdf_chat.chat.client import CompletionOutcome, Success
from pdf_chat.chat.config import PromptConfig, SessionConfig
from pdf_chat.chat.session import ChatSession, SessionManager, get_session_manager
from pdf_chat.documents.handles import HandleRegistry, get_handle_registry
from pdf_chat.models.schemas import Turn
from pdf_chat.parsing.pdf_parser import PDFContent


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(page_texts: Sequence[str]) -> bytes:
    """Write a minimal PDF with one Helvetica text line per page."""
    page_count = len(page_texts)
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(page_count))
    objects: list[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {page_count} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for i, text in enumerate(page_texts):
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * i} 0 R >>"
            ).encode()
        )
        stream = f"BT /F1 12 Tf 72 720 Td ({_escape(text)}) Tj ET".encode("latin-1")
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_offset}\n%%EOF\n"
    ).encode()
    return bytes(out)


class StubChatClient:
    """Records completion calls and returns a fixed outcome.

    Set ``gate`` to an ``asyncio.Event`` to hold replies until it is set.
    """

    def __init__(self, outcome: CompletionOutcome | None = None) -> None:
        self.outcome: CompletionOutcome = outcome or Success(text="It is about X.")
        self.calls: list[tuple[str, list[Turn], str]] = []
        self.gate: asyncio.Event | None = None

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[Turn],
        new_user_content: str,
    ) -> CompletionOutcome:
        self.calls.append((system_prompt, list(history), new_user_content))
        if self.gate is not None:
            await self.gate.wait()
        return self.outcome


def three_page_extractor(data: bytes) -> PDFContent:
    return PDFContent.from_pages(["A", "B", "C"])


@pytest.fixture
def make_pdf() -> Callable[[Sequence[str]], bytes]:
    """Return the in-memory PDF builder."""
    return build_pdf


@pytest.fixture
def stub_client() -> StubChatClient:
    return StubChatClient()


@pytest.fixture
def handles() -> HandleRegistry:
    return HandleRegistry()


@pytest.fixture
def prompt_config() -> PromptConfig:
    return PromptConfig(response_language="English", date_format="%d/%m/%Y", max_document_chars=None)


@pytest.fixture
def session(
    stub_client: StubChatClient,
    handles: HandleRegistry,
    prompt_config: PromptConfig,
) -> ChatSession:
    """Empty session whose extractor always yields pages A, B, C."""
    return ChatSession(
        session_id="test-session-12345",
        client=stub_client,
        handles=handles,
        extractor=three_page_extractor,
        prompt_config=prompt_config,
    )


@pytest.fixture
def session_manager(
    stub_client: StubChatClient,
    handles: HandleRegistry,
    prompt_config: PromptConfig,
) -> SessionManager:
    """Manager using the real PDF parser and the stub chat client."""
    return SessionManager(
        client=stub_client,
        handles=handles,
        prompt_config=prompt_config,
        session_config=SessionConfig(max_sessions=50, idle_ttl_seconds=3600),
    )


@pytest.fixture
async def async_client(
    session_manager: SessionManager,
    handles: HandleRegistry,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient bound to an app using the test doubles.
    """
    app = create_app()
    app.dependency_overrides[get_session_manager] = lambda: session_manager
    app.dependency_overrides[get_handle_registry] = lambda: handles

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
