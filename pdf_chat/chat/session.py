"""Document-grounded chat sessions.

A ``ChatSession`` owns one open document and one conversation. It is the only
place either is mutated, through three entry points:

- ``ingest_document``: extract a PDF and start a fresh conversation about it
- ``send_user_turn``: ask a question and append the assistant's reply
- ``reset``: drop the document and the conversation

Failures never escape these methods. Extraction and completion errors become
assistant turns explaining what went wrong, and the loading/pending flags are
always cleared so the user can retry immediately.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Callable
from enum import Enum

from pydantic import ValidationError

from pdf_chat.chat.client import (
    ChatClient,
    CompletionOutcome,
    ConfigurationFailure,
    ParseFailure,
    Success,
    TransportFailure,
    configuration_reason,
    get_chat_client,
)
from pdf_chat.chat.config import PromptConfig, SessionConfig, get_prompt_config, get_session_config
from pdf_chat.chat.conversation import ConversationStore
from pdf_chat.chat.prompt import build_system_prompt
from pdf_chat.documents.context import DocumentContext
from pdf_chat.documents.handles import HandleRegistry, get_handle_registry
from pdf_chat.models.schemas import DocumentInfo, Role, SessionState, Turn
from pdf_chat.parsing.pdf_parser import ExtractionError, PDFContent, parse_pdf

logger = logging.getLogger(__name__)

EXTRACTION_FAILED_TEXT = (
    "Sorry, something went wrong while processing the PDF. "
    "Please make sure the file is a valid PDF."
)
GENERIC_FAILURE_TEXT = "Sorry, something went wrong while processing your request."


class RejectionReason(str, Enum):
    EMPTY_MESSAGE = "empty_message"
    NO_DOCUMENT = "no_document"
    PENDING = "pending"


class TurnRejectedError(Exception):
    """Raised when a user turn cannot be sent in the current session state."""

    def __init__(self, reason: RejectionReason, message: str) -> None:
        self.reason = reason
        super().__init__(message)


class SessionNotFoundError(KeyError):
    """Raised when a session id is unknown."""

    pass


class SessionLimitError(Exception):
    """Raised when the manager already holds its maximum number of sessions."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Session limit of {limit} reached")


def ingestion_message(context: DocumentContext) -> str:
    return (
        f'PDF "{context.source_name}" was uploaded and processed successfully! '
        f"I can now help you understand this document. It has {context.page_count} pages. "
        "Feel free to ask any questions about it."
    )


def reply_for_outcome(outcome: CompletionOutcome) -> str:
    """Map a completion outcome to the assistant turn shown to the user."""
    if isinstance(outcome, Success):
        return outcome.text
    if isinstance(outcome, ConfigurationFailure):
        return (
            f"The assistant is not configured yet ({outcome.reason}). "
            "Check the settings in .env and try again."
        )
    if isinstance(outcome, TransportFailure):
        if outcome.status_code is None:
            return "Sorry, the chat service could not be reached. Please check the connection and try again."
        return f"Sorry, the chat service returned an error (HTTP {outcome.status_code}). Please try again."
    return GENERIC_FAILURE_TEXT


class ChatSession:
    """One document and the conversation about it."""

    def __init__(
        self,
        session_id: str | None = None,
        client: ChatClient | None = None,
        handles: HandleRegistry | None = None,
        extractor: Callable[[bytes], PDFContent] = parse_pdf,
        prompt_config: PromptConfig | None = None,
    ) -> None:
        """Initialize an empty session.

        Args:
            session_id: Identifier, generated if omitted.
            client: Completion client. Defaults to the shared client.
            handles: Registry backing document display handles.
            extractor: Turns uploaded bytes into page-delimited content.
            prompt_config: Grounding prompt settings. Read from the environment
                on every send if omitted.
        """
        self.session_id = session_id or uuid.uuid4().hex
        self._client = client if client is not None else get_chat_client()
        self._handles = handles if handles is not None else get_handle_registry()
        self._extractor = extractor
        self._prompt_config = prompt_config
        self._context: DocumentContext | None = None
        self._store = ConversationStore()
        self._loading = False
        # Bumped whenever the store is replaced; replies for older generations are dropped
        self._generation = 0

    @property
    def document(self) -> DocumentContext | None:
        return self._context

    @property
    def turns(self) -> tuple[Turn, ...]:
        return self._store.turns

    @property
    def pending(self) -> bool:
        return self._store.pending

    @property
    def loading(self) -> bool:
        return self._loading

    def _replace_store(self, store: ConversationStore) -> None:
        self._store = store
        self._generation += 1

    def _discard_context(self) -> None:
        if self._context is not None:
            self._context.release()
            self._context = None

    async def ingest_document(self, data: bytes, source_name: str) -> DocumentContext | None:
        """Extract a document and start a new conversation about it.

        On success the previous document is released and replaced. On failure
        the previous document stays open. Either way the conversation is reset
        to a single assistant turn describing the result.

        Args:
            data: Raw bytes of the uploaded file.
            source_name: Display name of the file.

        Returns:
            The new document context, or None if extraction failed.
        """
        self._loading = True
        try:
            try:
                content = await asyncio.to_thread(self._extractor, data)
            except ExtractionError as e:
                logger.error(f"Failed to extract {source_name}: {e}")
                self._replace_store(ConversationStore.with_assistant_turn(EXTRACTION_FAILED_TEXT))
                return None
            except Exception:
                logger.exception(f"Extractor crashed on {source_name}")
                self._replace_store(ConversationStore.with_assistant_turn(EXTRACTION_FAILED_TEXT))
                return None

            handle = self._handles.register(data, filename=source_name)
            try:
                context = DocumentContext.from_extraction(content, source_name, handle)
            except Exception:
                handle.release()
                raise

            self._discard_context()
            self._context = context
            self._replace_store(ConversationStore.with_assistant_turn(ingestion_message(context)))
            logger.info(
                f"Session {self.session_id}: ingested {source_name} ({context.page_count} pages)"
            )
            return context
        finally:
            self._loading = False

    def _check_can_send(self, content: str) -> None:
        if not content or not content.strip():
            raise TurnRejectedError(RejectionReason.EMPTY_MESSAGE, "Message is empty")
        if self._context is None:
            raise TurnRejectedError(RejectionReason.NO_DOCUMENT, "No document is open")
        if self._store.pending:
            raise TurnRejectedError(
                RejectionReason.PENDING, "A reply is still being generated"
            )

    async def send_user_turn(self, content: str) -> Turn | None:
        """Append a user turn and the assistant's reply to it.

        The user turn is appended before the request is issued, so it is part
        of the conversation while the reply is pending.

        Args:
            content: The user's message.

        Returns:
            The assistant turn, or None if the session was reset or given a new
            document while the request was in flight.

        Raises:
            TurnRejectedError: If the message is blank, no document is open,
                or another reply is pending. Nothing is changed in that case.
        """
        try:
            self._check_can_send(content)
        except TurnRejectedError as e:
            logger.warning(f"Session {self.session_id}: turn rejected ({e.reason.value})")
            raise

        store = self._store
        generation = self._generation
        history = store.turns
        store.append(Role.USER, content)
        store.pending = True

        try:
            prompt_config = self._prompt_config if self._prompt_config is not None else get_prompt_config()
            system_prompt = build_system_prompt(self._context, prompt_config)
            outcome = await self._client.complete(system_prompt, history, content)
        except ValidationError as e:
            reason = configuration_reason(e)
            logger.error(f"Session {self.session_id}: prompt settings are invalid: {reason}")
            outcome = ConfigurationFailure(reason=reason)
        except Exception as e:
            logger.exception(f"Session {self.session_id}: completion raised unexpectedly")
            outcome = ParseFailure(detail=str(e))
        finally:
            store.pending = False

        if generation != self._generation:
            logger.warning(f"Session {self.session_id}: discarding reply that arrived after reset")
            return None

        return store.append(Role.ASSISTANT, reply_for_outcome(outcome))

    def reset(self) -> None:
        """Close the document and clear the conversation.

        An in-flight request is not cancelled; its reply is discarded when it
        arrives.
        """
        self._discard_context()
        self._replace_store(ConversationStore())
        logger.info(f"Session {self.session_id}: reset")

    def snapshot(self) -> SessionState:
        """Read-only view of the session for the presentation layer."""
        document = None
        if self._context is not None:
            document = DocumentInfo(
                source_name=self._context.source_name,
                page_count=self._context.page_count,
                ingested_at=self._context.ingested_at,
                display_url=self._context.display_handle.url,
            )
        return SessionState(
            session_id=self.session_id,
            turns=list(self.turns),
            pending=self.pending,
            loading=self.loading,
            document=document,
        )


class SessionManager:
    """Keeps independent chat sessions keyed by session id.

    Sessions idle for longer than ``idle_ttl_seconds`` are discarded (their
    documents released) the next time the registry is touched, unless a reply
    is pending or a document is loading. At most ``max_sessions`` are held.
    """

    def __init__(
        self,
        client: ChatClient | None = None,
        handles: HandleRegistry | None = None,
        extractor: Callable[[bytes], PDFContent] = parse_pdf,
        prompt_config: PromptConfig | None = None,
        session_config: SessionConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._handles = handles
        self._extractor = extractor
        self._prompt_config = prompt_config
        self._config = session_config if session_config is not None else get_session_config()
        self._clock = clock
        self._sessions: dict[str, ChatSession] = {}
        self._last_used: dict[str, float] = {}

    def _expire_idle(self) -> int:
        now = self._clock()
        expired = [
            session_id
            for session_id, last_used in self._last_used.items()
            if now - last_used > self._config.idle_ttl_seconds
            and not (self._sessions[session_id].pending or self._sessions[session_id].loading)
        ]
        for session_id in expired:
            logger.info(f"Expiring idle session {session_id}")
            self.discard(session_id)
        return len(expired)

    def create(self) -> ChatSession:
        """Start a new empty session.

        Raises:
            SessionLimitError: If ``max_sessions`` live sessions already exist.
        """
        self._expire_idle()
        if len(self._sessions) >= self._config.max_sessions:
            logger.warning(f"Session limit reached ({self._config.max_sessions})")
            raise SessionLimitError(self._config.max_sessions)

        session = ChatSession(
            client=self._client,
            handles=self._handles,
            extractor=self._extractor,
            prompt_config=self._prompt_config,
        )
        self._sessions[session.session_id] = session
        self._last_used[session.session_id] = self._clock()
        logger.info(f"Created session {session.session_id}")
        return session

    def get(self, session_id: str) -> ChatSession:
        """Look up a session and mark it as used.

        Raises:
            SessionNotFoundError: If no session has this id, or it expired.
        """
        self._expire_idle()
        try:
            session = self._sessions[session_id]
        except KeyError as e:
            raise SessionNotFoundError(session_id) from e
        self._last_used[session_id] = self._clock()
        return session

    def discard(self, session_id: str) -> None:
        """Reset a session, releasing its document, and forget it."""
        try:
            session = self._sessions.pop(session_id)
        except KeyError as e:
            raise SessionNotFoundError(session_id) from e
        self._last_used.pop(session_id, None)
        session.reset()

    def close_all(self) -> int:
        """Discard every session.

        Returns:
            Number of sessions closed.
        """
        session_ids = list(self._sessions)
        for session_id in session_ids:
            self.discard(session_id)
        return len(session_ids)

    def __len__(self) -> int:
        return len(self._sessions)


# Module-level singleton instance
_session_manager: SessionManager | None = None


def get_session_manager() -> SessionManager:
    """Get or create the global session manager.

    Returns:
        The SessionManager instance.
    """
    global _session_manager
    if _session_manager is None:
        _session_manager = SessionManager()
    return _session_manager
