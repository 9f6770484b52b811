"""Document-grounded chat logic.

Responsibilities:
    - Conversation log and in-flight flag per session
    - Grounding prompt assembly from the open document
    - One request/response cycle against the completion endpoint
    - Session orchestration: ingest, send, reset

Maintains clean separation from the HTTP layer.
"""

from pdf_chat.chat.client import (
    ChatClient,
    CompletionOutcome,
    ConfigurationFailure,
    ParseFailure,
    Success,
    TransportFailure,
    get_chat_client,
)
from pdf_chat.chat.config import (
    ChatConfig,
    PromptConfig,
    SessionConfig,
    get_chat_config,
    get_prompt_config,
    get_session_config,
)
from pdf_chat.chat.conversation import ConversationStore
from pdf_chat.chat.prompt import build_system_prompt
from pdf_chat.chat.session import (
    ChatSession,
    RejectionReason,
    SessionLimitError,
    SessionManager,
    SessionNotFoundError,
    TurnRejectedError,
    get_session_manager,
)

__all__ = [
    "ChatClient",
    "ChatConfig",
    "ChatSession",
    "CompletionOutcome",
    "ConfigurationFailure",
    "ConversationStore",
    "ParseFailure",
    "PromptConfig",
    "RejectionReason",
    "SessionConfig",
    "SessionLimitError",
    "SessionManager",
    "SessionNotFoundError",
    "Success",
    "TransportFailure",
    "TurnRejectedError",
    "build_system_prompt",
    "get_chat_client",
    "get_chat_config",
    "get_prompt_config",
    "get_session_config",
    "get_session_manager",
]
