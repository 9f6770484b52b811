"""Chat configuration with environment variable loading.

Pydantic-based configuration for the completion endpoint and the grounding
prompt. Works with OpenRouter and any OpenAI-compatible chat completions URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()


def _env_or_none(name: str) -> str | None:
    # Parsed by the field type, so a malformed value is a ValidationError
    return os.getenv(name) or None


class ChatConfig(BaseModel):
    """Configuration for the chat completion endpoint.

    Resolved from the environment on every request, so a missing credential
    only surfaces when a message is sent.

    Attributes:
        api_key: Bearer credential for the completion endpoint.
        api_url: Chat completions endpoint URL.
        model_name: Model identifier to use.
        max_tokens: Maximum tokens in generated response.
        referer: Origin sent in the HTTP-Referer header.
        app_title: Application title sent in the X-Title header.
        request_timeout: Seconds before the request is abandoned (None waits forever).
        max_history_turns: Most recent turns to send (None sends all of them).
    """

    model_config = ConfigDict(validate_default=True)

    api_key: str = Field(
        default_factory=lambda: os.getenv("LLM_API_KEY", os.getenv("OPENROUTER_API_KEY", "")),
        description="API key for the completion endpoint",
    )
    api_url: str = Field(
        default_factory=lambda: os.getenv("LLM_API_URL", ""),
        description="Chat completions endpoint URL",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "deepseek/deepseek-chat-v3-0324:free"),
        description="Model to use",
    )
    max_tokens: int = Field(
        default=2000,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )
    referer: str = Field(
        default_factory=lambda: os.getenv("APP_REFERER", "http://localhost:8000"),
        description="Origin marker for the HTTP-Referer header",
    )
    app_title: str = Field(
        default_factory=lambda: os.getenv("APP_TITLE", "PDF Chat App"),
        description="Application title for the X-Title header",
    )
    request_timeout: float | None = Field(
        default_factory=lambda: _env_or_none("LLM_TIMEOUT"),
        gt=0,
        description="Request timeout in seconds, None for no deadline",
    )
    max_history_turns: int | None = Field(
        default=None,
        ge=0,
        description="Send only the most recent turns, None for full history",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API key required. Set LLM_API_KEY or OPENROUTER_API_KEY in .env")
        return v.strip()

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate that the endpoint URL is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API URL required. Set LLM_API_URL in .env")
        return v.strip()


class PromptConfig(BaseModel):
    """Configuration for the grounding prompt.

    Attributes:
        response_language: Language the assistant answers in.
        date_format: strftime format for the ingestion date.
        max_document_chars: Truncate embedded document text (None embeds it all).
    """

    model_config = ConfigDict(validate_default=True)

    response_language: str = Field(
        default_factory=lambda: os.getenv("RESPONSE_LANGUAGE", "English"),
        min_length=1,
    )
    date_format: str = Field(
        default_factory=lambda: os.getenv("DATE_FORMAT", "%d/%m/%Y"),
        min_length=1,
    )
    max_document_chars: int | None = Field(
        default_factory=lambda: _env_or_none("MAX_DOCUMENT_CHARS"),
        ge=1,
    )


class SessionConfig(BaseModel):
    """Limits on the in-memory session registry.

    Attributes:
        max_sessions: Sessions held at once; creating one more is refused.
        idle_ttl_seconds: Idle time after which a session and its document are dropped.
    """

    model_config = ConfigDict(validate_default=True)

    max_sessions: int = Field(
        default_factory=lambda: os.getenv("MAX_SESSIONS") or 100,
        ge=1,
    )
    idle_ttl_seconds: float = Field(
        default_factory=lambda: os.getenv("SESSION_IDLE_TTL") or 3600,
        gt=0,
    )


def get_chat_config() -> ChatConfig:
    """Create chat configuration from environment.

    Returns:
        Configured ChatConfig instance.

    Raises:
        pydantic.ValidationError: If the API key or URL is not set.
    """
    return ChatConfig()


def get_prompt_config() -> PromptConfig:
    """Create prompt configuration from environment."""
    return PromptConfig()


def get_session_config() -> SessionConfig:
    """Create session registry limits from environment."""
    return SessionConfig()
