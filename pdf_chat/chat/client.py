"""Chat completion client for OpenAI-compatible endpoints.

Executes one request/response cycle per user turn and reports the result as
an outcome value instead of raising:

1. **Configuration resolved per call** - the credential and endpoint are read
   from the environment when a message is sent. A missing key fails that
   call with ``ConfigurationFailure`` before any network traffic.

2. **One request, no retry** - a failure is terminal for the turn. The
   session turns it into an explanatory assistant message.

3. **Typed outcomes** - ``Success``, ``TransportFailure``,
   ``ConfigurationFailure`` and ``ParseFailure`` let the caller distinguish
   "not configured" from "server said no" from "server said nonsense".
"""

import logging
from collections.abc import Callable, Sequence
from typing import Literal

import httpx
from pydantic import BaseModel, ValidationError

from pdf_chat.chat.config import ChatConfig, get_chat_config
from pdf_chat.models.schemas import Turn

logger = logging.getLogger(__name__)

NO_RESPONSE_TEXT = "Sorry, I could not provide a response."


class CompletionMessage(BaseModel):
    """One entry of the request's message list."""

    role: Literal["system", "user", "assistant"]
    content: str


class CompletionRequest(BaseModel):
    """Body of a chat completion request."""

    model: str
    messages: list[CompletionMessage]
    max_tokens: int


class _ChoiceMessage(BaseModel):
    content: str | None = None


class _Choice(BaseModel):
    message: _ChoiceMessage | None = None


class CompletionResponse(BaseModel):
    """Expected shape of a chat completion response body."""

    choices: list[_Choice]


class Success(BaseModel):
    text: str


class TransportFailure(BaseModel):
    """Non-success HTTP status, or no response at all (``status_code`` None)."""

    status_code: int | None = None
    detail: str = ""


class ConfigurationFailure(BaseModel):
    reason: str


class ParseFailure(BaseModel):
    detail: str


CompletionOutcome = Success | TransportFailure | ConfigurationFailure | ParseFailure


def build_messages(
    system_prompt: str,
    history: Sequence[Turn],
    new_user_content: str,
) -> list[CompletionMessage]:
    """Translate a conversation into the request's message list.

    Order: the system prompt, every history turn role for role, then the
    new user message.
    """
    messages = [CompletionMessage(role="system", content=system_prompt)]
    messages.extend(CompletionMessage(role=turn.role.value, content=turn.content) for turn in history)
    messages.append(CompletionMessage(role="user", content=new_user_content))
    return messages


def configuration_reason(error: ValidationError) -> str:
    """Summarize config validation errors as "field: message" pairs."""
    return "; ".join(
        f"{item['loc'][0]}: {str(item['msg']).removeprefix('Value error, ')}"
        if item["loc"]
        else str(item["msg"])
        for item in error.errors()
    )


class ChatClient:
    """Sends grounded conversations to the completion endpoint."""

    def __init__(
        self,
        config_factory: Callable[[], ChatConfig] = get_chat_config,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config_factory: Called on every request to resolve configuration.
            transport: Optional httpx transport (used by tests).
        """
        self._config_factory = config_factory
        self._transport = transport

    def _headers(self, config: ChatConfig) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": config.referer,
            "X-Title": config.app_title,
        }

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[Turn],
        new_user_content: str,
    ) -> CompletionOutcome:
        """Run one completion request.

        Args:
            system_prompt: Grounding instructions for the system role.
            history: Turns before the new user message.
            new_user_content: The message being answered.

        Returns:
            The outcome of the request. Never raises for endpoint errors.
        """
        try:
            config = self._config_factory()
        except ValidationError as e:
            reason = configuration_reason(e)
            logger.error(f"Chat client is not configured: {reason}")
            return ConfigurationFailure(reason=reason)

        window = config.max_history_turns
        if window is not None:
            history = list(history)[-window:] if window else []

        request = CompletionRequest(
            model=config.model_name,
            messages=build_messages(system_prompt, history, new_user_content),
            max_tokens=config.max_tokens,
        )

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=config.request_timeout,
            ) as client:
                response = await client.post(
                    config.api_url,
                    json=request.model_dump(),
                    headers=self._headers(config),
                )
        except httpx.RequestError as e:
            logger.error(f"Completion request failed: {e}")
            return TransportFailure(status_code=None, detail=str(e))

        if not response.is_success:
            logger.error(f"Completion endpoint returned HTTP {response.status_code}")
            return TransportFailure(status_code=response.status_code, detail=response.text[:500])

        try:
            body = CompletionResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Malformed completion response: {e}")
            return ParseFailure(detail=str(e))

        if not body.choices:
            logger.error("Completion response contained no choices")
            return ParseFailure(detail="Response contained no choices")

        message = body.choices[0].message
        text = message.content if message else None
        return Success(text=text or NO_RESPONSE_TEXT)


# Module-level singleton instance
_chat_client: ChatClient | None = None


def get_chat_client() -> ChatClient:
    """Get or create the global chat client.

    Returns:
        The ChatClient instance.
    """
    global _chat_client
    if _chat_client is None:
        _chat_client = ChatClient()
    return _chat_client
