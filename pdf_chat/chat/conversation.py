"""Append-only conversation log with the in-flight request flag."""

import logging

from pdf_chat.models.schemas import Role, Turn

logger = logging.getLogger(__name__)


class ConversationStore:
    """Ordered turns of one conversation.

    Turns are only ever appended; the whole log is discarded by creating a new
    store. ``pending`` is True between a user turn and its assistant reply.
    """

    def __init__(self, turns: list[Turn] | None = None) -> None:
        self._turns: list[Turn] = list(turns or [])
        self.pending = False

    @classmethod
    def with_assistant_turn(cls, content: str) -> "ConversationStore":
        """Create a store holding a single synthesized assistant turn."""
        return cls([Turn(role=Role.ASSISTANT, content=content)])

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def append(self, role: Role, content: str) -> Turn:
        turn = Turn(role=role, content=content)
        self._turns.append(turn)
        return turn

    def __len__(self) -> int:
        return len(self._turns)
