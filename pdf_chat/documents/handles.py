"""Display handles for uploaded document bytes.

A handle keeps the original upload reachable at a URL so the presentation
layer can render it. The owning session releases it when the document is
discarded; after that the URL stops resolving.
"""

import logging
import uuid
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DOCUMENTS_URL_PREFIX = "/documents"


@dataclass(frozen=True)
class StoredDocument:
    """Bytes kept alive by a display handle."""

    data: bytes
    filename: str
    media_type: str


class DisplayHandle:
    """Revocable reference to one stored document."""

    def __init__(self, registry: "HandleRegistry", token: str) -> None:
        self._registry = registry
        self.token = token
        self._released = False

    @property
    def url(self) -> str:
        return f"{DOCUMENTS_URL_PREFIX}/{self.token}"

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> bool:
        """Revoke the handle. Returns False if it was already released."""
        if self._released:
            logger.warning(f"Display handle already released: {self.token}")
            return False
        self._registry.revoke(self.token)
        self._released = True
        return True

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"DisplayHandle({self.token!r}, {state})"


class HandleRegistry:
    """In-memory store of document bytes addressed by handle token."""

    def __init__(self) -> None:
        self._documents: dict[str, StoredDocument] = {}

    def register(
        self,
        data: bytes,
        filename: str,
        media_type: str = "application/pdf",
    ) -> DisplayHandle:
        """Store bytes and return a live handle for them."""
        token = uuid.uuid4().hex
        self._documents[token] = StoredDocument(data=data, filename=filename, media_type=media_type)
        logger.debug(f"Registered display handle {token} for {filename}")
        return DisplayHandle(self, token)

    def open(self, token: str) -> StoredDocument:
        """Look up a live document.

        Raises:
            KeyError: If the token is unknown or was revoked.
        """
        return self._documents[token]

    def revoke(self, token: str) -> None:
        if self._documents.pop(token, None) is not None:
            logger.debug(f"Revoked display handle {token}")

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, token: object) -> bool:
        return token in self._documents


# Module-level singleton instance
_handle_registry: HandleRegistry | None = None


def get_handle_registry() -> HandleRegistry:
    """Get or create the process-wide handle registry."""
    global _handle_registry
    if _handle_registry is None:
        _handle_registry = HandleRegistry()
    return _handle_registry
