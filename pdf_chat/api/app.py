"""FastAPI application factory.

Wires the session and document routers behind CORS. The lifespan reports
whether the completion endpoint is configured and releases every open
document on shutdown.
"""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from pdf_chat import __version__
from pdf_chat.api.chat import router as chat_router
from pdf_chat.api.routes import router as documents_router
from pdf_chat.chat.config import get_chat_config
from pdf_chat.chat.session import get_session_manager

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Check configuration on startup and close sessions on shutdown.

    A missing API key or URL is only logged here; each message send
    resolves the configuration again and reports the problem in the chat.
    Invalid session limits fail startup.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    try:
        config = get_chat_config()
        logger.info(f"Starting PDF Chat API with model {config.model_name}")
    except ValidationError as e:
        logger.warning(f"Starting PDF Chat API without a usable completion endpoint: {e.error_count()} invalid setting(s)")

    manager = get_session_manager()

    yield

    closed = manager.close_all()
    logger.info(f"Shutting down PDF Chat API, closed {closed} session(s)")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="PDF Chat API",
        description=(
            "Upload a PDF and hold a conversation grounded in its content. "
            "Each session keeps one document and its chat history; every reply "
            "is generated with the full document text in the prompt."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    origins = _cors_origins()
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(chat_router)
    application.include_router(documents_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "pdf-chat", "version": __version__}

    return application


app = create_app()
