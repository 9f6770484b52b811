"""Command-line entry point.

Loads .env, configures root logging from LOG_LEVEL and serves the API with
uvicorn on HOST:PORT (default 0.0.0.0:8000).
"""

import logging
import os
import sys

import uvicorn
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Send log records from every module to stdout."""
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main() -> None:
    load_dotenv()
    configure_logging()

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Serving PDF Chat on http://{host}:{port} (docs at /docs)")

    uvicorn.run(
        "pdf_chat.api.app:app",
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
