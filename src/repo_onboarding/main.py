"""Process entry point: configure logging, then serve the API with uvicorn."""

from __future__ import annotations

import logging

import uvicorn

from repo_onboarding.infrastructure.config import get_settings
from repo_onboarding.interface.app import create_app

# Client libraries that log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(level: str) -> None:
    """Root logging for the service; third-party clients stay at WARNING unless debugging."""
    level = level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    if level != "DEBUG":
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def main() -> None:
    """Start the uvicorn ASGI server.

    Settings are loaded before the server starts, so a missing
    ``LLM_API_KEY`` or ``DATABASE_PATH`` aborts here with a validation error.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logging.getLogger(__name__).info(
        "Serving on %s:%d (model %s)", settings.host, settings.port, settings.llm_model
    )
    uvicorn.run(
        create_app(cors_origins=settings.cors_origins),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
