"""Global exception handlers — translate domain errors to HTTP responses.

Each domain exception maps to a specific HTTP status code and the
``{"error": "..."}`` envelope.  Upstream and model failures are logged
with their full context but only a short message reaches the client.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from repo_onboarding.domain.exceptions import (
    InvalidInputError,
    LlmUnavailableError,
    MalformedAIResponseError,
    RepoOnboardingError,
    UnauthenticatedError,
    UpstreamFetchError,
)

logger = logging.getLogger(__name__)

# (exception type, status code, client-facing message or None to echo str(exc))
_EXCEPTION_STATUS: list[tuple[type[RepoOnboardingError], int, str | None]] = [
    (InvalidInputError, 400, None),
    (UnauthenticatedError, 401, "Unauthorized"),
    (UpstreamFetchError, 500, None),
    (LlmUnavailableError, 500, "The AI service is unavailable. Please try again later."),
    (MalformedAIResponseError, 500, "Invalid response format from AI model"),
]


def _error_json(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    # ── Domain exceptions ───────────────────────────────────────────────

    for exc_type, code, public_message in _EXCEPTION_STATUS:

        def _make_handler(
            status_code: int,
            message: str | None,
        ):  # type: ignore[no-untyped-def]
            async def handler(request: Request, exc: Exception) -> JSONResponse:
                if isinstance(exc, MalformedAIResponseError):
                    logger.warning(
                        "%s on %s: %s. Raw response: %s",
                        type(exc).__name__,
                        request.url.path,
                        exc,
                        exc.raw,
                    )
                else:
                    logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc)
                return _error_json(status_code, message or str(exc))

            return handler

        app.add_exception_handler(exc_type, _make_handler(code, public_message))

    # ── Pydantic / FastAPI validation errors ────────────────────────────

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = []
        for err in exc.errors():
            loc = " → ".join(str(p) for p in err.get("loc", []))
            messages.append(f"{loc}: {err.get('msg', 'validation error')}")
        logger.info("Rejected request to %s: %s", request.url.path, "; ".join(messages))
        return _error_json(400, "Missing required parameters: " + "; ".join(messages))

    # ── Catch-all for unexpected errors ─────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s", request.url.path)
        return _error_json(500, "Internal Server Error")
