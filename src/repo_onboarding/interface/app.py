"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Sequence

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from repo_onboarding.interface.dependencies import shutdown, startup
from repo_onboarding.interface.error_handlers import register_error_handlers
from repo_onboarding.interface.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    await startup()
    logger.info("Shared clients ready")
    try:
        yield
    finally:
        await shutdown()
        logger.info("Shared clients closed")


async def _log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    started = time.perf_counter()
    # Unhandled errors propagate to the outer 500 handler.
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        logger.info(
            "%s %s -> %d (%.0f ms)",
            request.method,
            request.url.path,
            status_code,
            (time.perf_counter() - started) * 1000,
        )


def create_app(cors_origins: Sequence[str] = ("*",)) -> FastAPI:
    """Build and wire the FastAPI application.

    *cors_origins* lists the browser origins allowed to call the API
    (the dashboard front end).
    """
    app = FastAPI(
        title="Repo Onboarding",
        version="1.0.0",
        description=(
            "Onboarding material for a GitHub repository: change hotspots, an "
            "AI summary with recommendations, team conventions mined from "
            "pull-request reviews, a codebase chat, and generated coding "
            "assessments with AI-scored feedback."
        ),
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.middleware("http")(_log_requests)

    register_error_handlers(app)
    app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
