"""FastAPI dependency injection wiring."""

from __future__ import annotations

import httpx
from fastapi import Depends, Header

from repo_onboarding.domain.exceptions import UnauthenticatedError
from repo_onboarding.infrastructure.config import Settings, get_settings
from repo_onboarding.infrastructure.github_rest_adapter import GitHubRestAdapter
from repo_onboarding.infrastructure.openai_adapter import OpenAIAdapter
from repo_onboarding.infrastructure.user_store import SQLiteUserStore
from repo_onboarding.services.analyze_repo import AnalyzeRepoUseCase
from repo_onboarding.services.assessment import AssessmentUseCase

_http_client: httpx.AsyncClient | None = None
_openai_adapter: OpenAIAdapter | None = None
_user_store: SQLiteUserStore | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client, _openai_adapter, _user_store  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout))
    _openai_adapter = OpenAIAdapter(
        api_key=settings.llm_api_key.get_secret_value(),
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        max_retries=settings.llm_max_retries,
    )
    _user_store = SQLiteUserStore(settings.database_path)


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client, _openai_adapter, _user_store  # noqa: PLW0603

    if _http_client:
        await _http_client.aclose()
        _http_client = None
    if _openai_adapter:
        await _openai_adapter.close()
        _openai_adapter = None
    if _user_store:
        await _user_store.close()
        _user_store = None


# ── Session ─────────────────────────────────────────────────────────────────


def get_session_token(authorization: str | None = Header(default=None)) -> str:
    """Return the caller's GitHub access token from ``Authorization: Bearer``."""
    if not authorization:
        raise UnauthenticatedError("Unauthorized")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Unauthorized")
    return token.strip()


# ── Adapters & use cases ────────────────────────────────────────────────────


def _github_adapter(settings: Settings, token: str | None) -> GitHubRestAdapter:
    assert _http_client is not None, "startup() was not called"
    return GitHubRestAdapter(
        client=_http_client, token=token, max_tree_depth=settings.max_tree_depth
    )


def _server_token(settings: Settings) -> str | None:
    return settings.github_token.get_secret_value() if settings.github_token else None


def _analyzer(settings: Settings, fetcher: GitHubRestAdapter) -> AnalyzeRepoUseCase:
    assert _openai_adapter is not None, "startup() was not called"
    return AnalyzeRepoUseCase(
        repo_fetcher=fetcher,
        llm_gateway=_openai_adapter,
        enhanced_hotspots=settings.enhanced_hotspots,
        fetch_concurrency=settings.fetch_concurrency,
        max_context_tokens=settings.max_context_tokens,
        max_review_pulls=settings.max_review_pulls,
    )


def _assessment(settings: Settings, analyzer: AnalyzeRepoUseCase) -> AssessmentUseCase:
    assert _openai_adapter is not None, "startup() was not called"
    return AssessmentUseCase(
        analyzer=analyzer,
        llm_gateway=_openai_adapter,
        max_context_tokens=settings.max_context_tokens,
    )


def get_session_fetcher(token: str = Depends(get_session_token)) -> GitHubRestAdapter:
    """GitHub adapter acting with the signed-in user's credential."""
    return _github_adapter(get_settings(), token)


def get_server_fetcher() -> GitHubRestAdapter:
    """GitHub adapter acting with the server's own ``GITHUB_TOKEN``."""
    settings = get_settings()
    return _github_adapter(settings, _server_token(settings))


def get_analyzer(
    fetcher: GitHubRestAdapter = Depends(get_session_fetcher),
) -> AnalyzeRepoUseCase:
    return _analyzer(get_settings(), fetcher)


def get_session_assessment(
    fetcher: GitHubRestAdapter = Depends(get_session_fetcher),
) -> AssessmentUseCase:
    settings = get_settings()
    return _assessment(settings, _analyzer(settings, fetcher))


def get_server_assessment(
    fetcher: GitHubRestAdapter = Depends(get_server_fetcher),
) -> AssessmentUseCase:
    settings = get_settings()
    return _assessment(settings, _analyzer(settings, fetcher))


def get_user_store() -> SQLiteUserStore:
    assert _user_store is not None, "startup() was not called"
    return _user_store
