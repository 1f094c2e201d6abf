"""API routes — thin controllers that delegate to the use cases."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query

from repo_onboarding.domain.value_objects import RepoRef
from repo_onboarding.infrastructure.github_rest_adapter import GitHubRestAdapter
from repo_onboarding.infrastructure.user_store import SQLiteUserStore
from repo_onboarding.interface.dependencies import (
    get_analyzer,
    get_server_assessment,
    get_server_fetcher,
    get_session_assessment,
    get_session_fetcher,
    get_session_token,
    get_user_store,
)
from repo_onboarding.interface.schemas import (
    AnalysisResponse,
    AssessmentResponse,
    ChatRequest,
    ChatResponse,
    ContentEntrySchema,
    ConventionSchema,
    ConventionsResponse,
    ErrorResponse,
    EvaluateRequest,
    TreeResponse,
    UserRequest,
    UserResponse,
    UserSchema,
)
from repo_onboarding.services.analyze_repo import AnalyzeRepoUseCase
from repo_onboarding.services.assessment import AssessmentUseCase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_ERRORS: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Missing parameters or invalid repository"},
    401: {"model": ErrorResponse, "description": "No session credential"},
    500: {"model": ErrorResponse, "description": "GitHub or LLM failure"},
}


# ── Analysis ────────────────────────────────────────────────────────────────


@router.get("/analysis/insights", response_model=AnalysisResponse, responses=_ERRORS)
async def insights(
    repo: str = Query(min_length=1),
    role: str = Query(min_length=1),
    use_case: AnalyzeRepoUseCase = Depends(get_analyzer),
) -> AnalysisResponse:
    """Hotspots, summary, recommendations and stats for a repository."""
    result = await use_case.analyze(RepoRef.from_string(repo), role)
    return AnalysisResponse.from_entity(result)


@router.post("/analysis/chat", response_model=ChatResponse, responses=_ERRORS)
async def chat(
    body: ChatRequest,
    use_case: AnalyzeRepoUseCase = Depends(get_analyzer),
) -> ChatResponse:
    """Answer a question about the repository in markdown."""
    answer = await use_case.chat(RepoRef.from_string(body.repo), body.role, body.message)
    return ChatResponse(response=answer)


@router.get("/analysis/conventions", response_model=ConventionsResponse, responses=_ERRORS)
async def conventions(
    repo: str = Query(min_length=1),
    role: str = Query(min_length=1),
    use_case: AnalyzeRepoUseCase = Depends(get_analyzer),
) -> ConventionsResponse:
    """Team conventions inferred from pull-request reviews."""
    found = await use_case.conventions(RepoRef.from_string(repo), role)
    return ConventionsResponse(conventions=[ConventionSchema.from_entity(c) for c in found])


# ── Assessment ──────────────────────────────────────────────────────────────


@router.get(
    "/assessment/start",
    response_model=AssessmentResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def start_assessment(
    repo: str = Query(min_length=1),
    developer_type: str = Query(alias="type", min_length=1, description="e.g. frontend"),
    use_case: AssessmentUseCase = Depends(get_server_assessment),
) -> AssessmentResponse:
    """Generate a coding task for a new developer."""
    assessment = await use_case.generate(RepoRef.from_string(repo), developer_type)
    return AssessmentResponse.from_entity(assessment)


@router.post(
    "/assessment/evaluate",
    response_model=AssessmentResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def evaluate_assessment(
    body: EvaluateRequest,
    use_case: AssessmentUseCase = Depends(get_session_assessment),
) -> AssessmentResponse:
    """Score a submitted solution (``{path: content}``) against its task."""
    assessment = await use_case.evaluate(
        RepoRef.from_string(body.repo), body.task.to_entity(), body.solution
    )
    return AssessmentResponse.from_entity(assessment)


# ── Repository structure ────────────────────────────────────────────────────


@router.get("/repo/structure", response_model=list[ContentEntrySchema], responses=_ERRORS)
async def repo_structure(
    repo: str = Query(min_length=1),
    fetcher: GitHubRestAdapter = Depends(get_session_fetcher),
) -> list[ContentEntrySchema]:
    """Every file and directory, flattened depth-first."""
    entries = await fetcher.fetch_contents(RepoRef.from_string(repo), recursive=True)
    return [ContentEntrySchema.from_entity(e) for e in entries]


@router.get("/repo/tree", response_model=TreeResponse, responses=_ERRORS)
async def repo_tree(
    repo: str = Query(min_length=1),
    fetcher: GitHubRestAdapter = Depends(get_session_fetcher),
) -> TreeResponse:
    """Top-level entries only."""
    entries = await fetcher.fetch_contents(RepoRef.from_string(repo))
    return TreeResponse(tree=[ContentEntrySchema.from_entity(e) for e in entries])


# ── Raw GitHub data ─────────────────────────────────────────────────────────


@router.get("/fetch_repo_commits", responses=_ERRORS)
async def fetch_repo_commits(
    url: str = Query(min_length=1),
    fetcher: GitHubRestAdapter = Depends(get_server_fetcher),
) -> list[dict[str, Any]]:
    return await fetcher.fetch_collection(RepoRef.from_string(url), "commits")


@router.get("/fetch_repo_prs", responses=_ERRORS)
async def fetch_repo_prs(
    url: str = Query(min_length=1),
    fetcher: GitHubRestAdapter = Depends(get_server_fetcher),
) -> list[dict[str, Any]]:
    return await fetcher.fetch_collection(RepoRef.from_string(url), "pulls")


@router.get("/fetch_repo_issues", responses=_ERRORS)
async def fetch_repo_issues(
    url: str = Query(min_length=1),
    fetcher: GitHubRestAdapter = Depends(get_server_fetcher),
) -> list[dict[str, Any]]:
    return await fetcher.fetch_collection(RepoRef.from_string(url), "issues")


@router.get("/fetch_repo_data", responses=_ERRORS)
async def fetch_repo_data(
    url: str = Query(min_length=1),
    fetcher: GitHubRestAdapter = Depends(get_server_fetcher),
) -> dict[str, Any]:
    """Metadata plus every list resource, fetched in parallel."""
    return await fetcher.fetch_all(RepoRef.from_string(url))


# ── Users ───────────────────────────────────────────────────────────────────


@router.post(
    "/auth/user",
    response_model=UserResponse,
    responses=_ERRORS,
    dependencies=[Depends(get_session_token)],
)
async def upsert_user(
    body: UserRequest,
    store: SQLiteUserStore = Depends(get_user_store),
) -> UserResponse:
    """Create or update the signed-in user's record."""
    user, created = await store.upsert(
        body.github_id, name=body.name, email=body.email, image=body.image
    )
    logger.info("User %s %s", user.github_id, "created" if created else "updated")
    message = "User created successfully" if created else "User updated successfully"
    return UserResponse(user=UserSchema.from_entity(user), message=message)
