"""Repository analysis use cases: insights, chat and convention extraction.

Depends only on the two ports (:class:`RepoFetcher` and :class:`LlmGateway`)
and the pure service modules.  The interface layer injects concrete
adapters at runtime.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from repo_onboarding.domain.entities import (
    AnalysisResult,
    Commit,
    Convention,
    ProjectStats,
    PullRequest,
)
from repo_onboarding.domain.ports.llm_gateway import LlmGateway
from repo_onboarding.domain.ports.repo_fetcher import RepoFetcher
from repo_onboarding.domain.value_objects import RepoRef
from repo_onboarding.services.hotspots import compute_hotspots, compute_language_stats
from repo_onboarding.services.prompt_budget import check_prompt_size
from repo_onboarding.services.prompt_builder import (
    CHAT_SYSTEM_PROMPT,
    CONVENTIONS_SYSTEM_PROMPT,
    build_chat_prompt,
    build_conventions_prompt,
    build_recommendations_prompt,
    build_summary_prompt,
    format_review_text,
    render_file_tree,
)
from repo_onboarding.services.response_parser import parse_bulleted_list, parse_conventions

logger = logging.getLogger(__name__)


class AnalyzeRepoUseCase:
    """Orchestrates fetch → aggregate → prompt → LLM → parse.

    Parameters
    ----------
    repo_fetcher:
        Adapter that can fetch commits, pull requests, contents etc.
    llm_gateway:
        Adapter that can send prompts to an LLM.
    enhanced_hotspots:
        Score hotspots with the damped log formula instead of the raw
        change count.  Either way each commit's per-file stats cost one
        extra request, since list endpoints omit them.
    fetch_concurrency:
        Upper bound on simultaneous per-commit / per-PR requests.
    max_context_tokens:
        Prompts above this size are logged; ``None`` disables the check.
    max_review_pulls:
        Only the most recent pull requests are mined for conventions.
    """

    def __init__(
        self,
        repo_fetcher: RepoFetcher,
        llm_gateway: LlmGateway,
        *,
        enhanced_hotspots: bool = True,
        fetch_concurrency: int = 8,
        max_context_tokens: int | None = None,
        max_review_pulls: int = 100,
    ) -> None:
        self._fetcher = repo_fetcher
        self._llm = llm_gateway
        self._enhanced = enhanced_hotspots
        self._concurrency = max(1, fetch_concurrency)
        self._max_tokens = max_context_tokens
        self._max_review_pulls = max_review_pulls

    # ── Insights ────────────────────────────────────────────────────────

    async def analyze(self, ref: RepoRef, role: str) -> AnalysisResult:
        """Build hotspots, summary, recommendations and stats for *ref*."""
        logger.info("Analysing %s for role %r", ref.full_name, role)

        commits, pulls, issues, languages, contents, workflows = await asyncio.gather(
            self._fetcher.fetch_commits(ref),
            self._fetcher.fetch_pull_requests(ref),
            self._fetcher.fetch_issues(ref),
            self._fetcher.fetch_languages(ref),
            self._fetcher.fetch_contents(ref),
            self._fetcher.fetch_workflows(ref),
        )
        logger.info(
            "Fetched %d commits, %d PRs, %d issues for %s",
            len(commits),
            len(pulls),
            len(issues),
            ref.full_name,
        )

        commits = await self._enrich_commits(ref, commits)

        hotspots = compute_hotspots(commits, enhanced=self._enhanced)
        language_stats = compute_language_stats(languages)
        project_stats = ProjectStats(
            commits=len(commits),
            pull_requests=len(pulls),
            issues=len(issues),
            workflows=len(workflows),
        )

        summary_prompt = build_summary_prompt(
            ref,
            role,
            language_stats,
            render_file_tree(contents),
            project_stats,
            hotspots,
        )
        summary = await self._complete(summary_prompt, stage="summary")

        recommendations_prompt = build_recommendations_prompt(ref, role, summary)
        recommendations = parse_bulleted_list(
            await self._complete(recommendations_prompt, stage="recommendations")
        )

        return AnalysisResult(
            hotspots=hotspots,
            summary=summary,
            recommendations=recommendations,
            language_stats=language_stats,
            project_stats=project_stats,
        )

    async def _enrich_commits(self, ref: RepoRef, commits: Sequence[Commit]) -> list[Commit]:
        """Fetch per-file diff stats for every commit, preserving order."""
        sem = asyncio.Semaphore(self._concurrency)

        async def _detail(commit: Commit) -> Commit:
            async with sem:
                return await self._fetcher.fetch_commit_detail(ref, commit.sha)

        logger.info("Fetching diffs for %d commits of %s", len(commits), ref.full_name)
        return list(await asyncio.gather(*(_detail(c) for c in commits)))

    # ── Chat ────────────────────────────────────────────────────────────

    async def chat(self, ref: RepoRef, role: str, message: str) -> str:
        """Answer a free-text question with the repository tree as context."""
        logger.info("Chat question for %s", ref.full_name)
        entries = await self._fetcher.fetch_contents(ref, recursive=True)
        prompt = build_chat_prompt(ref, role, render_file_tree(entries), message)
        return await self._complete(prompt, CHAT_SYSTEM_PROMPT, stage="chat")

    # ── Conventions ─────────────────────────────────────────────────────

    async def conventions(self, ref: RepoRef, role: str) -> list[Convention]:
        """Infer team conventions from pull-request descriptions and reviews."""
        pulls = (await self._fetcher.fetch_pull_requests(ref))[: self._max_review_pulls]
        if not pulls:
            logger.info("No pull requests in %s; no conventions to extract", ref.full_name)
            return []

        sem = asyncio.Semaphore(self._concurrency)

        async def _reviews(pr: PullRequest) -> tuple[PullRequest, list[str]]:
            async with sem:
                return pr, await self._fetcher.fetch_pull_reviews(ref, pr.number)

        reviewed = await asyncio.gather(*(_reviews(pr) for pr in pulls))
        prompt = build_conventions_prompt(role, format_review_text(reviewed))
        raw = await self._complete(
            prompt, CONVENTIONS_SYSTEM_PROMPT, stage="conventions", json_mode=True
        )
        return parse_conventions(raw)

    # ── LLM interaction ─────────────────────────────────────────────────

    async def _complete(
        self,
        prompt: str,
        system_instruction: str | None = None,
        *,
        stage: str,
        json_mode: bool = False,
    ) -> str:
        if self._max_tokens is not None:
            check_prompt_size(prompt, self._max_tokens, stage=stage)
        logger.info("Calling LLM for %s", stage)
        return await self._llm.complete(prompt, system_instruction, json_mode=json_mode)
