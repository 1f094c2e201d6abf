"""Assessment use case — generate a coding task, then score a submission.

Each phase is analyse → prompt → LLM → parse.  Any parse failure is fatal
to the phase; nothing is cached between phases, so a resubmission starts
from a fresh analysis.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping, Sequence

from repo_onboarding.domain.entities import (
    AnalysisResult,
    Assessment,
    AssessmentTask,
    LanguageStat,
)
from repo_onboarding.domain.ports.llm_gateway import LlmGateway
from repo_onboarding.domain.value_objects import RepoRef
from repo_onboarding.services.analyze_repo import AnalyzeRepoUseCase
from repo_onboarding.services.prompt_budget import check_prompt_size
from repo_onboarding.services.prompt_builder import (
    EVALUATION_SYSTEM_PROMPT,
    TOP_LANGUAGE_COUNT,
    assessment_system_prompt,
    build_assessment_prompt,
    build_evaluation_prompt,
    format_solution,
)
from repo_onboarding.services.response_parser import parse_assessment_task, parse_evaluation

logger = logging.getLogger(__name__)

ANALYSIS_ROLE = "developer"

# Baseline requirements appended regardless of what the model produced.
LANGUAGE_REQUIREMENTS: dict[str, tuple[str, ...]] = {
    "typescript": (
        "Maintain strict TypeScript type safety",
        "Use TypeScript-specific features appropriately",
    ),
    "javascript": (
        "Follow modern JavaScript best practices",
        "Use appropriate ES6+ features",
    ),
    "python": (
        "Follow PEP 8 style guidelines",
        "Use Python type hints where appropriate",
    ),
}


def language_requirements(stats: Sequence[LanguageStat]) -> list[str]:
    """Static requirements for the top languages, in language order."""
    requirements: list[str] = []
    for stat in stats[:TOP_LANGUAGE_COUNT]:
        requirements.extend(LANGUAGE_REQUIREMENTS.get(stat.name.lower(), ()))
    return requirements


class AssessmentUseCase:
    """Two-phase assessment pipeline on top of :class:`AnalyzeRepoUseCase`."""

    def __init__(
        self,
        analyzer: AnalyzeRepoUseCase,
        llm_gateway: LlmGateway,
        *,
        max_context_tokens: int | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._llm = llm_gateway
        self._max_tokens = max_context_tokens

    async def generate(self, ref: RepoRef, developer_type: str) -> Assessment:
        """Analyse *ref* and produce a task in the "generated" state."""
        analysis = await self._analyzer.analyze(ref, ANALYSIS_ROLE)
        return await self.generate_from_analysis(analysis, developer_type)

    async def generate_from_analysis(
        self, analysis: AnalysisResult, developer_type: str
    ) -> Assessment:
        prompt = build_assessment_prompt(analysis, developer_type)
        raw = await self._complete(
            prompt, assessment_system_prompt(developer_type), stage="assessment generation"
        )
        task = parse_assessment_task(raw)
        task = replace(
            task,
            requirements=[*task.requirements, *language_requirements(analysis.language_stats)],
        )
        logger.info("Generated assessment %r", task.title)
        return Assessment(task=task)

    async def evaluate(
        self, ref: RepoRef, task: AssessmentTask, solution: Mapping[str, str]
    ) -> Assessment:
        """Score *solution* against *task*; the result is "evaluated"."""
        analysis = await self._analyzer.analyze(ref, ANALYSIS_ROLE)
        return await self.evaluate_with_analysis(analysis, task, solution)

    async def evaluate_with_analysis(
        self,
        analysis: AnalysisResult,
        task: AssessmentTask,
        solution: Mapping[str, str],
    ) -> Assessment:
        prompt = build_evaluation_prompt(task, format_solution(solution), analysis)
        raw = await self._complete(prompt, EVALUATION_SYSTEM_PROMPT, stage="assessment evaluation")
        assessment = parse_evaluation(raw, task)
        logger.info("Evaluated assessment %r: score %s", task.title, assessment.score)
        return assessment

    async def _complete(self, prompt: str, system_instruction: str, *, stage: str) -> str:
        if self._max_tokens is not None:
            check_prompt_size(prompt, self._max_tokens, stage=stage)
        logger.info("Calling LLM for %s", stage)
        return await self._llm.complete(prompt, system_instruction, json_mode=True)
