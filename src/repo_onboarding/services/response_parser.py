"""Parsing and repair of raw model output.

Two shapes are handled:

* bulleted Markdown lists — lenient, an empty result becomes a single
  placeholder item so callers never special-case emptiness;
* JSON payloads — fenced or bare; anything that does not parse or does not
  match the expected schema raises :class:`MalformedAIResponseError`.  There
  is no fallback on this path.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from repo_onboarding.domain.entities import (
    Assessment,
    AssessmentTask,
    Convention,
    LanguageNotes,
    TargetFile,
)
from repo_onboarding.domain.exceptions import MalformedAIResponseError

logger = logging.getLogger(__name__)

FALLBACK_RECOMMENDATION = "No specific recommendations available"

_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL)


# ── Bulleted lists ──────────────────────────────────────────────────────────


def parse_bulleted_list(text: str | None, marker: str = "-") -> list[str]:
    """Extract unique bullet items in first-seen order.

    A bullet is the marker followed by whitespace, so Markdown rules such
    as ``---`` are not mistaken for items.
    """
    items: list[str] = []
    seen: set[str] = set()
    for line in (text or "").splitlines():
        stripped = line.strip()
        if not stripped.startswith(marker):
            continue
        rest = stripped[len(marker):]
        if rest and not rest[0].isspace():
            continue
        item = rest.strip()
        if item and item not in seen:
            seen.add(item)
            items.append(item)
    return items or [FALLBACK_RECOMMENDATION]


# ── JSON payloads ───────────────────────────────────────────────────────────


def strip_code_fence(text: str) -> str:
    """Return the body of a Markdown code fence, or the trimmed text if unfenced."""
    stripped = text.strip()
    if stripped.startswith("```") and "\n" in stripped:
        body = stripped.split("\n", 1)[1]
        if body.rstrip().endswith("```"):
            body = body.rstrip()[:-3]
        return body.strip()
    match = _FENCE_RE.search(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def parse_json_payload(text: str) -> Any:
    """Decode *text* as JSON, unwrapping a code fence only if the bare text is not JSON.

    Bare text is tried first: a JSON-mode reply may carry fences inside its
    string values, which fence extraction would otherwise cut out.
    """
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError:
        pass
    cleaned = strip_code_fence(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("Model returned invalid JSON (%s). Raw response: %s", exc, text)
        raise MalformedAIResponseError("Invalid response format from AI model", raw=text) from exc


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class _ConventionPayload(_Payload):
    category: str
    description: str
    examples: list[str] = Field(default_factory=list)
    source: str = ""


class _TargetFilePayload(_Payload):
    path: str
    current_content: str = Field(default="", alias="currentContent")
    expected_changes: str = Field(default="", alias="expectedChanges")


class _TipsPayload(_Payload):
    language: str
    tips: list[str] = Field(default_factory=list)


class _TaskPayload(_Payload):
    title: str
    description: str
    target_files: list[_TargetFilePayload] = Field(default_factory=list, alias="targetFiles")
    requirements: list[str] = Field(default_factory=list)
    hints: list[str] = Field(default_factory=list)
    language_specific_tips: list[_TipsPayload] | None = Field(
        default=None, alias="languageSpecificTips"
    )

    def to_entity(self) -> AssessmentTask:
        return AssessmentTask(
            title=self.title,
            description=self.description,
            target_files=[
                TargetFile(
                    path=f.path,
                    current_content=f.current_content,
                    expected_changes=f.expected_changes,
                )
                for f in self.target_files
            ],
            requirements=list(self.requirements),
            hints=list(self.hints),
            language_specific_tips=(
                [LanguageNotes(language=t.language, items=list(t.tips)) for t in self.language_specific_tips]
                if self.language_specific_tips is not None
                else None
            ),
        )


class _FeedbackPayload(_Payload):
    language: str
    feedback: list[str] = Field(default_factory=list)


class _EvaluationPayload(_Payload):
    score: float
    feedback: str
    roadmap: list[str] = Field(default_factory=list)
    language_specific_feedback: list[_FeedbackPayload] | None = Field(
        default=None, alias="languageSpecificFeedback"
    )


def _validate(model: type[_Payload], data: Any, raw: str, what: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.warning("Model returned a malformed %s: %s. Raw response: %s", what, exc, raw)
        raise MalformedAIResponseError(f"Malformed {what} in AI response", raw=raw) from exc


def parse_conventions(text: str) -> list[Convention]:
    """Accept a JSON array, or an object wrapping it under ``conventions``."""
    data = parse_json_payload(text)
    if isinstance(data, dict) and isinstance(data.get("conventions"), list):
        data = data["conventions"]
    if not isinstance(data, list):
        logger.warning("Conventions response is not a list. Raw response: %s", text)
        raise MalformedAIResponseError("Malformed conventions in AI response", raw=text)
    conventions = [_validate(_ConventionPayload, item, text, "convention") for item in data]
    return [
        Convention(
            category=c.category,
            description=c.description,
            examples=list(c.examples),
            source=c.source,
        )
        for c in conventions
    ]


def parse_assessment_task(text: str) -> AssessmentTask:
    data = parse_json_payload(text)
    if isinstance(data, dict) and "task" in data:
        data = data["task"]
    task: _TaskPayload = _validate(_TaskPayload, data, text, "assessment task")
    return task.to_entity()


def parse_evaluation(text: str, task: AssessmentTask) -> Assessment:
    """Parse an evaluation and attach it to *task*, yielding an evaluated assessment."""
    data = parse_json_payload(text)
    result: _EvaluationPayload = _validate(_EvaluationPayload, data, text, "evaluation")
    return Assessment(
        task=task,
        score=result.score,
        feedback=result.feedback,
        roadmap=list(result.roadmap),
        language_specific_feedback=(
            [LanguageNotes(language=f.language, items=list(f.feedback)) for f in result.language_specific_feedback]
            if result.language_specific_feedback is not None
            else None
        ),
    )
