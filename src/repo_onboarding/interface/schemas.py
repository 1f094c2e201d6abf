"""Pydantic request / response DTOs for the API boundary.

Wire names are camelCase (``targetFiles``, ``languageStats``) to match the
existing dashboard client; attributes stay snake_case.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from repo_onboarding.domain.entities import (
    AnalysisResult,
    Assessment,
    AssessmentTask,
    ContentEntry,
    Convention,
    LanguageNotes,
    TargetFile,
    UserRecord,
)
from repo_onboarding.services.prompt_builder import task_to_dict


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Analysis ────────────────────────────────────────────────────────────────


class HotspotSchema(_CamelModel):
    file: str
    score: float
    changes: int
    additions: int | None = None
    deletions: int | None = None


class LanguageStatSchema(_CamelModel):
    name: str
    percentage: str
    bytes: int


class ProjectStatsSchema(_CamelModel):
    commits: int
    pull_requests: int
    issues: int
    workflows: int


class AnalysisResponse(_CamelModel):
    """Successful response from ``GET /api/analysis/insights``."""

    hotspots: list[HotspotSchema]
    summary: str
    recommendations: list[str]
    language_stats: list[LanguageStatSchema]
    project_stats: ProjectStatsSchema

    @classmethod
    def from_entity(cls, result: AnalysisResult) -> AnalysisResponse:
        return cls.model_validate(result.to_dict())


class ChatRequest(BaseModel):
    """Request body for ``POST /api/analysis/chat``."""

    repo: str = Field(min_length=1)
    role: str = Field(min_length=1)
    message: str = Field(min_length=1)


class ChatResponse(BaseModel):
    response: str
    format: str = "markdown"


class ConventionSchema(BaseModel):
    category: str
    description: str
    examples: list[str]
    source: str

    @classmethod
    def from_entity(cls, convention: Convention) -> ConventionSchema:
        return cls(
            category=convention.category,
            description=convention.description,
            examples=list(convention.examples),
            source=convention.source,
        )


class ConventionsResponse(BaseModel):
    conventions: list[ConventionSchema]


# ── Assessment ──────────────────────────────────────────────────────────────


class TargetFileSchema(_CamelModel):
    path: str
    current_content: str = ""
    expected_changes: str = ""


class LanguageTipsSchema(_CamelModel):
    language: str
    tips: list[str] = Field(default_factory=list)


class LanguageFeedbackSchema(_CamelModel):
    language: str
    feedback: list[str] = Field(default_factory=list)


class TaskSchema(_CamelModel):
    title: str
    description: str
    target_files: list[TargetFileSchema] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    hints: list[str] = Field(default_factory=list)
    language_specific_tips: list[LanguageTipsSchema] | None = None

    @classmethod
    def from_entity(cls, task: AssessmentTask) -> TaskSchema:
        return cls.model_validate(task_to_dict(task))

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


class AssessmentResponse(_CamelModel):
    """A generated (no ``score``) or evaluated assessment."""

    task: TaskSchema
    score: float | None = None
    feedback: str | None = None
    roadmap: list[str] | None = None
    language_specific_feedback: list[LanguageFeedbackSchema] | None = None

    @classmethod
    def from_entity(cls, assessment: Assessment) -> AssessmentResponse:
        return cls(
            task=TaskSchema.from_entity(assessment.task),
            score=assessment.score,
            feedback=assessment.feedback,
            roadmap=assessment.roadmap,
            language_specific_feedback=(
                [
                    LanguageFeedbackSchema(language=n.language, feedback=list(n.items))
                    for n in assessment.language_specific_feedback
                ]
                if assessment.language_specific_feedback is not None
                else None
            ),
        )


class EvaluateRequest(BaseModel):
    """Request body for ``POST /api/assessment/evaluate``."""

    task: TaskSchema
    solution: dict[str, str] = Field(min_length=1)
    repo: str = Field(min_length=1)


# ── Repository structure ────────────────────────────────────────────────────


class ContentEntrySchema(BaseModel):
    name: str
    path: str
    type: str
    size: int = 0
    download_url: str | None = None

    @classmethod
    def from_entity(cls, entry: ContentEntry) -> ContentEntrySchema:
        return cls(
            name=entry.name,
            path=entry.path,
            type=entry.type,
            size=entry.size,
            download_url=entry.download_url,
        )


class TreeResponse(BaseModel):
    tree: list[ContentEntrySchema]


# ── Users ───────────────────────────────────────────────────────────────────


class UserRequest(_CamelModel):
    """Request body for ``POST /api/auth/user``."""

    github_id: str = Field(min_length=1)
    name: str | None = None
    email: str | None = None
    image: str | None = None

    @field_validator("github_id", mode="before")
    @classmethod
    def _numeric_id_as_text(cls, v: object) -> object:
        return str(v) if isinstance(v, int) and not isinstance(v, bool) else v


class UserSchema(_CamelModel):
    github_id: str
    name: str
    email: str
    image: str

    @classmethod
    def from_entity(cls, user: UserRecord) -> UserSchema:
        return cls(github_id=user.github_id, name=user.name, email=user.email, image=user.image)


class UserResponse(BaseModel):
    user: UserSchema
    message: str


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    error: str
