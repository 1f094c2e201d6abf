"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class FileChange:
    """Per-file diff stats reported for a single commit."""

    filename: str
    additions: int = 0
    deletions: int = 0


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as seen by the hotspot aggregator.

    ``files`` is empty for list-endpoint commits and populated once the
    commit has been enriched with its per-file diff.
    """

    sha: str
    message: str = ""
    files: tuple[FileChange, ...] = ()


@dataclass(frozen=True, slots=True)
class PullRequest:
    """The subset of a pull request the pipeline reads."""

    number: int
    title: str
    body: str | None = None


@dataclass(frozen=True, slots=True)
class ContentEntry:
    """A single node from the GitHub contents API (file or directory)."""

    name: str
    path: str
    type: str  # "file", "dir", "symlink" or "submodule"
    size: int = 0
    download_url: str | None = None


@dataclass(slots=True)
class FileChangeStat:
    """Accumulator for one filename during a single aggregation pass."""

    filename: str
    changes: int = 0
    additions: int = 0
    deletions: int = 0


@dataclass(frozen=True, slots=True)
class Hotspot:
    """A file ranked by its change-derived score."""

    file: str
    score: float
    changes: int
    additions: int | None = None
    deletions: int | None = None


@dataclass(frozen=True, slots=True)
class LanguageStat:
    name: str
    percentage: str
    bytes: int


@dataclass(frozen=True, slots=True)
class ProjectStats:
    commits: int = 0
    pull_requests: int = 0
    issues: int = 0
    workflows: int = 0


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Canonical artefact threaded through chat and assessment."""

    hotspots: list[Hotspot]
    summary: str
    recommendations: list[str]
    language_stats: list[LanguageStat] = field(default_factory=list)
    project_stats: ProjectStats = field(default_factory=ProjectStats)

    def to_dict(self) -> dict[str, Any]:
        """Camel-cased mapping matching the JSON contract of the API."""
        return {
            "hotspots": [
                {
                    key: value
                    for key, value in (
                        ("file", h.file),
                        ("score", h.score),
                        ("changes", h.changes),
                        ("additions", h.additions),
                        ("deletions", h.deletions),
                    )
                    if value is not None
                }
                for h in self.hotspots
            ],
            "summary": self.summary,
            "recommendations": list(self.recommendations),
            "languageStats": [
                {"name": s.name, "percentage": s.percentage, "bytes": s.bytes}
                for s in self.language_stats
            ],
            "projectStats": {
                "commits": self.project_stats.commits,
                "pullRequests": self.project_stats.pull_requests,
                "issues": self.project_stats.issues,
                "workflows": self.project_stats.workflows,
            },
        }


@dataclass(frozen=True, slots=True)
class TargetFile:
    path: str
    current_content: str
    expected_changes: str


@dataclass(frozen=True, slots=True)
class LanguageNotes:
    """Language-tagged list of tips or feedback lines."""

    language: str
    items: list[str]


@dataclass(frozen=True, slots=True)
class AssessmentTask:
    title: str
    description: str
    target_files: list[TargetFile]
    requirements: list[str]
    hints: list[str]
    language_specific_tips: list[LanguageNotes] | None = None


@dataclass(frozen=True, slots=True)
class Assessment:
    """A generated task and, once submitted, its evaluation.

    The instance is "generated" while ``score`` is ``None`` and
    "evaluated" afterwards.  Evaluation is terminal.
    """

    task: AssessmentTask
    score: float | None = None
    feedback: str | None = None
    roadmap: list[str] | None = None
    language_specific_feedback: list[LanguageNotes] | None = None

    @property
    def status(self) -> str:
        return "generated" if self.score is None else "evaluated"


@dataclass(frozen=True, slots=True)
class Convention:
    """A team practice inferred from pull-request review text."""

    category: str
    description: str
    examples: list[str]
    source: str


@dataclass(frozen=True, slots=True)
class UserRecord:
    github_id: str
    name: str
    email: str
    image: str = ""
