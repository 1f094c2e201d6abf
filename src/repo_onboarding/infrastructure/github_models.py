"""Ingestion-boundary schemas for GitHub REST payloads.

Raw JSON is validated here and converted into domain entities, so nothing
past the adapter handles untyped dictionaries for the fields it reads.
Unknown keys are ignored; missing required keys are rejected.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from repo_onboarding.domain.entities import Commit, ContentEntry, FileChange, PullRequest


class _GitHubModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CommitFilePayload(_GitHubModel):
    filename: str
    additions: int = 0
    deletions: int = 0


class CommitInnerPayload(_GitHubModel):
    message: str = ""


class CommitPayload(_GitHubModel):
    sha: str
    commit: CommitInnerPayload = Field(default_factory=CommitInnerPayload)
    files: list[CommitFilePayload] = Field(default_factory=list)

    def to_entity(self) -> Commit:
        return Commit(
            sha=self.sha,
            message=self.commit.message,
            files=tuple(
                FileChange(filename=f.filename, additions=f.additions, deletions=f.deletions)
                for f in self.files
            ),
        )


class PullRequestPayload(_GitHubModel):
    number: int
    title: str
    body: str | None = None

    def to_entity(self) -> PullRequest:
        return PullRequest(number=self.number, title=self.title, body=self.body)


class ReviewPayload(_GitHubModel):
    body: str | None = None


class ContentPayload(_GitHubModel):
    name: str
    path: str
    type: str
    size: int = 0
    download_url: str | None = None

    def to_entity(self) -> ContentEntry:
        return ContentEntry(
            name=self.name,
            path=self.path,
            type=self.type,
            size=self.size,
            download_url=self.download_url,
        )
