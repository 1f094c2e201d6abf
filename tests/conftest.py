"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from repo_onboarding.domain.entities import Commit, ContentEntry, FileChange, PullRequest
from repo_onboarding.domain.value_objects import RepoRef


class FakeLlm:
    """Scripted LlmGateway: returns queued replies and records every call."""

    def __init__(self, *replies: str) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        prompt: str,
        system_instruction: str | None = None,
        *,
        json_mode: bool = False,
    ) -> str:
        self.calls.append(
            {"prompt": prompt, "system": system_instruction, "json_mode": json_mode}
        )
        if not self.replies:
            raise AssertionError("FakeLlm ran out of scripted replies")
        return self.replies.pop(0)


class FakeFetcher:
    """In-memory RepoFetcher."""

    def __init__(
        self,
        commits: list[Commit] | None = None,
        details: dict[str, Commit] | None = None,
        pulls: list[PullRequest] | None = None,
        reviews: dict[int, list[str]] | None = None,
        issues: list[dict[str, Any]] | None = None,
        languages: dict[str, int] | None = None,
        contents: list[ContentEntry] | None = None,
        tree: list[ContentEntry] | None = None,
        workflows: list[dict[str, Any]] | None = None,
    ) -> None:
        self.commits = commits or []
        self.details = details or {}
        self.pulls = pulls or []
        self.reviews = reviews or {}
        self.issues = issues or []
        self.languages = languages or {}
        self.contents = contents or []
        self.tree = tree if tree is not None else self.contents
        self.workflows = workflows or []
        self.detail_requests: list[str] = []

    async def fetch_commits(self, ref: RepoRef) -> list[Commit]:
        return list(self.commits)

    async def fetch_commit_detail(self, ref: RepoRef, sha: str) -> Commit:
        self.detail_requests.append(sha)
        return self.details[sha]

    async def fetch_pull_requests(self, ref: RepoRef) -> list[PullRequest]:
        return list(self.pulls)

    async def fetch_pull_reviews(self, ref: RepoRef, number: int) -> list[str]:
        return self.reviews.get(number, [])

    async def fetch_issues(self, ref: RepoRef) -> list[dict[str, Any]]:
        return list(self.issues)

    async def fetch_languages(self, ref: RepoRef) -> dict[str, int]:
        return dict(self.languages)

    async def fetch_contents(
        self, ref: RepoRef, path: str = "", *, recursive: bool = False
    ) -> list[ContentEntry]:
        return list(self.tree if recursive else self.contents)

    async def fetch_workflows(self, ref: RepoRef) -> list[dict[str, Any]]:
        return list(self.workflows)


@pytest.fixture
def ref() -> RepoRef:
    return RepoRef(owner="acme", repo="widgets")


@pytest.fixture
def sample_fetcher() -> FakeFetcher:
    """Three commits touching two files, plus languages and a small tree."""
    listed = [Commit(sha="c1"), Commit(sha="c2"), Commit(sha="c3")]
    details = {
        "c1": Commit(sha="c1", files=(FileChange("a.ts", additions=10),)),
        "c2": Commit(sha="c2", files=(FileChange("a.ts", additions=5),)),
        "c3": Commit(sha="c3", files=(FileChange("b.ts", additions=100),)),
    }
    return FakeFetcher(
        commits=listed,
        details=details,
        pulls=[PullRequest(number=7, title="Add widgets", body="Adds the widget API")],
        reviews={7: ["Please add tests", "LGTM"]},
        issues=[{"number": 1}, {"number": 2}],
        languages={"TypeScript": 7500, "Python": 2500},
        contents=[
            ContentEntry(name="src", path="src", type="dir"),
            ContentEntry(name="README.md", path="README.md", type="file", size=120),
        ],
        tree=[
            ContentEntry(name="src", path="src", type="dir"),
            ContentEntry(name="index.ts", path="src/index.ts", type="file", size=40),
            ContentEntry(name="README.md", path="README.md", type="file", size=120),
        ],
        workflows=[{"id": 1, "name": "CI"}],
    )


@pytest.fixture
def fake_llm_factory():
    return FakeLlm


@pytest.fixture
def fake_fetcher_factory():
    return FakeFetcher


TASK_JSON = """{
  "task": {
    "title": "Add a widget filter",
    "description": "Extend the widget list endpoint with a name filter.",
    "targetFiles": [
      {"path": "src/index.ts", "currentContent": "export {}", "expectedChanges": "Add filter()"}
    ],
    "requirements": ["Keep the public API stable"],
    "hints": ["Look at src/index.ts"],
    "languageSpecificTips": [{"language": "TypeScript", "tips": ["Use generics"]}]
  }
}"""

EVALUATION_JSON = """{
  "score": 42,
  "feedback": "The solution leaves the target file unchanged.",
  "roadmap": ["Implement the filter", "Add tests"],
  "languageSpecificFeedback": [{"language": "TypeScript", "feedback": ["No types added"]}]
}"""


@pytest.fixture
def task_json() -> str:
    return TASK_JSON


@pytest.fixture
def evaluation_json() -> str:
    return EVALUATION_JSON
