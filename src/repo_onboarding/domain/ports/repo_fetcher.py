"""Port: repository fetcher — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Any, Protocol

from repo_onboarding.domain.entities import Commit, ContentEntry, PullRequest
from repo_onboarding.domain.value_objects import RepoRef


class RepoFetcher(Protocol):
    """Abstract contract for fetching GitHub repository data."""

    async def fetch_commits(self, ref: RepoRef) -> list[Commit]:
        """Return every commit on the default branch, newest first."""
        ...

    async def fetch_commit_detail(self, ref: RepoRef, sha: str) -> Commit:
        """Return a single commit enriched with its per-file diff stats."""
        ...

    async def fetch_pull_requests(self, ref: RepoRef) -> list[PullRequest]:
        """Return every pull request regardless of state."""
        ...

    async def fetch_pull_reviews(self, ref: RepoRef, number: int) -> list[str]:
        """Return the review bodies left on one pull request."""
        ...

    async def fetch_issues(self, ref: RepoRef) -> list[dict[str, Any]]:
        """Return every issue regardless of state."""
        ...

    async def fetch_languages(self, ref: RepoRef) -> dict[str, int]:
        """Return language → byte-count mapping from the GitHub Languages API."""
        ...

    async def fetch_contents(
        self, ref: RepoRef, path: str = "", *, recursive: bool = False
    ) -> list[ContentEntry]:
        """Return the entries under *path*, optionally the whole subtree."""
        ...

    async def fetch_workflows(self, ref: RepoRef) -> list[dict[str, Any]]:
        """Return the CI workflow definitions."""
        ...
