"""GitHub REST API adapter — implements the RepoFetcher port."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from repo_onboarding.domain.entities import Commit, ContentEntry, PullRequest
from repo_onboarding.domain.exceptions import UpstreamFetchError
from repo_onboarding.domain.value_objects import RepoRef
from repo_onboarding.infrastructure.github_models import (
    CommitPayload,
    ContentPayload,
    PullRequestPayload,
    ReviewPayload,
)

logger = logging.getLogger(__name__)

_GITHUB_API = "https://api.github.com"
PAGE_SIZE = 100

_ModelT = TypeVar("_ModelT", bound=BaseModel)

# List endpoints relative to /repos/{owner}/{repo}, with fixed query params
# and, for wrapped responses, the key holding the page items.
_COLLECTIONS: dict[str, tuple[str, dict[str, str], str | None]] = {
    "commits": ("/commits", {}, None),
    "pulls": ("/pulls", {"state": "all"}, None),
    "issues": ("/issues", {"state": "all"}, None),
    "contributors": ("/contributors", {}, None),
    "releases": ("/releases", {}, None),
    "branches": ("/branches", {}, None),
    "tags": ("/tags", {}, None),
    "workflows": ("/actions/workflows", {}, "workflows"),
}


class GitHubRestAdapter:
    """Concrete RepoFetcher backed by the GitHub v3 REST API.

    One instance is bound to one bearer credential; the underlying
    ``httpx.AsyncClient`` is shared across instances.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str | None = None,
        *,
        max_tree_depth: int = 10,
    ) -> None:
        self._client = client
        self._max_tree_depth = max_tree_depth
        self._api_headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "repo-onboarding/1.0",
        }
        if token:
            self._api_headers["Authorization"] = f"Bearer {token}"

    # ── Single resources ────────────────────────────────────────────────

    async def fetch_repository(self, ref: RepoRef) -> dict[str, Any]:
        """GET /repos/{owner}/{repo} → raw metadata."""
        resp = await self._api_get(f"/repos/{ref.owner}/{ref.repo}")
        return resp.json()

    async def fetch_languages(self, ref: RepoRef) -> dict[str, int]:
        """GET /repos/{owner}/{repo}/languages → {lang: bytes}."""
        resp = await self._api_get(f"/repos/{ref.owner}/{ref.repo}/languages")
        data = resp.json()
        if not isinstance(data, dict):
            raise UpstreamFetchError(str(resp.request.url), resp.status_code, "unexpected payload shape")
        return {str(name): int(count) for name, count in data.items()}

    async def fetch_commit_detail(self, ref: RepoRef, sha: str) -> Commit:
        """GET /repos/{owner}/{repo}/commits/{sha} → commit with per-file stats."""
        resp = await self._api_get(f"/repos/{ref.owner}/{ref.repo}/commits/{sha}")
        return self._validate(CommitPayload, resp.json(), str(resp.request.url)).to_entity()

    # ── Collections ─────────────────────────────────────────────────────

    async def fetch_collection(self, ref: RepoRef, name: str) -> list[dict[str, Any]]:
        """Return every item of a named list endpoint as raw JSON objects."""
        try:
            path, params, item_key = _COLLECTIONS[name]
        except KeyError:
            raise ValueError(f"Unknown collection: {name}") from None
        return await self._paginate(
            f"/repos/{ref.owner}/{ref.repo}{path}", params=params, item_key=item_key
        )

    async def fetch_commits(self, ref: RepoRef) -> list[Commit]:
        endpoint = f"{_GITHUB_API}/repos/{ref.full_name}/commits"
        raw = await self.fetch_collection(ref, "commits")
        return [self._validate(CommitPayload, item, endpoint).to_entity() for item in raw]

    async def fetch_pull_requests(self, ref: RepoRef) -> list[PullRequest]:
        endpoint = f"{_GITHUB_API}/repos/{ref.full_name}/pulls"
        raw = await self.fetch_collection(ref, "pulls")
        return [self._validate(PullRequestPayload, item, endpoint).to_entity() for item in raw]

    async def fetch_pull_reviews(self, ref: RepoRef, number: int) -> list[str]:
        """Review bodies for one pull request; empty bodies are dropped."""
        endpoint = f"/repos/{ref.owner}/{ref.repo}/pulls/{number}/reviews"
        raw = await self._paginate(endpoint)
        reviews = [self._validate(ReviewPayload, item, f"{_GITHUB_API}{endpoint}") for item in raw]
        return [r.body for r in reviews if r.body]

    async def fetch_issues(self, ref: RepoRef) -> list[dict[str, Any]]:
        return await self.fetch_collection(ref, "issues")

    async def fetch_contributors(self, ref: RepoRef) -> list[dict[str, Any]]:
        return await self.fetch_collection(ref, "contributors")

    async def fetch_releases(self, ref: RepoRef) -> list[dict[str, Any]]:
        return await self.fetch_collection(ref, "releases")

    async def fetch_branches(self, ref: RepoRef) -> list[dict[str, Any]]:
        return await self.fetch_collection(ref, "branches")

    async def fetch_tags(self, ref: RepoRef) -> list[dict[str, Any]]:
        return await self.fetch_collection(ref, "tags")

    async def fetch_workflows(self, ref: RepoRef) -> list[dict[str, Any]]:
        return await self.fetch_collection(ref, "workflows")

    # ── Contents ────────────────────────────────────────────────────────

    async def fetch_contents(
        self, ref: RepoRef, path: str = "", *, recursive: bool = False
    ) -> list[ContentEntry]:
        """GET /repos/{owner}/{repo}/contents/{path} → [ContentEntry].

        With *recursive*, each directory is followed by its own subtree
        before the next sibling (depth-first).  Directories below
        ``max_tree_depth`` are listed but not descended into.
        """
        return await self._fetch_contents(ref, path, recursive=recursive, depth=0)

    async def _fetch_contents(
        self, ref: RepoRef, path: str, *, recursive: bool, depth: int
    ) -> list[ContentEntry]:
        endpoint = f"/repos/{ref.owner}/{ref.repo}/contents"
        if path:
            endpoint += f"/{path}"
        resp = await self._api_get(endpoint)
        data = resp.json()
        items = data if isinstance(data, list) else [data]
        url = str(resp.request.url)

        result: list[ContentEntry] = []
        for item in items:
            entry = self._validate(ContentPayload, item, url).to_entity()
            result.append(entry)
            if not recursive or entry.type != "dir":
                continue
            if depth + 1 >= self._max_tree_depth:
                logger.debug("Not descending into %s: depth limit %d", entry.path, self._max_tree_depth)
                continue
            result.extend(
                await self._fetch_contents(ref, entry.path, recursive=True, depth=depth + 1)
            )
        return result

    # ── Snapshot ────────────────────────────────────────────────────────

    async def fetch_all(self, ref: RepoRef) -> dict[str, Any]:
        """Fetch every supported resource in parallel; any failure aborts all."""
        logger.info("Fetching full snapshot of %s", ref.full_name)
        (
            details,
            commits,
            pull_requests,
            issues,
            contents,
            contributors,
            languages,
            releases,
            branches,
            tags,
            workflows,
        ) = await asyncio.gather(
            self.fetch_repository(ref),
            self.fetch_collection(ref, "commits"),
            self.fetch_collection(ref, "pulls"),
            self.fetch_issues(ref),
            self.fetch_contents(ref),
            self.fetch_contributors(ref),
            self.fetch_languages(ref),
            self.fetch_releases(ref),
            self.fetch_branches(ref),
            self.fetch_tags(ref),
            self.fetch_workflows(ref),
        )
        return {
            "details": details,
            "commits": commits,
            "pullRequests": pull_requests,
            "issues": issues,
            "contents": [
                {
                    "name": c.name,
                    "path": c.path,
                    "type": c.type,
                    "size": c.size,
                    "download_url": c.download_url,
                }
                for c in contents
            ],
            "contributors": contributors,
            "languages": languages,
            "releases": releases,
            "branches": branches,
            "tags": tags,
            "workflows": workflows,
        }

    # ── HTTP plumbing ───────────────────────────────────────────────────

    async def _paginate(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
        item_key: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch pages of ``PAGE_SIZE`` until the Link header has no ``rel="next"``."""
        results: list[dict[str, Any]] = []
        page = 1
        while True:
            query = {**(params or {}), "page": str(page), "per_page": str(PAGE_SIZE)}
            resp = await self._api_get(endpoint, params=query)
            data = resp.json()
            if item_key is not None and isinstance(data, dict):
                data = data.get(item_key, [])
            if not isinstance(data, list):
                raise UpstreamFetchError(
                    str(resp.request.url), resp.status_code, "expected a JSON array"
                )
            results.extend(data)
            if "next" not in resp.links:
                break
            page += 1
        logger.debug("Fetched %d item(s) from %s in %d page(s)", len(results), endpoint, page)
        return results

    async def _api_get(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform a GitHub API GET request with error translation."""
        url = f"{_GITHUB_API}{endpoint}"
        try:
            resp = await self._client.get(url, headers=self._api_headers, params=params)
        except httpx.HTTPError as exc:
            logger.error("Network error fetching %s: %s", url, exc)
            raise UpstreamFetchError(url, None, str(exc)) from exc

        if resp.is_success:
            return resp

        detail = resp.reason_phrase
        if resp.status_code in (403, 429) and resp.headers.get("x-ratelimit-remaining") == "0":
            reset_raw = resp.headers.get("x-ratelimit-reset", "")
            try:
                reset_str = datetime.fromtimestamp(int(reset_raw), tz=timezone.utc).strftime(
                    "%Y-%m-%d %H:%M:%S UTC"
                )
            except (ValueError, OSError):
                reset_str = reset_raw or "unknown"
            detail = f"GitHub API rate limit exceeded, resets at {reset_str}"

        logger.error("GitHub API returned HTTP %d for %s", resp.status_code, url)
        raise UpstreamFetchError(url, resp.status_code, detail)

    @staticmethod
    def _validate(model: type[_ModelT], item: Any, url: str) -> _ModelT:
        try:
            return model.model_validate(item)
        except ValidationError as exc:
            logger.error("Unexpected %s payload from %s: %s", model.__name__, url, exc)
            raise UpstreamFetchError(url, None, "unexpected payload shape") from exc
