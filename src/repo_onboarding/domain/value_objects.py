"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass

from repo_onboarding.domain.exceptions import InvalidInputError

# GitHub logins are alphanumerics and hyphens only.
_OWNER = r"(?P<owner>[A-Za-z0-9-]+)"

_GITHUB_URL_RE = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com[/:]" + _OWNER + r"/(?P<repo>[^/#?\s]+)",
    re.IGNORECASE,
)
_OWNER_REPO_RE = re.compile(r"^" + _OWNER + r"/(?P<repo>[^/#?\s]+)$")


@dataclass(frozen=True, slots=True)
class RepoRef:
    """Normalised ``(owner, repo)`` pair.

    Accepts a GitHub URL such as ``https://github.com/psf/requests.git/tree/main``
    or a bare ``owner/repo`` string.  Anything else is rejected.
    """

    owner: str
    repo: str

    @classmethod
    def from_string(cls, value: str) -> RepoRef:
        """Parse and validate a raw repository locator."""
        text = value.strip()
        match = _GITHUB_URL_RE.match(text) or _OWNER_REPO_RE.match(text)
        if not match:
            raise InvalidInputError(
                f"Invalid repository format: '{text}'. "
                "Expected https://github.com/<owner>/<repo> or <owner>/<repo>"
            )
        repo = re.sub(r"\.git$", "", match["repo"], flags=re.IGNORECASE)
        if not repo:
            raise InvalidInputError(f"Invalid repository format: '{text}'.")
        return cls(owner=match["owner"], repo=repo)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"
