"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
"""

from __future__ import annotations


class RepoOnboardingError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidInputError(RepoOnboardingError):
    """Malformed repository reference or missing required field."""


class UnauthenticatedError(RepoOnboardingError):
    """The request carries no valid session credential."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class UpstreamFetchError(RepoOnboardingError):
    """The repository-data provider returned a non-success status."""

    def __init__(self, url: str, status: int | None, detail: str = "") -> None:
        self.url = url
        self.status = status
        message = f"Failed to fetch {url}"
        if status is not None:
            message += f" (HTTP {status})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


# ── LLM errors ──────────────────────────────────────────────────────────────


class LlmUnavailableError(RepoOnboardingError):
    """The chat-completion call failed or returned no content."""


class MalformedAIResponseError(RepoOnboardingError):
    """The model output could not be parsed into the expected structure.

    ``raw`` keeps the original text for server-side diagnostics; it is never
    sent back to the client.
    """

    def __init__(self, message: str, raw: str) -> None:
        self.raw = raw
        super().__init__(message)
