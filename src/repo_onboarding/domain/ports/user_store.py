"""Port: user store — persistence of the signed-in user record."""

from __future__ import annotations

from typing import Protocol

from repo_onboarding.domain.entities import UserRecord


class UserStore(Protocol):
    """Abstract contract for the user record collaborator."""

    async def upsert(
        self,
        github_id: str,
        name: str | None = None,
        email: str | None = None,
        image: str | None = None,
    ) -> tuple[UserRecord, bool]:
        """Create or update the user keyed by *github_id*.

        Returns the stored record and ``True`` when it was newly created.
        """
        ...
