"""Port: LLM gateway — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol


class LlmGateway(Protocol):
    """Abstract contract for interacting with a large-language model."""

    async def complete(
        self,
        prompt: str,
        system_instruction: str | None = None,
        *,
        json_mode: bool = False,
    ) -> str:
        """Send a prompt (plus optional system instruction) and return the answer text."""
        ...
