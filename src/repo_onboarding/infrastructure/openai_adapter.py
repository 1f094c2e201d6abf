"""OpenAI-compatible adapter — implements the LlmGateway port.

Groq exposes the OpenAI chat-completions API, so the same SDK serves both;
only ``base_url`` changes.
"""

from __future__ import annotations

import logging

from openai import APIError, AsyncOpenAI, AuthenticationError, RateLimitError

from repo_onboarding.domain.exceptions import LlmUnavailableError

logger = logging.getLogger(__name__)

# Closing tag emitted by reasoning models after their private chain-of-thought.
REASONING_DELIMITER = "</think>"


def strip_reasoning(content: str) -> str:
    """Return the text after the reasoning delimiter, or *content* unchanged."""
    if REASONING_DELIMITER not in content:
        return content
    return content.split(REASONING_DELIMITER, 1)[1].strip()


class OpenAIAdapter:
    """Concrete ``LlmGateway`` backed by an OpenAI-compatible chat-completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = "deepseek-r1-distill-llama-70b",
        *,
        base_url: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        max_retries: int = 2,
    ) -> None:
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=max_retries)
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def complete(
        self,
        prompt: str,
        system_instruction: str | None = None,
        *,
        json_mode: bool = False,
    ) -> str:
        """Send the prompt and return the completion text minus any reasoning."""
        messages: list[dict[str, str]] = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, object] = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**kwargs)  # type: ignore[arg-type]
        except AuthenticationError as exc:
            raise LlmUnavailableError(
                "Invalid LLM API key. Set a valid key in the LLM_API_KEY environment variable."
            ) from exc
        except RateLimitError as exc:
            logger.error("LLM RateLimitError: %s", exc)
            raise LlmUnavailableError(f"LLM rate limit / quota error: {exc}") from exc
        except APIError as exc:
            logger.error("LLM call failed: %s", exc)
            raise LlmUnavailableError(f"LLM call failed: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LlmUnavailableError("LLM returned an empty response.")

        logger.debug("LLM raw content: %s", content)
        return strip_reasoning(content)

    async def close(self) -> None:
        """Release underlying HTTP resources."""
        await self._client.close()
