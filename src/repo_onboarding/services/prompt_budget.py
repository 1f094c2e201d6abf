"""Prompt size accounting.

Uses ``tiktoken`` for token counting.  Prompts are never truncated here:
an oversized prompt is reported so operators can see which repositories
approach the model's context window.
"""

from __future__ import annotations

import logging

import tiktoken

logger = logging.getLogger(__name__)

_ENCODING_NAME = "cl100k_base"

_encoder: tiktoken.Encoding | None = None


def _get_encoder() -> tiktoken.Encoding:
    global _encoder  # noqa: PLW0603
    if _encoder is None:
        _encoder = tiktoken.get_encoding(_ENCODING_NAME)
    return _encoder


def count_tokens(text: str) -> int:
    """Return the token count for *text* under cl100k_base."""
    return len(_get_encoder().encode(text, disallowed_special=()))


def check_prompt_size(prompt: str, limit: int, *, stage: str) -> int:
    """Count *prompt* tokens and warn when they exceed *limit*."""
    tokens = count_tokens(prompt)
    if tokens > limit:
        logger.warning(
            "Prompt for %s is %d tokens, above the %d token budget; sending unmodified",
            stage,
            tokens,
            limit,
        )
    else:
        logger.debug("Prompt for %s: %d / %d tokens", stage, tokens, limit)
    return tokens
