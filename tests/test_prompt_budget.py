"""Tests for prompt token accounting."""

import logging

import pytest

from repo_onboarding.services import prompt_budget


class _WordEncoder:
    """Stand-in encoding: one token per whitespace-separated word."""

    def encode(self, text, disallowed_special=()):
        return text.split()


@pytest.fixture(autouse=True)
def word_encoder(monkeypatch):
    monkeypatch.setattr(prompt_budget, "_encoder", _WordEncoder())


def test_count_tokens():
    assert prompt_budget.count_tokens("one two three") == 3


def test_oversized_prompt_warns(caplog):
    with caplog.at_level(logging.WARNING, logger=prompt_budget.__name__):
        tokens = prompt_budget.check_prompt_size("a b c d e", 3, stage="summary")

    assert tokens == 5
    assert "summary" in caplog.text
    assert "above the 3 token budget" in caplog.text


def test_prompt_within_limit_is_quiet(caplog):
    with caplog.at_level(logging.WARNING, logger=prompt_budget.__name__):
        assert prompt_budget.check_prompt_size("a b", 3, stage="chat") == 2
    assert caplog.text == ""
