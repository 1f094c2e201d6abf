"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from repo_onboarding.infrastructure.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LLM_API_KEY", "DATABASE_PATH", "GITHUB_TOKEN", "ENHANCED_HOTSPOTS", "LLM_MODEL"):
        monkeypatch.delenv(name, raising=False)


def test_missing_required_settings_fail_fast():
    with pytest.raises(ValidationError) as excinfo:
        Settings(_env_file=None)
    missing = {err["loc"][0] for err in excinfo.value.errors()}
    assert missing == {"llm_api_key", "database_path"}


def test_defaults(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "gsk_test")
    monkeypatch.setenv("DATABASE_PATH", "/tmp/users.db")
    settings = Settings(_env_file=None)

    assert settings.llm_api_key.get_secret_value() == "gsk_test"
    assert settings.llm_model == "deepseek-r1-distill-llama-70b"
    assert settings.llm_base_url == "https://api.groq.com/openai/v1"
    assert settings.llm_temperature == 0.7
    assert settings.llm_max_tokens == 2000
    assert settings.enhanced_hotspots is True
    assert settings.github_token is None


def test_overrides(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "k")
    monkeypatch.setenv("DATABASE_PATH", "db")
    monkeypatch.setenv("ENHANCED_HOTSPOTS", "false")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")
    settings = Settings(_env_file=None)

    assert settings.enhanced_hotspots is False
    assert settings.github_token.get_secret_value() == "ghp_x"
    assert "ghp_x" not in repr(settings)
