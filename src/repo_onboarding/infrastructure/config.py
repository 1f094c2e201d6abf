"""Application configuration — loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file).

    ``llm_api_key`` and ``database_path`` have no default: a missing value
    makes construction fail, so the process stops at startup instead of
    failing on the first request.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    llm_api_key: SecretStr
    llm_model: str = "deepseek-r1-distill-llama-70b"
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 2000
    llm_max_retries: int = 2
    github_token: SecretStr | None = None
    github_client_id: str | None = None
    github_client_secret: SecretStr | None = None
    database_path: str
    enhanced_hotspots: bool = True
    fetch_concurrency: int = 8
    max_tree_depth: int = 10
    max_review_pulls: int = 100
    max_context_tokens: int = 32_000
    http_timeout: float = 30.0
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()  # type: ignore[call-arg]
