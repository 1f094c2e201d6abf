"""Tests for the chat-completion adapter."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIConnectionError, AuthenticationError

from repo_onboarding.domain.exceptions import LlmUnavailableError
from repo_onboarding.infrastructure.openai_adapter import OpenAIAdapter, strip_reasoning


def _response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def adapter():
    adapter = OpenAIAdapter(api_key="test-key", model="test-model", base_url="https://llm.test/v1")
    adapter._client = MagicMock()
    adapter._client.chat.completions.create = AsyncMock(return_value=_response("Hello"))
    return adapter


class TestStripReasoning:
    def test_no_delimiter_is_unchanged(self):
        assert strip_reasoning("  plain answer  ") == "  plain answer  "

    def test_returns_text_after_delimiter(self):
        assert strip_reasoning("<think>hmm, let me see</think>\n\nThe answer") == "The answer"

    def test_only_first_delimiter_splits(self):
        assert strip_reasoning("a</think>b</think>c") == "b</think>c"

    def test_nothing_after_delimiter(self):
        assert strip_reasoning("<think>only thoughts</think>") == ""


class TestComplete:
    @pytest.mark.asyncio
    async def test_sends_system_and_user_messages(self, adapter):
        result = await adapter.complete("What is this?", "Be brief.")
        assert result == "Hello"
        kwargs = adapter._client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "What is this?"},
        ]
        assert "response_format" not in kwargs

    @pytest.mark.asyncio
    async def test_without_system_instruction(self, adapter):
        await adapter.complete("Hi")
        kwargs = adapter._client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "Hi"}]

    @pytest.mark.asyncio
    async def test_json_mode_sets_response_format(self, adapter):
        await adapter.complete("Give JSON", json_mode=True)
        kwargs = adapter._client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_strips_reasoning(self, adapter):
        adapter._client.chat.completions.create.return_value = _response(
            "<think>private</think>\n- Add tests"
        )
        assert await adapter.complete("Recommend") == "- Add tests"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, ""])
    async def test_empty_content_raises(self, adapter, content):
        adapter._client.chat.completions.create.return_value = _response(content)
        with pytest.raises(LlmUnavailableError):
            await adapter.complete("Hi")

    @pytest.mark.asyncio
    async def test_connection_error_raises(self, adapter):
        request = httpx.Request("POST", "https://llm.test/v1/chat/completions")
        adapter._client.chat.completions.create.side_effect = APIConnectionError(request=request)
        with pytest.raises(LlmUnavailableError, match="LLM call failed"):
            await adapter.complete("Hi")

    @pytest.mark.asyncio
    async def test_authentication_error_raises(self, adapter):
        request = httpx.Request("POST", "https://llm.test/v1/chat/completions")
        response = httpx.Response(401, request=request)
        adapter._client.chat.completions.create.side_effect = AuthenticationError(
            "bad key", response=response, body=None
        )
        with pytest.raises(LlmUnavailableError, match="Invalid LLM API key"):
            await adapter.complete("Hi")
