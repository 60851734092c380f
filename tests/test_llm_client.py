"""Tests for LLM client."""

import httpx
import openai
import pytest
from unittest.mock import AsyncMock, MagicMock
from tenacity import wait_none

from medicrew.errors import LLMConfigurationError, LLMRateLimitError, LLMServiceError
from medicrew.llm.client import LLMClient, MockLLMClient
from medicrew.models.consultation import LLMResponse


COMPLETIONS_URL = "https://openrouter.ai/api/v1/chat/completions"


def _http_response(status: int, headers: dict = None) -> httpx.Response:
    return httpx.Response(
        status,
        headers=headers or {},
        request=httpx.Request("POST", COMPLETIONS_URL),
    )


def _completion(content: str = "Hello", prompt_tokens: int = 12, completion_tokens: int = 5):
    """Build an object shaped like an OpenAI chat completion."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.choices[0].finish_reason = "stop"
    response.usage.prompt_tokens = prompt_tokens
    response.usage.completion_tokens = completion_tokens
    return response


@pytest.fixture
def llm_client():
    return LLMClient(api_key="test-key")


class TestMockLLMClient:
    """Tests for MockLLMClient."""

    @pytest.mark.asyncio
    async def test_mock_client_returns_response(self):
        """Test that mock client returns a valid response."""
        client = MockLLMClient()

        response = await client.complete(
            model="test/model",
            messages=[{"role": "user", "content": "Hello"}],
        )

        assert isinstance(response, LLMResponse)
        assert response.model == "test/model"
        assert response.content == "Mock response from test/model"

    @pytest.mark.asyncio
    async def test_mock_client_model_responses(self):
        client = MockLLMClient(responses={"model-a": "From A"}, default_response="Fallback")

        a = await client.complete(model="model-a", messages=[{"role": "user", "content": "x"}])
        b = await client.complete(model="model-b", messages=[{"role": "user", "content": "x"}])

        assert a.content == "From A"
        assert b.content == "Fallback"

    @pytest.mark.asyncio
    async def test_mock_client_prompt_responses(self):
        """Prompt substrings win over model names; system prompts are searched too."""
        client = MockLLMClient(
            responses={"m": "by model"},
            prompt_responses={"triage": "by prompt"},
        )

        response = await client.complete(
            model="m",
            messages=[
                {"role": "system", "content": "You are the triage nurse"},
                {"role": "user", "content": "Help"},
            ],
        )
        assert response.content == "by prompt"

    @pytest.mark.asyncio
    async def test_mock_client_records_calls(self):
        """Test that mock client records all calls."""
        client = MockLLMClient()

        await client.complete(
            model="model-a",
            messages=[{"role": "user", "content": "First"}],
            temperature=0.5,
        )
        await client.complete(
            model="model-b",
            messages=[{"role": "user", "content": "Second"}],
            max_tokens=100,
        )

        assert len(client.calls) == 2
        assert client.calls[0]["temperature"] == 0.5
        assert client.calls[1]["max_tokens"] == 100

    @pytest.mark.asyncio
    async def test_mock_client_raises_configured_errors(self):
        client = MockLLMClient(errors={"boom": LLMServiceError("down")})

        ok = await client.complete(model="m", messages=[{"role": "user", "content": "fine"}])
        assert ok.content

        with pytest.raises(LLMServiceError):
            await client.complete(model="m", messages=[{"role": "user", "content": "boom"}])

        client = MockLLMClient(error=LLMRateLimitError(retry_after=5))
        with pytest.raises(LLMRateLimitError):
            await client.complete(model="m", messages=[{"role": "user", "content": "fine"}])


class TestLLMClient:
    """Tests for the OpenRouter client."""

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
        with pytest.raises(LLMConfigurationError):
            LLMClient()

    def test_reads_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "env-key")
        monkeypatch.delenv("LLM_BASE_URL", raising=False)
        client = LLMClient()
        assert client.api_key == "env-key"
        assert client.base_url == LLMClient.OPENROUTER_BASE_URL

    @pytest.mark.asyncio
    async def test_complete_returns_response(self, llm_client):
        llm_client.client.chat.completions.create = AsyncMock(return_value=_completion("Hi there"))

        response = await llm_client.complete(
            model="google/gemini-2.5-flash",
            messages=[{"role": "user", "content": "Hello"}],
            max_tokens=256,
        )

        assert response.content == "Hi there"
        assert response.input_tokens == 12
        assert response.output_tokens == 5
        kwargs = llm_client.client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 256
        assert kwargs["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_rate_limit_maps_to_rate_limit_error(self, llm_client):
        """429s surface at once, carrying the provider's Retry-After."""
        error = openai.RateLimitError(
            "rate limited",
            response=_http_response(429, {"retry-after": "12"}),
            body=None,
        )
        llm_client.client.chat.completions.create = AsyncMock(side_effect=error)

        with pytest.raises(LLMRateLimitError) as exc_info:
            await llm_client.complete(model="m", messages=[{"role": "user", "content": "x"}])

        assert exc_info.value.retry_after == 12
        assert llm_client.client.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_rate_limit_without_header_uses_default(self, llm_client):
        error = openai.RateLimitError("rate limited", response=_http_response(429), body=None)
        llm_client.client.chat.completions.create = AsyncMock(side_effect=error)

        with pytest.raises(LLMRateLimitError) as exc_info:
            await llm_client.complete(model="m", messages=[{"role": "user", "content": "x"}])

        assert exc_info.value.retry_after == 30

    @pytest.mark.asyncio
    async def test_auth_error_maps_to_configuration_error(self, llm_client):
        error = openai.AuthenticationError("bad key", response=_http_response(401), body=None)
        llm_client.client.chat.completions.create = AsyncMock(side_effect=error)

        with pytest.raises(LLMConfigurationError):
            await llm_client.complete(model="m", messages=[{"role": "user", "content": "x"}])

    @pytest.mark.asyncio
    async def test_server_error_maps_to_service_error(self, llm_client):
        error = openai.InternalServerError("oops", response=_http_response(500), body=None)
        llm_client.client.chat.completions.create = AsyncMock(side_effect=error)

        with pytest.raises(LLMServiceError):
            await llm_client.complete(model="m", messages=[{"role": "user", "content": "x"}])

    @pytest.mark.asyncio
    async def test_connection_errors_are_retried(self, llm_client, monkeypatch):
        """Transport failures are retried three times before giving up."""
        monkeypatch.setattr(LLMClient._create.retry, "wait", wait_none())
        error = openai.APIConnectionError(request=httpx.Request("POST", COMPLETIONS_URL))
        llm_client.client.chat.completions.create = AsyncMock(side_effect=error)

        with pytest.raises(LLMServiceError):
            await llm_client.complete(model="m", messages=[{"role": "user", "content": "x"}])

        assert llm_client.client.chat.completions.create.await_count == 3

    @pytest.mark.asyncio
    async def test_connection_recovers_on_retry(self, llm_client, monkeypatch):
        monkeypatch.setattr(LLMClient._create.retry, "wait", wait_none())
        error = openai.APIConnectionError(request=httpx.Request("POST", COMPLETIONS_URL))
        llm_client.client.chat.completions.create = AsyncMock(side_effect=[error, _completion("Back")])

        response = await llm_client.complete(model="m", messages=[{"role": "user", "content": "x"}])

        assert response.content == "Back"

    @pytest.mark.asyncio
    async def test_client_keeps_no_per_call_state(self, llm_client):
        """The API shares one client, so completions must not accumulate on it."""
        llm_client.client.chat.completions.create = AsyncMock(return_value=_completion("ok"))
        attributes = dict(vars(llm_client))

        for _ in range(50):
            await llm_client.complete(model="m", messages=[{"role": "user", "content": "x"}])

        assert vars(llm_client) == attributes
        for value in vars(llm_client).values():
            assert not isinstance(value, (list, dict))
