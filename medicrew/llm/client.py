"""
OpenRouter LLM Client.

Provides a unified interface for calling LLMs via OpenRouter's API,
which is compatible with the OpenAI API format. SDK exceptions are
translated into the MediCrew error taxonomy so callers never depend on
the provider's types.
"""

import logging
import os
from typing import Optional

import openai
from openai import AsyncOpenAI
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from medicrew.errors import LLMConfigurationError, LLMRateLimitError, LLMServiceError
from medicrew.models.consultation import LLMResponse


logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 30


def _retry_after_seconds(error: openai.APIStatusError) -> int:
    """Read the Retry-After header of a rate-limit response, in whole seconds."""
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    value = headers.get("retry-after")
    if value is None:
        return DEFAULT_RETRY_AFTER
    try:
        return max(1, int(float(value)))
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER


class LLMClient:
    """
    Async client for OpenRouter (or any OpenAI-compatible endpoint).

    Uses the OpenAI SDK with a configurable base URL.
    """

    OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        site_url: Optional[str] = None,
        site_name: Optional[str] = None,
    ):
        """
        Initialize the LLM client.

        Args:
            api_key: OpenRouter API key. If not provided, reads from OPENROUTER_API_KEY env var.
            base_url: API base URL. Defaults to LLM_BASE_URL or OpenRouter.
            site_url: Optional site URL for OpenRouter attribution.
            site_name: Optional site name for OpenRouter attribution.

        Raises:
            LLMConfigurationError: If no API key is available
        """
        self.api_key = api_key or os.getenv("OPENROUTER_API_KEY")
        if not self.api_key:
            raise LLMConfigurationError(
                "OpenRouter API key required. Set OPENROUTER_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.base_url = base_url or os.getenv("LLM_BASE_URL", self.OPENROUTER_BASE_URL)
        self.site_url = site_url or os.getenv("OPENROUTER_SITE_URL", "http://localhost:3000")
        self.site_name = site_name or os.getenv("OPENROUTER_SITE_NAME", "MediCrew")

        self.client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            default_headers={
                "HTTP-Referer": self.site_url,
                "X-Title": self.site_name,
            },
        )

    @retry(
        retry=retry_if_exception_type(openai.APIConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _create(self, **kwargs):
        return await self.client.chat.completions.create(**kwargs)

    async def complete(
        self,
        model: str,
        messages: list[dict],
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate a completion from the specified model.

        Connection failures are retried; rate limits and credential
        problems are surfaced immediately.

        Args:
            model: Model identifier (e.g., "google/gemini-2.5-flash")
            messages: List of message dicts with "role" and "content" keys
            temperature: Sampling temperature (0.0 to 2.0)
            max_tokens: Maximum tokens to generate (optional)

        Returns:
            LLMResponse with content and token usage

        Raises:
            LLMRateLimitError: The provider returned 429
            LLMConfigurationError: The provider rejected our credentials
            LLMServiceError: Any other provider or transport failure
        """
        kwargs = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        try:
            response = await self._create(**kwargs)
        except openai.RateLimitError as e:
            retry_after = _retry_after_seconds(e)
            logger.error(f"Rate limited by {model}, retry after {retry_after}s")
            raise LLMRateLimitError(retry_after=retry_after) from e
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.error(f"Credentials rejected for {model}: {e}")
            raise LLMConfigurationError(details={"model": model}) from e
        except openai.APIConnectionError as e:
            logger.error(f"Could not reach the AI service for {model}: {e}")
            raise LLMServiceError(
                "Could not reach the AI service. Please try again.",
                {"model": model},
            ) from e
        except openai.APIError as e:
            logger.error(f"AI service error from {model}: {e}")
            raise LLMServiceError(
                "The AI service returned an error. Please try again.",
                {"model": model},
            ) from e

        content = response.choices[0].message.content or ""
        finish_reason = response.choices[0].finish_reason or "stop"

        input_tokens = response.usage.prompt_tokens if response.usage else 0
        output_tokens = response.usage.completion_tokens if response.usage else 0

        return LLMResponse(
            content=content,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            finish_reason=finish_reason,
        )


class MockLLMClient:
    """
    Mock LLM client for testing.

    Returns predefined responses without making actual API calls.
    Responses are chosen by the first matching prompt substring, then by
    model name, then the default.
    """

    def __init__(
        self,
        responses: Optional[dict[str, str]] = None,
        prompt_responses: Optional[dict[str, str]] = None,
        default_response: Optional[str] = None,
        error: Optional[Exception] = None,
        errors: Optional[dict[str, Exception]] = None,
    ):
        """
        Initialize mock client.

        Args:
            responses: Optional dict mapping model names to response content.
            prompt_responses: Optional dict mapping prompt substrings to response
                content. Matched against all message contents, in insertion order.
            default_response: Content returned when nothing else matches.
            error: Exception raised on every call.
            errors: Dict mapping prompt substrings to exceptions to raise.
        """
        self.responses = responses or {}
        self.prompt_responses = prompt_responses or {}
        self.default_response = default_response
        self.error = error
        self.errors = errors or {}
        self.calls: list[dict] = []

    async def complete(
        self,
        model: str,
        messages: list[dict],
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Return a mock response, or raise the configured error."""
        self.calls.append({
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })

        prompt = "\n".join(str(m.get("content", "")) for m in messages)

        if self.error is not None:
            raise self.error
        for needle, error in self.errors.items():
            if needle in prompt:
                raise error

        content = None
        for needle, response in self.prompt_responses.items():
            if needle in prompt:
                content = response
                break
        if content is None:
            content = self.responses.get(model)
        if content is None:
            content = self.default_response or f"Mock response from {model}"

        # Simulate token usage
        input_tokens = max(1, len(prompt) // 4)
        output_tokens = max(1, len(content) // 4)

        return LLMResponse(
            content=content,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            finish_reason="stop",
        )
