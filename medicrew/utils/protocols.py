"""
Protocols for the collaborators the workflows depend on.

Workflows and portal services accept anything shaped like
`LLMClientProtocol`, so tests can pass `MockLLMClient` (or a MagicMock)
instead of the OpenRouter client.
"""

from typing import Optional, Protocol

from medicrew.models.consultation import LLMResponse


class LLMClientProtocol(Protocol):
    """The text-generation interface used by every stage."""

    async def complete(
        self,
        model: str,
        messages: list[dict],
        temperature: float,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Send a chat exchange and return the model's reply.

        Raises:
            LLMRateLimitError, LLMConfigurationError, LLMServiceError
        """
        ...
