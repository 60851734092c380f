"""LLM access: OpenRouter client, test double and cost tracking."""

from medicrew.llm.client import LLMClient, MockLLMClient
from medicrew.llm.cost_tracker import CostTracker

__all__ = ["CostTracker", "LLMClient", "MockLLMClient"]
