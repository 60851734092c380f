"""
Cost tracking for LLM usage during a consultation.

Prices come from `config/models.yaml`; models not listed there are
charged at a conservative default rate.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Union

import yaml

from medicrew.models.consultation import LLMResponse, TokenUsage


logger = logging.getLogger(__name__)

DEFAULT_INPUT_PER_1K = 0.005
DEFAULT_OUTPUT_PER_1K = 0.015


@dataclass
class ModelPricing:
    """Price per 1K tokens for one model."""

    model_id: str
    display_name: str
    cost_input_per_1k: float
    cost_output_per_1k: float


@dataclass
class UsageRecord:
    """One LLM call made on behalf of a consultation stage."""

    timestamp: datetime
    model: str
    input_tokens: int
    output_tokens: int
    cost_usd: float
    stage: str = ""  # e.g., "triage", "specialist:cardiology"


@dataclass
class CostTracker:
    """
    Accumulates token usage and estimated cost across LLM calls.
    """

    pricing: dict[str, ModelPricing] = field(default_factory=dict)
    records: list[UsageRecord] = field(default_factory=list)

    @classmethod
    def from_config(cls, config_path: Union[str, Path] = "config/models.yaml") -> "CostTracker":
        """Load pricing from a YAML file. A missing file leaves default pricing."""
        tracker = cls()

        try:
            with open(config_path) as f:
                config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.info(f"No pricing config at {config_path}, using default pricing")
            return tracker

        for key, entry in (config.get("models") or {}).items():
            tracker.pricing[entry["id"]] = ModelPricing(
                model_id=entry["id"],
                display_name=entry.get("display_name", key),
                cost_input_per_1k=entry.get("cost_input", 0.0),
                cost_output_per_1k=entry.get("cost_output", 0.0),
            )

        return tracker

    def calculate_cost(self, model: str, input_tokens: int, output_tokens: int) -> float:
        """
        Estimate the cost of a single call in USD.

        Args:
            model: Model identifier
            input_tokens: Number of input tokens
            output_tokens: Number of output tokens
        """
        price = self.pricing.get(model)
        if price is None:
            input_rate, output_rate = DEFAULT_INPUT_PER_1K, DEFAULT_OUTPUT_PER_1K
        else:
            input_rate, output_rate = price.cost_input_per_1k, price.cost_output_per_1k
        return (input_tokens / 1000) * input_rate + (output_tokens / 1000) * output_rate

    def record(self, response: LLMResponse, stage: str = "") -> UsageRecord:
        """Record the usage reported by an LLM response."""
        entry = UsageRecord(
            timestamp=datetime.now(),
            model=response.model,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            cost_usd=self.calculate_cost(
                response.model, response.input_tokens, response.output_tokens
            ),
            stage=stage,
        )
        self.records.append(entry)
        return entry

    def get_total_cost(self) -> float:
        return sum(r.cost_usd for r in self.records)

    def get_total_tokens(self) -> tuple[int, int]:
        """Get total input and output tokens."""
        return (
            sum(r.input_tokens for r in self.records),
            sum(r.output_tokens for r in self.records),
        )

    def to_token_usage(self) -> TokenUsage:
        """Summarise everything recorded so far as a TokenUsage."""
        input_total, output_total = self.get_total_tokens()
        return TokenUsage(
            total_input_tokens=input_total,
            total_output_tokens=output_total,
            total_tokens=input_total + output_total,
            estimated_cost_usd=round(self.get_total_cost(), 6),
        )

    def get_summary(self) -> dict:
        """
        Get a summary of usage and costs.

        Returns:
            Dict with totals and a breakdown by stage
        """
        by_stage: dict[str, dict] = {}
        for entry in self.records:
            bucket = by_stage.setdefault(
                entry.stage or "unknown",
                {"calls": 0, "input_tokens": 0, "output_tokens": 0, "cost_usd": 0.0},
            )
            bucket["calls"] += 1
            bucket["input_tokens"] += entry.input_tokens
            bucket["output_tokens"] += entry.output_tokens
            bucket["cost_usd"] += entry.cost_usd

        usage = self.to_token_usage()
        return {
            **usage.model_dump(),
            "num_calls": len(self.records),
            "by_stage": by_stage,
        }

    def reset(self):
        """Clear all recorded calls."""
        self.records = []
