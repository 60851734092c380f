"""
Environment-backed settings.

Values are read from the process environment; `api.main` loads a `.env`
file with python-dotenv before the first read.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def _split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime configuration for the API and the LLM client."""

    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    temperature: float = 0.3
    max_tokens: int = 2048
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    pricing_config: str = "config/models.yaml"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        return cls(
            api_key=os.getenv("OPENROUTER_API_KEY") or None,
            base_url=os.getenv("LLM_BASE_URL", DEFAULT_BASE_URL),
            model=os.getenv("MEDICREW_MODEL", DEFAULT_MODEL),
            temperature=float(os.getenv("MEDICREW_TEMPERATURE", "0.3")),
            max_tokens=int(os.getenv("MEDICREW_MAX_TOKENS", "2048")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS")) or list(DEFAULT_CORS_ORIGINS),
            pricing_config=os.getenv("MEDICREW_PRICING_CONFIG", "config/models.yaml"),
        )
