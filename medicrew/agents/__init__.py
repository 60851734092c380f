"""Care-team agents and specialist routing."""

from medicrew.agents.definitions import (
    AGENT_REGISTRY,
    AgentDefinition,
    get_agent,
    get_specialist_agents,
)
from medicrew.agents.specialists import (
    CRITICAL_KEYWORDS,
    KEYWORD_SPECIALTIES,
    detect_critical_signals,
    get_relevant_specialists,
    normalize_specialty,
)

__all__ = [
    "AGENT_REGISTRY",
    "CRITICAL_KEYWORDS",
    "KEYWORD_SPECIALTIES",
    "AgentDefinition",
    "detect_critical_signals",
    "get_agent",
    "get_relevant_specialists",
    "get_specialist_agents",
    "normalize_specialty",
]
