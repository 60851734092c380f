"""
Care-team agent registry.

Each role has a display name, an emoji for the UI, a short description,
its areas of focus and a system prompt loaded from
`medicrew/prompts/agents/<role>.md`.
"""

from dataclasses import dataclass, field
from functools import lru_cache

from medicrew.models.enums import AgentRole
from medicrew.utils.prompt_loader import load_prompt


@dataclass(frozen=True)
class AgentDefinition:
    """Static description of one care-team member."""

    role: AgentRole
    name: str
    emoji: str
    description: str
    specialties: tuple[str, ...] = field(default_factory=tuple)

    @property
    def system_prompt(self) -> str:
        return _system_prompt(self.role)


@lru_cache(maxsize=None)
def _system_prompt(role: AgentRole) -> str:
    return load_prompt(role.value, "agents")


AGENT_REGISTRY: dict[AgentRole, AgentDefinition] = {
    AgentRole.TRIAGE: AgentDefinition(
        role=AgentRole.TRIAGE,
        name="Triage Specialist",
        emoji="🚨",
        description="Assesses urgency and identifies red flags requiring immediate attention",
        specialties=("emergency assessment", "red flag identification", "urgency classification"),
    ),
    AgentRole.GP: AgentDefinition(
        role=AgentRole.GP,
        name="Dr. Alex (GP)",
        emoji="👨‍⚕️",
        description="General Practitioner providing holistic assessment and care coordination",
        specialties=("general medicine", "preventive care", "chronic disease management", "care coordination"),
    ),
    AgentRole.CARDIOLOGY: AgentDefinition(
        role=AgentRole.CARDIOLOGY,
        name="Dr. Sarah (Cardiology)",
        emoji="❤️",
        description="Cardiologist specializing in heart and cardiovascular concerns",
        specialties=("heart conditions", "chest pain", "palpitations", "blood pressure"),
    ),
    AgentRole.MENTAL_HEALTH: AgentDefinition(
        role=AgentRole.MENTAL_HEALTH,
        name="Dr. Maya (Mental Health)",
        emoji="🧠",
        description="Mental health specialist supporting psychological wellbeing",
        specialties=("anxiety", "depression", "stress", "sleep issues", "crisis support"),
    ),
    AgentRole.DERMATOLOGY: AgentDefinition(
        role=AgentRole.DERMATOLOGY,
        name="Dr. James (Dermatology)",
        emoji="🔬",
        description="Dermatologist specializing in skin, hair, and nail conditions",
        specialties=("skin conditions", "rashes", "skin cancer screening", "acne", "eczema"),
    ),
    AgentRole.ORTHOPEDIC: AgentDefinition(
        role=AgentRole.ORTHOPEDIC,
        name="Dr. Chris (Orthopedics)",
        emoji="🦴",
        description="Orthopedic specialist for bones, joints, and muscles",
        specialties=("joint pain", "back pain", "sports injuries", "fractures", "arthritis"),
    ),
    AgentRole.GASTRO: AgentDefinition(
        role=AgentRole.GASTRO,
        name="Dr. Priya (Gastroenterology)",
        emoji="🫁",
        description="Gastroenterologist specializing in digestive system concerns",
        specialties=("stomach pain", "digestive issues", "nausea", "bowel problems", "acid reflux"),
    ),
    AgentRole.PHYSIOTHERAPY: AgentDefinition(
        role=AgentRole.PHYSIOTHERAPY,
        name="Dr. Taylor (Physiotherapist)",
        emoji="🏃",
        description="Movement specialist for rehabilitation and injury recovery",
        specialties=("musculoskeletal rehabilitation", "sports injuries", "post-surgical recovery", "mobility"),
    ),
    AgentRole.ORCHESTRATOR: AgentDefinition(
        role=AgentRole.ORCHESTRATOR,
        name="MediCrew Coordinator",
        emoji="🎯",
        description="Coordinates the consultation and synthesizes the team's input",
        specialties=("coordination", "synthesis", "recommendation"),
    ),
}


def get_agent(role: AgentRole | str) -> AgentDefinition:
    """
    Look up an agent definition.

    Raises:
        KeyError: If the role is not registered
    """
    try:
        return AGENT_REGISTRY[AgentRole(role)]
    except ValueError:
        raise KeyError(role) from None


def get_specialist_agents() -> list[AgentDefinition]:
    """All agents a patient might be routed to (everyone but triage and the coordinator)."""
    return [
        agent for agent in AGENT_REGISTRY.values()
        if agent.role not in (AgentRole.TRIAGE, AgentRole.ORCHESTRATOR)
    ]
