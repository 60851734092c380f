"""
Keyword-based specialist selection.

A pure, deterministic mapping from symptom text to the care-team roles
worth consulting. Used to seed and to back up what the triage agent
suggests.
"""

from typing import Optional

from medicrew.models.enums import AgentRole


_C = AgentRole.CARDIOLOGY
_MH = AgentRole.MENTAL_HEALTH
_D = AgentRole.DERMATOLOGY
_O = AgentRole.ORTHOPEDIC
_P = AgentRole.PHYSIOTHERAPY
_G = AgentRole.GASTRO
_GP = AgentRole.GP

# Ordered; matching keywords contribute their roles in this order.
# Substring matching is intentional ("depress" covers "depressed", "depression").
KEYWORD_SPECIALTIES: list[tuple[str, tuple[AgentRole, ...]]] = [
    # Cardiology
    ("chest", (_C, _GP)),
    ("heart", (_C,)),
    ("palpitation", (_C,)),
    ("blood pressure", (_C,)),
    # Mental health
    ("anxiety", (_MH, _GP)),
    ("depress", (_MH, _GP)),
    ("stress", (_MH, _GP)),
    ("sleep", (_MH, _GP)),
    ("mood", (_MH,)),
    ("panic", (_MH,)),
    # Dermatology
    ("skin", (_D,)),
    ("rash", (_D,)),
    ("itch", (_D,)),
    ("acne", (_D,)),
    ("mole", (_D,)),
    # Orthopedic
    ("joint", (_O, _P)),
    ("back", (_O, _P)),
    ("knee", (_O, _P)),
    ("shoulder", (_O, _P)),
    ("muscle", (_O, _P)),
    ("bone", (_O,)),
    ("sprain", (_O, _P)),
    # Physiotherapy
    ("physio", (_P,)),
    ("rehab", (_P,)),
    ("exercise", (_P, _GP)),
    ("mobility", (_P,)),
    ("stiff", (_P, _O)),
    ("posture", (_P,)),
    ("sports", (_P, _O)),
    ("injury", (_P, _O)),
    ("strain", (_P,)),
    ("flexibility", (_P,)),
    # Gastro
    ("stomach", (_G, _GP)),
    ("digest", (_G,)),
    ("nausea", (_G, _GP)),
    ("vomit", (_G,)),
    ("bowel", (_G,)),
    ("diarrhea", (_G,)),
    ("constipat", (_G,)),
    ("acid", (_G,)),
    ("heartburn", (_G,)),
]

CRITICAL_KEYWORDS = [
    "severe",
    "intense",
    "unbearable",
    "can't breathe",
    "chest pain",
    "unconscious",
    "bleeding",
    "emergency",
]


def get_relevant_specialists(symptoms: str) -> list[AgentRole]:
    """
    Select care-team roles for a symptom description.

    Args:
        symptoms: Free-text symptom description

    Returns:
        Ordered, duplicate-free roles; always includes the GP
    """
    text = symptoms.lower()
    roles: list[AgentRole] = []

    for keyword, keyword_roles in KEYWORD_SPECIALTIES:
        if keyword in text:
            for role in keyword_roles:
                if role not in roles:
                    roles.append(role)

    if AgentRole.GP not in roles:
        roles.append(AgentRole.GP)

    return roles


def detect_critical_signals(text: str) -> list[str]:
    """Return the critical keywords present in the text, in table order."""
    lowered = text.lower()
    return [keyword for keyword in CRITICAL_KEYWORDS if keyword in lowered]


# Names the triage agent tends to use for a specialty, beyond the role values
SPECIALTY_ALIASES: dict[str, AgentRole] = {
    "cardiologist": AgentRole.CARDIOLOGY,
    "cardiac": AgentRole.CARDIOLOGY,
    "psychiatry": AgentRole.MENTAL_HEALTH,
    "psychology": AgentRole.MENTAL_HEALTH,
    "mental": AgentRole.MENTAL_HEALTH,
    "dermatologist": AgentRole.DERMATOLOGY,
    "orthopedics": AgentRole.ORTHOPEDIC,
    "orthopaedic": AgentRole.ORTHOPEDIC,
    "orthopaedics": AgentRole.ORTHOPEDIC,
    "gastroenterology": AgentRole.GASTRO,
    "gastroenterologist": AgentRole.GASTRO,
    "physiotherapist": AgentRole.PHYSIOTHERAPY,
    "physical_therapy": AgentRole.PHYSIOTHERAPY,
    "general_practice": AgentRole.GP,
    "general_practitioner": AgentRole.GP,
}


def normalize_specialty(name: str) -> Optional[AgentRole]:
    """
    Map a free-text specialty name to a role.

    Returns:
        The matching role, or None for names that don't correspond to
        anyone on the care team
    """
    key = name.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return AgentRole(key)
    except ValueError:
        return SPECIALTY_ALIASES.get(key)
