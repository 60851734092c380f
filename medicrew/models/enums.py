"""
MediCrew - Enumerations

Centralized enum definitions shared by the consultation workflow,
the patient queue and the doctor portal.
"""

from enum import Enum


class UrgencyLevel(str, Enum):
    """
    Canonical four-level urgency scale.

    Values are the clinical labels used by the portal and the queue.
    Patient-facing labels (emergency/urgent/routine/self_care) map
    one-to-one onto these levels.
    """

    CRITICAL = "critical"  # emergency: call 000
    HIGH = "high"  # urgent: within 24 hours
    MEDIUM = "medium"  # routine: regular GP appointment
    LOW = "low"  # self_care: manage at home

    @property
    def severity(self) -> int:
        """Integer rank, higher is more severe."""
        return _SEVERITY[self]

    @property
    def sort_key(self) -> int:
        """Ascending sort key that puts the most severe level first."""
        return _SEVERITY[UrgencyLevel.CRITICAL] - _SEVERITY[self]

    @property
    def patient_label(self) -> str:
        """Patient-facing label for this level."""
        return _PATIENT_LABELS[self]

    @classmethod
    def most_severe(cls) -> "UrgencyLevel":
        return cls.CRITICAL

    @classmethod
    def parse(cls, label: "str | UrgencyLevel") -> "UrgencyLevel":
        """
        Parse an urgency label from either vocabulary.

        Accepts clinical ("critical", "high", ...) and patient-facing
        ("emergency", "self_care", "self-care", ...) labels, case-insensitive.

        Raises:
            ValueError: If the label is not recognised
        """
        if isinstance(label, cls):
            return label
        if not isinstance(label, str):
            raise ValueError(f"Unknown urgency level: {label!r}")

        normalized = label.strip().lower().replace("-", "_").replace(" ", "_")
        for level in cls:
            if normalized == level.value:
                return level
        for level, patient_label in _PATIENT_LABELS.items():
            if normalized == patient_label:
                return level

        raise ValueError(f"Unknown urgency level: {label!r}")


_SEVERITY = {
    UrgencyLevel.CRITICAL: 3,
    UrgencyLevel.HIGH: 2,
    UrgencyLevel.MEDIUM: 1,
    UrgencyLevel.LOW: 0,
}

_PATIENT_LABELS = {
    UrgencyLevel.CRITICAL: "emergency",
    UrgencyLevel.HIGH: "urgent",
    UrgencyLevel.MEDIUM: "routine",
    UrgencyLevel.LOW: "self_care",
}


class AgentRole(str, Enum):
    """Roles that can contribute a message to a consultation."""

    TRIAGE = "triage"
    GP = "gp"
    CARDIOLOGY = "cardiology"
    MENTAL_HEALTH = "mental_health"
    DERMATOLOGY = "dermatology"
    ORTHOPEDIC = "orthopedic"
    GASTRO = "gastro"
    PHYSIOTHERAPY = "physiotherapy"
    ORCHESTRATOR = "orchestrator"

    @property
    def is_specialist(self) -> bool:
        """True for domain specialists (everything except triage, GP and coordinator)."""
        return self not in (AgentRole.TRIAGE, AgentRole.GP, AgentRole.ORCHESTRATOR)


class ConsultationStep(str, Enum):
    """Stages of the consultation state machine, in forward order."""

    TRIAGE = "triage"
    GP = "gp"
    SPECIALIST = "specialist"
    SYNTHESIZE = "synthesize"
    COMPLETE = "complete"

    @property
    def order(self) -> int:
        return _STEP_ORDER.index(self)


_STEP_ORDER = [
    ConsultationStep.TRIAGE,
    ConsultationStep.GP,
    ConsultationStep.SPECIALIST,
    ConsultationStep.SYNTHESIZE,
    ConsultationStep.COMPLETE,
]


class SymptomCheckStatus(str, Enum):
    """Review status of a patient symptom check."""

    PENDING = "pending"
    IN_REVIEW = "in-review"
    COMPLETED = "completed"

    @property
    def order(self) -> int:
        return _CHECK_STATUS_ORDER.index(self)


_CHECK_STATUS_ORDER = [
    SymptomCheckStatus.PENDING,
    SymptomCheckStatus.IN_REVIEW,
    SymptomCheckStatus.COMPLETED,
]


class QueueStatus(str, Enum):
    """Status of a patient waiting in the doctor queue."""

    WAITING = "waiting"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


# Fixed vocabulary offered by the patient symptom form
SYMPTOM_DURATIONS = [
    "Less than 1 day",
    "1-3 days",
    "4-7 days",
    "1-2 weeks",
    "More than 2 weeks",
]
