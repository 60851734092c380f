"""Data models for the consultation workflow and the doctor portal."""

from medicrew.models.consultation import (
    HEALTH_NAVIGATION_DISCLAIMER,
    AgentMessage,
    CareRecommendation,
    ConsultationState,
    DoctorInsights,
    DoctorSummary,
    LLMResponse,
    SpecialistOutput,
    StageEvent,
    TokenUsage,
    TreatmentPlanSuggestion,
    TriageOutput,
)
from medicrew.models.enums import (
    SYMPTOM_DURATIONS,
    AgentRole,
    ConsultationStep,
    QueueStatus,
    SymptomCheckStatus,
    UrgencyLevel,
)
from medicrew.models.portal import (
    AIAssessment,
    DoctorNote,
    PortalStatistics,
    QueueItem,
    SymptomCheck,
)
from medicrew.models.progress import ProgressCallback, ProgressStage, ProgressUpdate

__all__ = [
    "HEALTH_NAVIGATION_DISCLAIMER",
    "SYMPTOM_DURATIONS",
    "AIAssessment",
    "AgentMessage",
    "AgentRole",
    "CareRecommendation",
    "ConsultationState",
    "ConsultationStep",
    "DoctorInsights",
    "DoctorNote",
    "DoctorSummary",
    "LLMResponse",
    "PortalStatistics",
    "ProgressCallback",
    "ProgressStage",
    "ProgressUpdate",
    "QueueItem",
    "QueueStatus",
    "SpecialistOutput",
    "StageEvent",
    "SymptomCheck",
    "SymptomCheckStatus",
    "TokenUsage",
    "TreatmentPlanSuggestion",
    "TriageOutput",
    "UrgencyLevel",
]
