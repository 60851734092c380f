"""
Data models for the MediCrew consultation workflow.

These Pydantic models define the records exchanged between workflow
stages, the structured outputs parsed from LLM responses, and the
shared consultation state that every stage mutates.
"""

import uuid
from datetime import datetime
from typing import Annotated, Any, Iterable, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from medicrew.errors import InvalidTransitionError
from medicrew.models.enums import AgentRole, ConsultationStep, UrgencyLevel


HEALTH_NAVIGATION_DISCLAIMER = (
    "This guidance is for health navigation purposes only and does not "
    "constitute medical advice. Please consult a qualified healthcare "
    "provider for proper diagnosis and treatment."
)


def _coerce_urgency(value: Any) -> Any:
    if isinstance(value, str):
        return UrgencyLevel.parse(value)
    return value


def _coerce_str_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return value


# Accepts both the clinical and the patient-facing vocabulary
UrgencyField = Annotated[UrgencyLevel, BeforeValidator(_coerce_urgency)]

# LLMs sometimes answer a list field with a bare string or null
StrList = Annotated[list[str], BeforeValidator(_coerce_str_list)]


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# LLM RESPONSES AND USAGE
# =============================================================================


class LLMResponse(BaseModel):
    """Response from an LLM API call."""

    content: str = Field(..., description="Response content")
    model: str = Field(..., description="Model that generated the response")
    input_tokens: int = Field(default=0)
    output_tokens: int = Field(default=0)
    finish_reason: str = Field(default="stop")


class TokenUsage(CamelModel):
    """Token usage statistics for a consultation."""

    total_input_tokens: int = Field(default=0)
    total_output_tokens: int = Field(default=0)
    total_tokens: int = Field(default=0)
    estimated_cost_usd: float = Field(default=0.0)


# =============================================================================
# AGENT MESSAGES
# =============================================================================


class AgentMessage(CamelModel):
    """A single contribution to the consultation. Never mutated once produced."""

    model_config = ConfigDict(frozen=True)

    role: AgentRole = Field(..., description="Role of the contributing agent")
    agent_name: str = Field(..., description="Display name of the agent")
    content: str = Field(..., description="Free-text contribution")
    timestamp: datetime = Field(default_factory=datetime.now)


# =============================================================================
# STRUCTURED STAGE OUTPUTS
# =============================================================================


class TriageOutput(CamelModel):
    """Structured triage assessment requested from the triage agent."""

    urgency_level: UrgencyField
    reasoning: str
    red_flags: StrList = Field(default_factory=list)
    relevant_specialties: StrList = Field(default_factory=list)
    follow_up_questions: StrList = Field(default_factory=list)


class SpecialistOutput(CamelModel):
    """Structured specialist opinion."""

    assessment: str
    key_findings: StrList = Field(default_factory=list)
    recommendations: StrList = Field(default_factory=list)
    questions_for_patient: StrList = Field(default_factory=list)


class CareRecommendation(CamelModel):
    """Final patient-facing recommendation produced by the synthesis stage."""

    urgency: UrgencyField
    summary: str
    next_steps: StrList = Field(default_factory=list)
    questions_for_doctor: StrList = Field(default_factory=list)
    specialist_type: Optional[str] = None
    timeframe: str = "At your earliest convenience"
    disclaimer: str = HEALTH_NAVIGATION_DISCLAIMER

    @field_validator("disclaimer", mode="after")
    @classmethod
    def _fixed_disclaimer(cls, value: str) -> str:
        # Whatever the model wrote, the disclaimer text is ours
        return HEALTH_NAVIGATION_DISCLAIMER


class DoctorInsights(CamelModel):
    """Diagnostic insights for a doctor reviewing a case."""

    differential_diagnosis: StrList = Field(default_factory=list)
    recommended_tests: StrList = Field(default_factory=list)
    red_flags: StrList = Field(default_factory=list)
    ai_confidence: float = Field(default=0.0, ge=0.0, le=100.0)


class TreatmentPlanSuggestion(CamelModel):
    """Suggested treatment plan for the reviewing doctor."""

    medications: StrList = Field(default_factory=list)
    lifestyle: StrList = Field(default_factory=list)
    follow_up: str = "Schedule follow-up in 1-2 weeks or sooner if symptoms worsen."


class DoctorSummary(CamelModel):
    """Terminal output of the doctor-facing consultation."""

    insights: DoctorInsights
    treatment_plan: TreatmentPlanSuggestion


# =============================================================================
# CONSULTATION STATE
# =============================================================================


class ConsultationState(CamelModel):
    """
    Shared state of one consultation session.

    Stages never assign fields directly; they go through the mutation
    methods below, which keep messages append-only, flag and specialty
    sets duplicate-free, and the current step moving forward only.
    """

    symptoms: str = Field(..., description="Patient-provided symptom text")
    additional_info: list[str] = Field(default_factory=list)
    messages: list[AgentMessage] = Field(default_factory=list)
    urgency_level: Optional[UrgencyLevel] = None
    red_flags: list[str] = Field(default_factory=list)
    relevant_specialties: list[AgentRole] = Field(default_factory=list)
    recommendation: Optional[CareRecommendation] = None
    doctor_summary: Optional[DoctorSummary] = None
    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = Field(default_factory=datetime.now)
    current_step: ConsultationStep = ConsultationStep.TRIAGE
    token_usage: TokenUsage = Field(default_factory=TokenUsage)

    @property
    def is_complete(self) -> bool:
        return self.current_step == ConsultationStep.COMPLETE

    @property
    def specialists_to_consult(self) -> list[AgentRole]:
        """Relevant specialties that are actual specialists, in set order."""
        return [role for role in self.relevant_specialties if role.is_specialist]

    def append_message(self, message: AgentMessage) -> None:
        self.messages.append(message)

    def merge_red_flags(self, flags: Iterable[str]) -> list[str]:
        """
        Union new red flags into the state.

        Comparison is on stripped, case-folded text; the first spelling
        seen is kept. Returns the flags that were actually added.
        """
        seen = {flag.strip().casefold() for flag in self.red_flags}
        added = []
        for flag in flags:
            if not isinstance(flag, str):
                continue
            cleaned = flag.strip()
            key = cleaned.casefold()
            if not cleaned or key in seen:
                continue
            seen.add(key)
            self.red_flags.append(cleaned)
            added.append(cleaned)
        return added

    def merge_specialties(self, roles: Iterable["AgentRole | str"]) -> list[AgentRole]:
        """
        Union new roles into the relevant specialties.

        Free-text names like "Mental Health" are normalised; unknown
        names are ignored. Returns the roles actually added.
        """
        added = []
        for role in roles:
            if isinstance(role, str) and not isinstance(role, AgentRole):
                role = role.strip().lower().replace("-", "_").replace(" ", "_")
            try:
                role = AgentRole(role)
            except ValueError:
                continue
            if role in self.relevant_specialties:
                continue
            self.relevant_specialties.append(role)
            added.append(role)
        return added

    def advance_to(self, step: ConsultationStep) -> None:
        """Move the state machine forward. Staying put or going back is an error."""
        if step.order <= self.current_step.order:
            raise InvalidTransitionError(
                f"Cannot move consultation from {self.current_step.value} to {step.value}",
                {"from": self.current_step.value, "to": step.value},
            )
        self.current_step = step

    def set_recommendation(self, recommendation: CareRecommendation) -> None:
        if self.recommendation is not None:
            raise InvalidTransitionError("Recommendation already written for this consultation")
        self.recommendation = recommendation

    def set_doctor_summary(self, summary: DoctorSummary) -> None:
        if self.doctor_summary is not None:
            raise InvalidTransitionError("Doctor summary already written for this consultation")
        self.doctor_summary = summary

    def format_transcript(self, template: str = "{name}: {content}") -> str:
        """Render prior messages for inclusion in a prompt."""
        return "\n\n".join(
            template.format(name=m.agent_name, content=m.content) for m in self.messages
        )


class StageEvent(BaseModel):
    """Delta emitted after each workflow stage completes."""

    step: str = Field(..., description="Stage that just ran")
    data: dict = Field(default_factory=dict, description="What the stage changed")
