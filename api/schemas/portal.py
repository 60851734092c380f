"""Portal API schemas."""

from typing import Optional

from pydantic import Field, field_validator

from medicrew.models.consultation import (
    CamelModel,
    DoctorInsights,
    TreatmentPlanSuggestion,
)
from medicrew.models.enums import SYMPTOM_DURATIONS, QueueStatus
from medicrew.models.portal import AIAssessment, DoctorNote, SymptomCheck


class SymptomCheckRequest(CamelModel):
    """A patient's symptom checklist submission."""
    patient_id: str = Field(..., min_length=1)
    patient_name: str = Field(..., min_length=1)
    symptoms: list[str] = Field(..., min_length=1)
    duration: str = Field(..., min_length=1, examples=SYMPTOM_DURATIONS)
    additional_info: str = ""

    @field_validator("symptoms")
    @classmethod
    def _drop_blank_symptoms(cls, value: list[str]) -> list[str]:
        cleaned = [s.strip() for s in value if s and s.strip()]
        if not cleaned:
            raise ValueError("at least one symptom is required")
        return cleaned


class SymptomCheckResponse(CamelModel):
    assessment: AIAssessment
    symptom_check: SymptomCheck


class QueueStatusUpdate(CamelModel):
    status: QueueStatus


class DoctorNoteRequest(CamelModel):
    """A doctor's diagnosis for a symptom check."""
    symptom_check_id: str = Field(..., min_length=1)
    doctor_id: str = Field(..., min_length=1)
    doctor_name: str = Field(..., min_length=1)
    diagnosis: str = Field(..., min_length=1)
    treatment: str = ""
    notes: str = ""


class DoctorNoteResponse(CamelModel):
    note: DoctorNote
    symptom_check: SymptomCheck


class CaseInsightsRequest(CamelModel):
    """Request AI insights for a case; a doctorId marks the case in review."""
    symptom_check_id: str = Field(..., min_length=1)
    doctor_id: Optional[str] = None
    diagnosis: Optional[str] = None


class CaseInsightsResponse(CamelModel):
    insights: DoctorInsights
    treatment_plan: TreatmentPlanSuggestion


class CaseConsultRequest(CamelModel):
    symptom_check_id: str = Field(..., min_length=1)
