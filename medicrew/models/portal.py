"""
Data models for the doctor & patient portal.

Symptom checks submitted by patients, the doctor queue built from them,
doctor notes, and the aggregate statistics shown on the dashboard.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from medicrew.models.consultation import CamelModel, StrList, UrgencyField
from medicrew.models.enums import QueueStatus, SymptomCheckStatus


class AIAssessment(CamelModel):
    """Structured triage assessment of a patient symptom check."""

    urgency_level: UrgencyField
    possible_conditions: StrList = Field(default_factory=list)
    recommended_action: str = "Consult a healthcare provider"
    questions_to_ask: StrList = Field(default_factory=list)
    confidence: float = Field(default=75.0, ge=0.0, le=100.0)
    reasoning: str = "Based on symptom analysis"


class SymptomCheck(CamelModel):
    """A patient-submitted symptom assessment awaiting doctor review."""

    id: str
    patient_id: str
    patient_name: str
    symptoms: list[str]
    duration: str
    additional_info: str = ""
    ai_assessment: AIAssessment
    status: SymptomCheckStatus = SymptomCheckStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.now)
    assigned_doctor: Optional[str] = None


class QueueItem(CamelModel):
    """A patient case waiting for a doctor."""

    id: str
    patient_id: str
    patient_name: str
    urgency_level: UrgencyField
    estimated_wait_time: int = Field(..., ge=0, description="Minutes")
    status: QueueStatus = QueueStatus.WAITING
    symptom_check_id: str
    check_in_time: datetime = Field(default_factory=datetime.now)


class DoctorNote(CamelModel):
    """A doctor's diagnosis for a symptom check."""

    id: str
    symptom_check_id: str
    doctor_id: str
    doctor_name: str
    diagnosis: str
    treatment: str = ""
    notes: str = ""
    created_at: datetime = Field(default_factory=datetime.now)


class PortalStatistics(CamelModel):
    """Aggregate numbers for the doctor dashboard."""

    total_checks_today: int = 0
    pending_reviews: int = 0
    in_review: int = 0
    completed_today: int = 0
    average_wait_time: int = 0
    critical_cases: int = 0
