"""Consultation workflows: the patient-facing and the doctor-facing flow."""

from medicrew.workflow.base import (
    MAX_SPECIALISTS,
    BaseConsultationWorkflow,
    next_step,
    route_after_gp,
    route_after_triage,
)
from medicrew.workflow.doctor_consultation import DoctorConsultationOrchestrator
from medicrew.workflow.orchestrator import ConsultationOrchestrator

__all__ = [
    "MAX_SPECIALISTS",
    "BaseConsultationWorkflow",
    "ConsultationOrchestrator",
    "DoctorConsultationOrchestrator",
    "next_step",
    "route_after_gp",
    "route_after_triage",
]
