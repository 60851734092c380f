"""Doctor & patient portal: queue, repository and AI assessments."""

from medicrew.portal.assessment import AssessmentService, fallback_assessment
from medicrew.portal.queue import BASE_WAIT_MINUTES, PatientQueue, estimate_wait_time
from medicrew.portal.store import PortalStore

__all__ = [
    "BASE_WAIT_MINUTES",
    "AssessmentService",
    "PatientQueue",
    "PortalStore",
    "estimate_wait_time",
    "fallback_assessment",
]
