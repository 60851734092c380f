"""
In-memory repository for the doctor & patient portal.

Holds symptom checks and doctor notes, and keeps the patient queue in
step with them: a new symptom check joins the queue, a doctor's note
completes both the check and its queue entry.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Optional

from medicrew.errors import InvalidTransitionError, SymptomCheckNotFoundError
from medicrew.models.enums import QueueStatus, SymptomCheckStatus, UrgencyLevel
from medicrew.models.portal import AIAssessment, DoctorNote, PortalStatistics, SymptomCheck
from medicrew.portal.queue import PatientQueue


logger = logging.getLogger(__name__)


class PortalStore:
    """Symptom checks, doctor notes and the queue they feed."""

    def __init__(self, queue: Optional[PatientQueue] = None):
        self.queue = queue or PatientQueue()
        self._checks: dict[str, SymptomCheck] = {}
        self._notes: list[DoctorNote] = []
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Symptom checks
    # ------------------------------------------------------------------

    def add_symptom_check(
        self,
        patient_id: str,
        patient_name: str,
        symptoms: list[str],
        duration: str,
        ai_assessment: AIAssessment,
        additional_info: str = "",
    ) -> SymptomCheck:
        """
        Store a new symptom check and put the patient in the queue.

        The queue item takes a snapshot of the assessment's urgency.
        """
        check = SymptomCheck(
            id=f"sc-{uuid.uuid4().hex[:12]}",
            patient_id=patient_id,
            patient_name=patient_name,
            symptoms=symptoms,
            duration=duration,
            additional_info=additional_info,
            ai_assessment=ai_assessment,
            status=SymptomCheckStatus.PENDING,
        )
        with self._lock:
            self._checks[check.id] = check

        self.queue.enqueue(
            patient_id=patient_id,
            patient_name=patient_name,
            urgency_level=ai_assessment.urgency_level,
            symptom_check_id=check.id,
            check_in_time=check.created_at,
        )
        logger.info(f"Stored symptom check {check.id} for patient {patient_id}")
        return check

    def get_symptom_check(self, symptom_check_id: str) -> Optional[SymptomCheck]:
        return self._checks.get(symptom_check_id)

    def require_symptom_check(self, symptom_check_id: str) -> SymptomCheck:
        """Like get_symptom_check, but raises SymptomCheckNotFoundError."""
        check = self.get_symptom_check(symptom_check_id)
        if check is None:
            raise SymptomCheckNotFoundError(symptom_check_id)
        return check

    def list_symptom_checks(self, patient_id: Optional[str] = None) -> list[SymptomCheck]:
        """All checks, or one patient's, newest first."""
        with self._lock:
            checks = list(self._checks.values())
        if patient_id is not None:
            checks = [c for c in checks if c.patient_id == patient_id]
        return sorted(checks, key=lambda c: c.created_at, reverse=True)

    def update_symptom_check_status(
        self,
        symptom_check_id: str,
        status: SymptomCheckStatus,
        assigned_doctor: Optional[str] = None,
    ) -> SymptomCheck:
        """
        Move a check forward through pending -> in-review -> completed.

        Setting the current status again is a no-op (apart from the
        doctor assignment).

        Raises:
            SymptomCheckNotFoundError: Unknown id
            InvalidTransitionError: The move would go backwards
        """
        status = SymptomCheckStatus(status)
        with self._lock:
            check = self._checks.get(symptom_check_id)
            if check is None:
                raise SymptomCheckNotFoundError(symptom_check_id)
            if status.order < check.status.order:
                raise InvalidTransitionError(
                    f"Symptom check {symptom_check_id} is already {check.status.value}",
                    {"from": check.status.value, "to": status.value},
                )
            check.status = status
            if assigned_doctor:
                check.assigned_doctor = assigned_doctor
        return check

    # ------------------------------------------------------------------
    # Doctor notes
    # ------------------------------------------------------------------

    def add_doctor_note(
        self,
        symptom_check_id: str,
        doctor_id: str,
        doctor_name: str,
        diagnosis: str,
        treatment: str = "",
        notes: str = "",
    ) -> DoctorNote:
        """
        Record a doctor's diagnosis and close the case.

        Marks the symptom check completed and its queue item completed.

        Raises:
            SymptomCheckNotFoundError: Unknown symptom check
        """
        self.require_symptom_check(symptom_check_id)

        note = DoctorNote(
            id=f"dn-{uuid.uuid4().hex[:12]}",
            symptom_check_id=symptom_check_id,
            doctor_id=doctor_id,
            doctor_name=doctor_name,
            diagnosis=diagnosis,
            treatment=treatment,
            notes=notes,
        )
        with self._lock:
            self._notes.append(note)

        self.update_symptom_check_status(
            symptom_check_id, SymptomCheckStatus.COMPLETED, assigned_doctor=doctor_name
        )
        queue_item = self.queue.find_by_symptom_check(symptom_check_id)
        if queue_item is not None:
            self.queue.update_status(queue_item.id, QueueStatus.COMPLETED)

        logger.info(f"Doctor {doctor_id} closed symptom check {symptom_check_id}")
        return note

    def list_doctor_notes(self, symptom_check_id: str) -> list[DoctorNote]:
        """Notes for one check, newest first."""
        with self._lock:
            notes = [n for n in self._notes if n.symptom_check_id == symptom_check_id]
        return sorted(notes, key=lambda n: n.created_at, reverse=True)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_statistics(self, now: Optional[datetime] = None) -> PortalStatistics:
        """Dashboard totals. "Today" is the calendar date of `now`."""
        today = (now or datetime.now()).date()
        with self._lock:
            checks = list(self._checks.values())

        todays = [c for c in checks if c.created_at.date() == today]
        return PortalStatistics(
            total_checks_today=len(todays),
            pending_reviews=sum(1 for c in checks if c.status == SymptomCheckStatus.PENDING),
            in_review=sum(1 for c in checks if c.status == SymptomCheckStatus.IN_REVIEW),
            completed_today=sum(1 for c in todays if c.status == SymptomCheckStatus.COMPLETED),
            average_wait_time=self.queue.average_wait_time(),
            critical_cases=sum(
                1 for c in checks if c.ai_assessment.urgency_level == UrgencyLevel.CRITICAL
            ),
        )
