"""Tests for the portal repository."""

from datetime import datetime, timedelta

import pytest

from medicrew.errors import InvalidTransitionError, SymptomCheckNotFoundError
from medicrew.models.enums import QueueStatus, SymptomCheckStatus, UrgencyLevel
from medicrew.models.portal import AIAssessment


def _add(store, patient_id="pat-001", urgency=UrgencyLevel.MEDIUM, symptoms=None):
    return store.add_symptom_check(
        patient_id=patient_id,
        patient_name="Jordan Lee",
        symptoms=symptoms or ["Headache"],
        duration="1-3 days",
        ai_assessment=AIAssessment(urgency_level=urgency, possible_conditions=["Migraine"]),
    )


class TestSymptomChecks:
    """Tests for storing and reviewing symptom checks."""

    def test_add_symptom_check_queues_patient(self, portal_store):
        check = _add(portal_store, urgency=UrgencyLevel.HIGH)

        assert check.id.startswith("sc-")
        assert check.status == SymptomCheckStatus.PENDING
        assert portal_store.get_symptom_check(check.id) is check

        item = portal_store.queue.find_by_symptom_check(check.id)
        assert item.urgency_level == UrgencyLevel.HIGH
        assert item.patient_id == "pat-001"
        assert item.check_in_time == check.created_at

    def test_queue_urgency_is_a_snapshot(self, portal_store):
        check = _add(portal_store, urgency=UrgencyLevel.LOW)
        check.ai_assessment.urgency_level = UrgencyLevel.CRITICAL

        item = portal_store.queue.find_by_symptom_check(check.id)
        assert item.urgency_level == UrgencyLevel.LOW

    def test_require_unknown_check(self, portal_store):
        assert portal_store.get_symptom_check("sc-missing") is None
        with pytest.raises(SymptomCheckNotFoundError):
            portal_store.require_symptom_check("sc-missing")

    def test_list_newest_first(self, portal_store):
        older = _add(portal_store)
        newer = _add(portal_store)
        other = _add(portal_store, patient_id="pat-002")
        older.created_at = datetime(2026, 3, 1, 8, 0)
        newer.created_at = older.created_at + timedelta(hours=1)
        other.created_at = older.created_at + timedelta(hours=2)

        assert [c.id for c in portal_store.list_symptom_checks()] == [other.id, newer.id, older.id]
        assert [c.id for c in portal_store.list_symptom_checks("pat-001")] == [newer.id, older.id]
        assert portal_store.list_symptom_checks("pat-404") == []

    def test_status_moves_forward(self, portal_store):
        check = _add(portal_store)

        portal_store.update_symptom_check_status(check.id, SymptomCheckStatus.IN_REVIEW, assigned_doctor="Dr. Kim")
        assert check.status == SymptomCheckStatus.IN_REVIEW
        assert check.assigned_doctor == "Dr. Kim"

        # Repeating the current status is allowed
        portal_store.update_symptom_check_status(check.id, "in-review")
        portal_store.update_symptom_check_status(check.id, SymptomCheckStatus.COMPLETED)
        assert check.status == SymptomCheckStatus.COMPLETED

    def test_status_cannot_move_backwards(self, portal_store):
        check = _add(portal_store)
        portal_store.update_symptom_check_status(check.id, SymptomCheckStatus.COMPLETED)

        with pytest.raises(InvalidTransitionError):
            portal_store.update_symptom_check_status(check.id, SymptomCheckStatus.PENDING)

    def test_status_unknown_check(self, portal_store):
        with pytest.raises(SymptomCheckNotFoundError):
            portal_store.update_symptom_check_status("sc-missing", SymptomCheckStatus.IN_REVIEW)


class TestDoctorNotes:
    """Tests for doctor notes."""

    def test_note_completes_check_and_queue_item(self, portal_store):
        check = _add(portal_store)

        note = portal_store.add_doctor_note(
            symptom_check_id=check.id,
            doctor_id="doc-1",
            doctor_name="Dr. Kim",
            diagnosis="Tension headache",
            treatment="Paracetamol",
        )

        assert note.id.startswith("dn-")
        assert check.status == SymptomCheckStatus.COMPLETED
        assert check.assigned_doctor == "Dr. Kim"
        assert portal_store.queue.find_by_symptom_check(check.id).status == QueueStatus.COMPLETED
        assert portal_store.list_doctor_notes(check.id) == [note]

    def test_note_for_unknown_check(self, portal_store):
        with pytest.raises(SymptomCheckNotFoundError):
            portal_store.add_doctor_note("sc-missing", "doc-1", "Dr. Kim", "Flu")
        assert portal_store.list_doctor_notes("sc-missing") == []

    def test_note_when_queue_item_removed(self, portal_store):
        check = _add(portal_store)
        item = portal_store.queue.find_by_symptom_check(check.id)
        portal_store.queue.remove(item.id)

        portal_store.add_doctor_note(check.id, "doc-1", "Dr. Kim", "Flu")
        assert check.status == SymptomCheckStatus.COMPLETED


class TestStatistics:
    """Tests for dashboard statistics."""

    def test_statistics(self, portal_store):
        now = datetime(2026, 3, 2, 12, 0)
        pending = _add(portal_store, urgency=UrgencyLevel.CRITICAL)
        reviewing = _add(portal_store, urgency=UrgencyLevel.HIGH)
        done = _add(portal_store, urgency=UrgencyLevel.LOW)
        yesterday = _add(portal_store, urgency=UrgencyLevel.CRITICAL)
        for check in (pending, reviewing, done):
            check.created_at = now - timedelta(hours=1)
        yesterday.created_at = now - timedelta(days=1)

        portal_store.update_symptom_check_status(reviewing.id, SymptomCheckStatus.IN_REVIEW)
        portal_store.add_doctor_note(done.id, "doc-1", "Dr. Kim", "Cold")

        stats = portal_store.get_statistics(now=now)

        assert stats.total_checks_today == 3
        assert stats.pending_reviews == 2
        assert stats.in_review == 1
        assert stats.completed_today == 1
        assert stats.critical_cases == 2
        assert stats.average_wait_time == portal_store.queue.average_wait_time()

    def test_empty_statistics(self, portal_store):
        stats = portal_store.get_statistics()
        assert stats.total_checks_today == 0
        assert stats.average_wait_time == 0
