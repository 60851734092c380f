"""Doctor & patient portal routes."""

import asyncio
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Query

from api.deps import AssessmentServiceDep, DoctorOrchestratorDep, PortalStoreDep
from api.schemas.portal import (
    CaseConsultRequest,
    CaseInsightsRequest,
    CaseInsightsResponse,
    DoctorNoteRequest,
    DoctorNoteResponse,
    QueueStatusUpdate,
    SymptomCheckRequest,
    SymptomCheckResponse,
)
from api.sse import sse_response, stage_event_stream
from medicrew.errors import QueueItemNotFoundError
from medicrew.models.enums import SymptomCheckStatus
from medicrew.models.portal import PortalStatistics, QueueItem, SymptomCheck

router = APIRouter(prefix="/portal")
logger = logging.getLogger(__name__)


# =============================================================================
# PATIENT SIDE
# =============================================================================


@router.post("/symptom-check", response_model=SymptomCheckResponse)
async def submit_symptom_check(
    request: SymptomCheckRequest,
    store: PortalStoreDep,
    assessments: AssessmentServiceDep,
) -> SymptomCheckResponse:
    """Assess a symptom checklist, store it and queue the patient."""
    assessment = await assessments.analyze_symptoms(
        request.symptoms, request.duration, request.additional_info
    )
    check = store.add_symptom_check(
        patient_id=request.patient_id,
        patient_name=request.patient_name,
        symptoms=request.symptoms,
        duration=request.duration,
        additional_info=request.additional_info,
        ai_assessment=assessment,
    )
    return SymptomCheckResponse(assessment=assessment, symptom_check=check)


@router.get("/symptom-checks", response_model=list[SymptomCheck])
async def list_symptom_checks(
    store: PortalStoreDep,
    patient_id: Optional[str] = Query(default=None, alias="patientId"),
) -> list[SymptomCheck]:
    """All symptom checks, or one patient's, newest first."""
    return store.list_symptom_checks(patient_id)


@router.get("/symptom-checks/{symptom_check_id}", response_model=SymptomCheck)
async def get_symptom_check(symptom_check_id: str, store: PortalStoreDep) -> SymptomCheck:
    return store.require_symptom_check(symptom_check_id)


# =============================================================================
# QUEUE
# =============================================================================


@router.get("/queue", response_model=list[QueueItem])
async def get_queue(store: PortalStoreDep) -> list[QueueItem]:
    """The patient queue, most urgent first."""
    return store.queue.list_ordered_by_urgency()


@router.patch("/queue/{item_id}", response_model=QueueItem)
async def update_queue_item(item_id: str, update: QueueStatusUpdate, store: PortalStoreDep) -> QueueItem:
    item = store.queue.update_status(item_id, update.status)
    if item is None:
        raise QueueItemNotFoundError(item_id)
    return item


@router.delete("/queue/{item_id}")
async def remove_queue_item(item_id: str, store: PortalStoreDep) -> dict:
    if not store.queue.remove(item_id):
        raise QueueItemNotFoundError(item_id)
    return {"removed": item_id}


@router.get("/statistics", response_model=PortalStatistics)
async def get_statistics(store: PortalStoreDep) -> PortalStatistics:
    return store.get_statistics()


# =============================================================================
# DOCTOR SIDE
# =============================================================================


@router.post("/doctor-note", response_model=DoctorNoteResponse)
async def submit_doctor_note(request: DoctorNoteRequest, store: PortalStoreDep) -> DoctorNoteResponse:
    """Record a diagnosis; the symptom check and its queue entry are completed."""
    note = store.add_doctor_note(
        symptom_check_id=request.symptom_check_id,
        doctor_id=request.doctor_id,
        doctor_name=request.doctor_name,
        diagnosis=request.diagnosis,
        treatment=request.treatment,
        notes=request.notes,
    )
    return DoctorNoteResponse(
        note=note,
        symptom_check=store.require_symptom_check(request.symptom_check_id),
    )


@router.post("/case-insights", response_model=CaseInsightsResponse)
async def case_insights(
    request: CaseInsightsRequest,
    store: PortalStoreDep,
    assessments: AssessmentServiceDep,
) -> CaseInsightsResponse:
    """Diagnostic insights and a treatment plan suggestion for one case."""
    check = store.require_symptom_check(request.symptom_check_id)

    if request.doctor_id and check.status == SymptomCheckStatus.PENDING:
        check = store.update_symptom_check_status(
            check.id, SymptomCheckStatus.IN_REVIEW, assigned_doctor=request.doctor_id
        )

    conditions = check.ai_assessment.possible_conditions
    diagnosis = request.diagnosis or (conditions[0] if conditions else "Further evaluation")

    insights, treatment_plan = await asyncio.gather(
        assessments.generate_doctor_insights(check),
        assessments.generate_treatment_plan(diagnosis, check.symptoms),
    )
    return CaseInsightsResponse(insights=insights, treatment_plan=treatment_plan)


@router.post("/case-consult")
async def case_consult(
    request: CaseConsultRequest,
    store: PortalStoreDep,
    orchestrator: DoctorOrchestratorDep,
):
    """Stream a doctor-facing care-team discussion of one case."""
    check = store.require_symptom_check(request.symptom_check_id)
    session_id = str(uuid.uuid4())
    logger.info(f"Doctor consultation {session_id} for symptom check {check.id}")

    stages = orchestrator.stream(check, session_id=session_id)
    return sse_response(stage_event_stream(stages, session_id))
