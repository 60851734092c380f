"""Patient consultation routes."""

import logging
import uuid

from fastapi import APIRouter

from api.deps import ConsultationOrchestratorDep
from api.schemas.consult import ConsultRequest
from api.sse import sse_response, stage_event_stream

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/consult")
async def consult(request: ConsultRequest, orchestrator: ConsultationOrchestratorDep):
    """
    Run a patient consultation.

    With `stream: true` the response is an SSE stream of stage events;
    otherwise the completed consultation state is returned as JSON.
    """
    session_id = request.session_id or str(uuid.uuid4())
    logger.info(f"Consultation {session_id} requested (stream={request.stream})")

    if request.stream:
        stages = orchestrator.stream(
            request.symptoms,
            additional_info=request.additional_info,
            session_id=session_id,
        )
        return sse_response(stage_event_stream(stages, session_id))

    state = await orchestrator.run(
        request.symptoms,
        additional_info=request.additional_info,
        session_id=session_id,
    )
    return state.model_dump(mode="json", by_alias=True)
