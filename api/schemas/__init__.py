"""API schema modules."""

from api.schemas.consult import ConsultRequest, StreamEvent, StreamEventType
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

__all__ = [
    "CaseConsultRequest",
    "CaseInsightsRequest",
    "CaseInsightsResponse",
    "ConsultRequest",
    "DoctorNoteRequest",
    "DoctorNoteResponse",
    "QueueStatusUpdate",
    "StreamEvent",
    "StreamEventType",
    "SymptomCheckRequest",
    "SymptomCheckResponse",
]
