"""Consultation API schemas."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from medicrew.models.consultation import CamelModel


class ConsultRequest(CamelModel):
    """Patient consultation request."""
    symptoms: str = Field(..., min_length=1, max_length=4000)
    additional_info: list[str] = Field(default_factory=list)
    stream: bool = False
    session_id: Optional[str] = None

    @field_validator("symptoms")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("symptoms must not be blank")
        return value.strip()


class StreamEventType(str, Enum):
    """Types of streaming events."""
    CONSULTATION_START = "consultation_start"
    STAGE = "stage"
    CONSULTATION_COMPLETE = "consultation_complete"
    ERROR = "error"


class StreamEvent(BaseModel):
    """Event sent via SSE during a consultation."""
    event: StreamEventType
    data: dict = Field(default_factory=dict)
