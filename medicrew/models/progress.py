"""
Progress tracking models for consultation execution.

Workflows report stage boundaries through an optional callback so the
API layer can forward them to clients as they happen.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class ProgressStage(str, Enum):
    """Progress stages of a consultation run."""

    INITIALIZING = "initializing"
    TRIAGE = "triage"
    GP = "gp"
    SPECIALIST_THINKING = "specialist_thinking"
    SPECIALIST_COMPLETE = "specialist_complete"
    SYNTHESIZE = "synthesize"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class ProgressUpdate:
    """
    Progress update event for callbacks.

    Attributes:
        stage: Current stage of execution
        message: Human-readable status message
        percent: Overall progress percentage (0-100)
        detail: Optional extra information (agent role, urgency, etc.)
    """
    stage: ProgressStage
    message: str
    percent: int
    detail: dict = field(default_factory=dict)


class ProgressCallback(Protocol):
    """Protocol for progress callback functions."""

    def __call__(self, update: ProgressUpdate) -> None:
        """Called with progress updates during consultation execution."""
        ...
