"""
Exception hierarchy for MediCrew.

Every error carries a machine-readable code and an HTTP status so the API
layer can render it without knowing the concrete type.
"""

from typing import Any, Optional


class MediCrewError(Exception):
    """Base exception for the application."""

    error_code = "MEDICREW_ERROR"
    http_status = 500

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# LLM collaborator errors
# =============================================================================


class LLMError(MediCrewError):
    """Raised when the text-generation service fails."""

    error_code = "LLM_ERROR"
    http_status = 502


class LLMRateLimitError(LLMError):
    """The text-generation service is rate limiting us."""

    error_code = "RATE_LIMITED"
    http_status = 429

    def __init__(
        self,
        message: str = "The AI service is busy. Please try again shortly.",
        retry_after: int = 30,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.retry_after = retry_after
        details = {**(details or {}), "retry_after": retry_after}
        super().__init__(message, details)


class LLMConfigurationError(LLMError):
    """Missing or rejected credentials for the text-generation service."""

    error_code = "SERVICE_MISCONFIGURED"
    http_status = 503

    def __init__(
        self,
        message: str = "The AI service is not configured correctly.",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)


class LLMServiceError(LLMError):
    """Any other failure reported by the text-generation service."""

    error_code = "AI_SERVICE_ERROR"


# =============================================================================
# Domain errors
# =============================================================================


class InvalidTransitionError(MediCrewError):
    """A state change that would move a record backwards."""

    error_code = "INVALID_TRANSITION"
    http_status = 409


class NotFoundError(MediCrewError):
    error_code = "NOT_FOUND"
    http_status = 404


class SymptomCheckNotFoundError(NotFoundError):
    def __init__(self, symptom_check_id: str):
        super().__init__(
            f"Symptom check not found ({symptom_check_id})",
            {"symptom_check_id": symptom_check_id},
        )


class QueueItemNotFoundError(NotFoundError):
    def __init__(self, queue_item_id: str):
        super().__init__(
            f"Queue item not found ({queue_item_id})",
            {"queue_item_id": queue_item_id},
        )
