"""
Error rendering for the HTTP layer.

Every MediCrewError becomes `{error, message, details}` JSON with the
exception's own HTTP status. Rate limits also get a Retry-After header.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from medicrew.errors import LLMRateLimitError, MediCrewError


logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error has occurred. Please try again later."


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str
    message: str
    details: dict = Field(default_factory=dict)


def error_payload(exc: Exception) -> dict:
    """The error body for an exception, safe to show to users."""
    if isinstance(exc, MediCrewError):
        return ErrorResponse(
            error=exc.error_code,
            message=exc.message,
            details=exc.details,
        ).model_dump()
    return ErrorResponse(error="INTERNAL_ERROR", message=INTERNAL_ERROR_MESSAGE).model_dump()


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the application's exception handlers."""

    @app.exception_handler(MediCrewError)
    async def medicrew_error_handler(request: Request, exc: MediCrewError):
        level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
        logger.log(
            level,
            f"{exc.error_code} ({exc.http_status}) on {request.method} {request.url.path}: {exc.message}",
        )
        headers = None
        if isinstance(exc, LLMRateLimitError):
            headers = {"Retry-After": str(exc.retry_after)}
        return JSONResponse(
            status_code=exc.http_status,
            content=error_payload(exc),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.warning(f"Invalid request on {request.method} {request.url.path}: {errors}")
        fields = [".".join(str(part) for part in err.get("loc", ())[1:]) for err in errors]
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="VALIDATION_ERROR",
                message=f"Invalid request: {', '.join(f for f in fields if f) or 'body'}",
                details={"errors": [
                    {"field": field, "message": err.get("msg", "")}
                    for field, err in zip(fields, errors)
                ]},
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=error_payload(exc))
