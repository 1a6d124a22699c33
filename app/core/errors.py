"""
Custom exception hierarchy for the Behavior Insights service.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class InsightsException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ChildNotFoundError(InsightsException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "CHILD_NOT_FOUND"

    def __init__(self, child_id: str):
        super().__init__(
            message=f"Child {child_id} not found.",
            details={"child_id": child_id},
        )


class ClassroomNotFoundError(InsightsException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "CLASSROOM_NOT_FOUND"

    def __init__(self, classroom_id: str):
        super().__init__(
            message=f"Classroom {classroom_id} not found.",
            details={"classroom_id": classroom_id},
        )


class InvalidInsightPolicyError(InsightsException):
    """Raised when an InsightPolicy is built with unusable constants."""
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INVALID_INSIGHT_POLICY"

    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid insight policy: {field}={value!r} ({reason}).",
            details={"field": field, "value": value, "reason": reason},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def insights_exception_handler(request: Request, exc: InsightsException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
