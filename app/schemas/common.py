"""
Error envelope shared by every analytics endpoint.
"""
from typing import Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response: `{code, message, details}`."""

    code: str = Field(examples=["CHILD_NOT_FOUND"])
    message: str
    details: Optional[dict[str, Any]] = Field(
        default=None,
        description="Identifiers or field errors behind the failure; omitted when empty.",
    )
