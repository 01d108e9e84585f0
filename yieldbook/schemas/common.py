"""
Shared Pydantic schemas used across multiple endpoints.

The error models document the failure envelope in OpenAPI so clients can
discover the error contract, not just the happy path.
"""

from typing import List

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all non-validation error handlers."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(
        ..., description="Human-readable error description", examples=["User with id '…' not found"]
    )


class ValidationErrorDetail(BaseModel):
    """Single field-level validation failure."""

    field: str = Field(
        ...,
        description="Arrow-separated path to the invalid field",
        examples=["body -> amount"],
    )
    message: str = Field(
        ...,
        description="Explanation of the validation failure",
        examples=["Input should be greater than 0"],
    )


class ValidationErrorResponse(BaseModel):
    """Response body for 422 request-validation failures."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(default="Validation failed", description="Summary message")
    details: List[ValidationErrorDetail] = Field(..., description="Per-field validation failures")


ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Incorrect PIN or deactivated account"},
    404: {"model": ErrorResponse, "description": "User or record not found"},
    409: {"model": ErrorResponse, "description": "Conflicting state"},
    422: {"model": ErrorResponse, "description": "Validation or business rule failure"},
    502: {"model": ErrorResponse, "description": "External provider unavailable"},
}


def money_as_number(v):
    """
    Serialize a Decimal amount as a JSON number.

    Pydantic v2 serializes Decimal as a string by default, which breaks
    dashboards that sum amounts client-side.
    """
    return float(v) if v is not None else None
