"""Pydantic models for error responses used in OpenAPI schema generation."""

from pydantic import BaseModel, Field

from boilerplate.domain.exceptions import ErrorCode


class ErrorResponse(BaseModel):
    """Model for every error body returned by the API.

    This is the format produced by ``error_response`` in
    boilerplate/presentation/exception_handlers.py.
    """

    code: ErrorCode = Field(
        ...,
        description="Machine-readable error code for client-side error handling",
        examples=["NOT_FOUND"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["User not found"],
    )
    details: dict[str, str] | None = Field(
        default=None,
        description="Per-field messages, only present on VALIDATION_ERROR",
        examples=[{"email": "value is not a valid email address"}],
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "code": "VALIDATION_ERROR",
                "message": "Validation failed",
                "details": {"email": "value is not a valid email address"},
            }
        }
    }
