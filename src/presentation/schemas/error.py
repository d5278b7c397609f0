"""Pydantic schema for API error responses."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorResponseSchema(BaseModel):
    """Standard error response format for all API errors."""

    error: str = Field(
        ...,
        description="Error code",
        examples=["MERCHANT_NOT_FOUND"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Merchant not found: 550e8400-e29b-41d4-a716-446655440000"],
    )
    request_id: Optional[str] = Field(
        None,
        description="Request ID for tracing",
    )
    details: Optional[dict[str, Any]] = Field(
        None,
        description="Error context such as the offending field or the current status",
        examples=[{"field": "routing_number"}],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "BANK_ACCOUNT_INVALID",
                    "message": "Invalid routing number format: expected 9 digits",
                    "request_id": "abc123",
                    "details": {"field": "routing_number"},
                }
            ]
        }
    }
