"""
Common response schemas for API endpoints.

This module defines Pydantic models for endpoint envelopes and error bodies,
ensuring clear Swagger documentation for frontend developers.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from hotelops.schemas.billing import InvoiceResponse
from hotelops.schemas.booking import BookingResponse


class MessageResponse(BaseModel):
    """Standard response for operations that return a success message."""

    success: bool = True
    message: str = Field(
        ...,
        description="Success message describing the completed operation",
        example="Booking cancelled",
    )


class CheckoutResponse(MessageResponse):
    """Response schema for checkout: the closed booking and its invoice."""

    booking: BookingResponse
    invoice: InvoiceResponse


class ErrorResponse(BaseModel):
    """Error body returned by every exception handler."""

    success: bool = Field(False, description="Always false for errors")
    message: str = Field(
        ...,
        description="Human-readable error message",
        example="Room already booked for the selected dates",
    )
    error_type: Optional[str] = Field(
        None, description="Error type identifier", example="conflict_error"
    )
    code: Optional[str] = Field(
        None,
        description="Application-specific error code",
        example="ROOM_ALREADY_BOOKED",
    )
    details: Optional[Dict[str, Any]] = Field(
        None, description="Structured error context"
    )


class HealthCheckResponse(BaseModel):
    """Response schema for health check endpoints."""

    status: str = Field(..., description="Service health status", example="healthy")
    version: str = Field(..., description="API version", example="1.0.0")
