"""
Domain exceptions for the hotel operations backend.

These exceptions represent business domain errors and are converted to HTTP responses
by the exception handler middleware. This separates business logic concerns from HTTP concerns.
"""

from typing import Optional


class DomainException(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class EntityNotFoundError(DomainException):
    """Raised when a requested entity is not found in the database."""

    def __init__(self, entity_name: str, entity_id: Optional[int] = None):
        self.entity_name = entity_name
        self.entity_id = entity_id

        if entity_id is not None:
            message = f"{entity_name} with id {entity_id} not found"
        else:
            message = f"{entity_name} not found"

        super().__init__(message, {"entity_name": entity_name, "entity_id": entity_id})


class AccessDeniedError(DomainException):
    """Raised when an entity belongs to another tenant."""

    def __init__(self, entity_name: str, hotel_id: Optional[int] = None):
        self.entity_name = entity_name
        self.hotel_id = hotel_id
        super().__init__(
            f"{entity_name} does not belong to this hotel",
            {"entity_name": entity_name, "hotel_id": hotel_id},
        )


class ValidationError(DomainException):
    """Raised when business rule validation fails."""

    def __init__(
        self, message: str, field: Optional[str] = None, value: Optional[str] = None
    ):
        self.field = field
        self.value = value
        super().__init__(message, {"field": field, "value": value})


class BookingLockedError(ValidationError):
    """Raised when a mutation targets a booking in a terminal state."""

    def __init__(self, booking_id: int, status: str):
        self.booking_id = booking_id
        self.status = status
        super().__init__(
            f"Booking {booking_id} is {status} and can no longer be modified",
            "status",
            status,
        )


class ConflictError(DomainException):
    """Raised when an operation conflicts with existing data or business rules."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        conflicting_entity: Optional[str] = None,
        conflicting_id: Optional[int] = None,
    ):
        self.code = code
        self.conflicting_entity = conflicting_entity
        self.conflicting_id = conflicting_id
        super().__init__(
            message,
            {
                "conflicting_entity": conflicting_entity,
                "conflicting_id": conflicting_id,
            },
        )


class ConcurrentUpdateError(ConflictError):
    """Raised when optimistic concurrency retries are exhausted."""

    def __init__(self, booking_id: int):
        super().__init__(
            f"Booking {booking_id} was modified concurrently, please retry",
            code="CONCURRENT_UPDATE",
            conflicting_entity="Booking",
            conflicting_id=booking_id,
        )

