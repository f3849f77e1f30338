"""
Service layer utility functions.

This module provides centralized utilities for common service layer patterns,
eliminating code duplication and ensuring consistent behavior across services.
"""

from datetime import datetime, timezone
from typing import Any, Optional, TypeVar

from hotelops.core.exceptions import (
    AccessDeniedError,
    EntityNotFoundError,
    ValidationError,
)

T = TypeVar("T")


def ensure_exists(
    entity: Optional[T],
    entity_name: str,
    entity_id: Optional[int] = None,
) -> T:
    """
    Ensure an entity exists, raising EntityNotFoundError if it doesn't.

    Args:
        entity: The entity to check (can be None)
        entity_name: Human-readable name of the entity type (e.g., "Booking", "Room")
        entity_id: Optional ID of the entity for more specific error messages

    Returns:
        The entity if it exists

    Raises:
        EntityNotFoundError: If the entity is None
    """
    if entity is None:
        raise EntityNotFoundError(entity_name, entity_id)
    return entity


def ensure_same_hotel(entity: T, hotel_id: Optional[int], entity_name: str) -> T:
    """
    Ensure an entity belongs to the requesting hotel.

    A ``hotel_id`` of None skips the check (internal callers).

    Raises:
        AccessDeniedError: If the entity belongs to another hotel
    """
    if hotel_id is not None and entity.hotel_id != hotel_id:
        raise AccessDeniedError(entity_name, hotel_id)
    return entity


def validate_date_range(
    start: Any,
    end: Any,
    start_field: str = "check_in",
    end_field: str = "check_out",
) -> None:
    """
    Validate that end is strictly after start.

    Raises:
        ValidationError: If end is not after start
    """
    if end <= start:
        raise ValidationError(
            f"{end_field} must be after {start_field}",
            end_field,
            f"{end} (start: {start})",
        )


def utcnow() -> datetime:
    """Current time as naive UTC, the storage convention for every timestamp column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert timezone-aware datetimes to naive UTC, as stored in the database."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

