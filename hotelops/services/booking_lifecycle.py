"""Booking status transitions and the mutation guard."""

from typing import Dict, FrozenSet

from hotelops.core.exceptions import BookingLockedError, ValidationError
from hotelops.models.booking import Booking, BookingStatus

TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.OCCUPIED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.OCCUPIED: frozenset(
        {BookingStatus.CHECKEDOUT, BookingStatus.CANCELLED}
    ),
    BookingStatus.BLOCKED: frozenset(
        {BookingStatus.CANCELLED, BookingStatus.OCCUPIED}
    ),
    BookingStatus.MAINTENANCE: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CHECKEDOUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}

# Statuses whose billing inputs may still change
MUTABLE_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.OCCUPIED})

# Statuses whose stored totals are final and served without recompute
FROZEN_STATUSES = frozenset({BookingStatus.CHECKEDOUT, BookingStatus.CANCELLED})


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def ensure_not_checked_out(booking: Booking) -> None:
    if booking.status == BookingStatus.CHECKEDOUT:
        raise BookingLockedError(booking.id, booking.status.value)


def ensure_mutable(booking: Booking) -> None:
    """Guard for billing, service, advance and guest edits."""
    ensure_not_checked_out(booking)
    if booking.status not in MUTABLE_STATUSES:
        raise ValidationError(
            f"Booking {booking.id} is {booking.status.value} and cannot be edited",
            "status",
            booking.status.value,
        )


def ensure_transition(booking: Booking, target: BookingStatus) -> None:
    ensure_not_checked_out(booking)
    if not can_transition(booking.status, target):
        raise ValidationError(
            f"Cannot move booking {booking.id} from {booking.status.value} to {target.value}",
            "status",
            booking.status.value,
        )
