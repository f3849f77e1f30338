"""
Reservation admission.

Decides whether a ``[check_in, check_out)`` window may be granted for a room.
Check-out is exclusive: a stay ending at T never conflicts with one starting
at T. Every status except CANCELLED claims the room, admin holds included.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hotelops.core.exceptions import ConflictError, ValidationError
from hotelops.core.service_utils import to_naive_utc, validate_date_range
from hotelops.models.booking import Booking, BookingStatus
from hotelops.services.room_service import RoomService

logger = logging.getLogger(__name__)

ROOM_ALREADY_BOOKED = "ROOM_ALREADY_BOOKED"
ROOM_ALREADY_BLOCKED = "ROOM_ALREADY_BLOCKED"

RELEASED_STATUSES = (BookingStatus.CANCELLED,)


@dataclass
class ExtensionCheck:
    allowed: bool
    warning: bool = False
    conflicting_booking: Optional[Booking] = None


class ReservationService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.rooms = RoomService(db)

    def _overlap_conditions(
        self,
        hotel_id: int,
        room_id: int,
        check_in: datetime,
        check_out: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> list:
        conditions = [
            Booking.hotel_id == hotel_id,
            Booking.room_id == room_id,
            Booking.status.notin_(RELEASED_STATUSES),
            and_(Booking.check_in < check_out, Booking.check_out > check_in),
        ]
        if exclude_booking_id:
            conditions.append(Booking.id != exclude_booking_id)
        return conditions

    async def find_conflicts(
        self,
        hotel_id: int,
        room_id: int,
        check_in: datetime,
        check_out: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> List[Booking]:
        stmt = (
            select(Booking)
            .where(
                *self._overlap_conditions(
                    hotel_id, room_id, check_in, check_out, exclude_booking_id
                )
            )
            .order_by(Booking.check_in)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def check_availability(
        self,
        hotel_id: int,
        room_id: int,
        check_in: datetime,
        check_out: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        """Check if the room is free for the given window"""
        check_in, check_out = to_naive_utc(check_in), to_naive_utc(check_out)
        validate_date_range(check_in, check_out)
        stmt = select(func.count(Booking.id)).where(
            *self._overlap_conditions(
                hotel_id, room_id, check_in, check_out, exclude_booking_id
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar() == 0

    async def ensure_available(
        self,
        hotel_id: int,
        room_id: int,
        check_in: datetime,
        check_out: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> None:
        """Lock the room row, then reject the window if anything claims it."""
        check_in, check_out = to_naive_utc(check_in), to_naive_utc(check_out)
        validate_date_range(check_in, check_out)
        await self.rooms.lock(room_id)

        conflicts = await self.find_conflicts(
            hotel_id, room_id, check_in, check_out, exclude_booking_id
        )
        if conflicts:
            blocking = conflicts[0]
            logger.warning(
                f"Room {room_id} rejected for {check_in} - {check_out}: overlaps booking {blocking.id}"
            )
            raise ConflictError(
                "Room already booked for the selected dates",
                code=ROOM_ALREADY_BOOKED,
                conflicting_entity="Booking",
                conflicting_id=blocking.id,
            )

    async def ensure_blockable(
        self, hotel_id: int, room_id: int, check_in: datetime, check_out: datetime
    ) -> None:
        """Same rule as admission; an existing block or maintenance hold also conflicts."""
        check_in, check_out = to_naive_utc(check_in), to_naive_utc(check_out)
        validate_date_range(check_in, check_out)
        await self.rooms.lock(room_id)

        conflicts = await self.find_conflicts(hotel_id, room_id, check_in, check_out)
        if conflicts:
            blocking = conflicts[0]
            held = blocking.status in (BookingStatus.BLOCKED, BookingStatus.MAINTENANCE)
            raise ConflictError(
                "Room is already blocked for the selected dates"
                if held
                else "Room already booked for the selected dates",
                code=ROOM_ALREADY_BLOCKED if held else ROOM_ALREADY_BOOKED,
                conflicting_entity="Booking",
                conflicting_id=blocking.id,
            )

    async def list_available_rooms(
        self,
        hotel_id: int,
        check_in: datetime,
        check_out: datetime,
        room_type: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Rooms free for the window, with same-day turnaround metadata.

        A room whose previous stay checks out on the requested check-in date
        (at or before the requested time) is still available, flagged with
        ``has_same_day_checkout`` and that stay's ``checkout_time``.
        """
        check_in, check_out = to_naive_utc(check_in), to_naive_utc(check_out)
        validate_date_range(check_in, check_out)

        day_start = check_in.replace(hour=0, minute=0, second=0, microsecond=0)
        stmt = select(Booking.room_id, Booking.check_in, Booking.check_out).where(
            Booking.hotel_id == hotel_id,
            Booking.status.notin_(RELEASED_STATUSES),
            Booking.check_in < check_out,
            Booking.check_out >= day_start,
        )
        result = await self.db.execute(stmt)

        blocked = set()
        same_day_checkout: Dict[int, datetime] = {}
        for room_id, existing_in, existing_out in result.all():
            if existing_out <= check_in:
                if existing_out.date() == check_in.date():
                    previous = same_day_checkout.get(room_id)
                    if previous is None or existing_out > previous:
                        same_day_checkout[room_id] = existing_out
                continue
            if existing_in < check_out and existing_out > check_in:
                blocked.add(room_id)

        rooms = await self.rooms.list_for_hotel(hotel_id, room_type)
        return [
            {
                "room": room,
                "available": True,
                "has_same_day_checkout": room.id in same_day_checkout,
                "checkout_time": same_day_checkout.get(room.id),
            }
            for room in rooms
            if room.id not in blocked
        ]

    async def validate_extension(
        self, booking: Booking, new_check_out: datetime
    ) -> ExtensionCheck:
        """
        Check whether ``booking`` may be extended to ``new_check_out``.

        The nearest later stay on the room decides: starting before the new
        check-out is a hard conflict, starting later on the same calendar day
        is allowed with a warning.
        """
        new_check_out = to_naive_utc(new_check_out)
        if new_check_out <= booking.check_out:
            raise ValidationError(
                "New checkout must be after the current checkout",
                "new_check_out",
                str(new_check_out),
            )

        await self.rooms.lock(booking.room_id)

        stmt = (
            select(Booking)
            .where(
                Booking.hotel_id == booking.hotel_id,
                Booking.room_id == booking.room_id,
                Booking.id != booking.id,
                Booking.status.notin_(RELEASED_STATUSES),
                Booking.check_out > booking.check_out,
            )
            .order_by(Booking.check_in, Booking.id)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        following = result.scalar_one_or_none()

        if following is None:
            return ExtensionCheck(allowed=True)

        if following.check_in < new_check_out:
            logger.warning(
                f"Extension of booking {booking.id} to {new_check_out} blocked by booking {following.id}"
            )
            raise ConflictError(
                f"Room already booked from {following.check_in} (booking {following.id})",
                code=ROOM_ALREADY_BOOKED,
                conflicting_entity="Booking",
                conflicting_id=following.id,
            )

        if following.check_in.date() == new_check_out.date():
            return ExtensionCheck(allowed=True, warning=True, conflicting_booking=following)

        return ExtensionCheck(allowed=True)
