from datetime import datetime
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from hotelops.core.query_builders import BookingQueryBuilder
from hotelops.core.service_utils import to_naive_utc, validate_date_range
from hotelops.models.booking import Booking, BookingStatus
from hotelops.schemas.booking import CalendarEvent, CalendarPayment
from hotelops.services.booking_lifecycle import FROZEN_STATUSES
from hotelops.services.booking_service import BookingService


def payment_status(booking: Booking) -> str:
    """DUE before any advance, PARTIAL while something is outstanding, then PAID."""
    if booking.balance_due <= 0:
        return "PAID"
    if booking.advance_paid > 0:
        return "PARTIAL"
    return "DUE"


class CalendarService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingService(db)

    async def get_calendar_events(
        self, hotel_id: int, start: datetime, end: datetime
    ) -> List[CalendarEvent]:
        """Get calendar events (bookings) for calendar display"""
        start, end = to_naive_utc(start), to_naive_utc(end)
        validate_date_range(start, end, "from", "to")

        stmt = (
            BookingQueryBuilder(Booking)
            .filter_by_hotel(hotel_id)
            .exclude_status(BookingStatus.CANCELLED)
            .overlapping(start, end)
            .order_by(Booking.check_in)
            .build()
        )
        result = await self.db.execute(stmt)
        bookings = result.scalars().all()

        events = []
        for booking in bookings:
            if booking.status not in FROZEN_STATUSES:
                await self.bookings.recompute(booking)

            guest = booking.guest_name or booking.status.value
            event = CalendarEvent(
                id=booking.id,
                title=f"{guest} ({booking.adults + booking.children})",
                start=booking.check_in,
                end=booking.check_out,
                room_id=booking.room_id,
                room_number=booking.room.number if booking.room else None,
                guest_name=booking.guest_name,
                status=booking.status,
                payment=CalendarPayment(
                    status=payment_status(booking),
                    grand_total=booking.grand_total,
                    advance_paid=booking.advance_paid,
                    balance_due=booking.balance_due,
                ),
            )
            events.append(event)

        return events
