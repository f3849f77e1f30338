import logging

from sqlalchemy.ext.asyncio import AsyncSession

from hotelops.core.exceptions import EntityNotFoundError
from hotelops.core.service_utils import to_naive_utc, utcnow
from hotelops.models.booking import Advance, Booking
from hotelops.schemas.booking import AdvanceCreate
from hotelops.services import pricing_engine
from hotelops.services.booking_lifecycle import ensure_mutable
from hotelops.services.booking_service import BookingService

logger = logging.getLogger(__name__)


class AdvanceLedgerService:
    """
    Advance payments recorded against a booking before checkout.

    ``advance_paid`` is never written directly: the pricing engine derives it
    from these entries on every save.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingService(db)

    async def add_advance(
        self, booking_id: int, hotel_id: int, data: AdvanceCreate
    ) -> Booking:
        async def mutation(booking: Booking) -> None:
            ensure_mutable(booking)
            # Measure against the live balance, not the stored one
            await self.bookings.recompute(booking)
            pricing_engine.ensure_advance_fits(booking, data.amount)
            booking.advances.append(
                Advance(
                    amount=pricing_engine.money(data.amount),
                    mode=data.mode,
                    note=data.note,
                    date=to_naive_utc(data.date) or utcnow(),
                )
            )

        booking = await self.bookings.mutate(booking_id, hotel_id, mutation)
        logger.info(
            f"Advance {data.amount} ({data.mode.value}) added to booking {booking_id} (hotel {hotel_id}), balance {booking.balance_due}"
        )
        return booking

    async def remove_advance(
        self, booking_id: int, hotel_id: int, advance_id: int
    ) -> Booking:
        async def mutation(booking: Booking) -> None:
            ensure_mutable(booking)
            advance = next((a for a in booking.advances if a.id == advance_id), None)
            if advance is None:
                raise EntityNotFoundError("Advance", advance_id)
            booking.advances.remove(advance)

        booking = await self.bookings.mutate(booking_id, hotel_id, mutation)
        logger.info(
            f"Advance {advance_id} removed from booking {booking_id} (hotel {hotel_id}), balance {booking.balance_due}"
        )
        return booking
