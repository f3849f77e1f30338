import logging
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from hotelops.core.config import settings
from hotelops.core.exceptions import ConcurrentUpdateError
from hotelops.core.service_utils import utcnow
from hotelops.models.booking import Advance, Booking, BookingStatus, PaymentMode
from hotelops.models.food_order import FoodPaymentStatus
from hotelops.models.invoice import RoomInvoice
from hotelops.models.room import RoomStatus
from hotelops.models.transaction import TransactionSource, TransactionType
from hotelops.services import pricing_engine
from hotelops.services.booking_lifecycle import ensure_transition
from hotelops.services.booking_service import BookingService
from hotelops.services.invoice_service import build_invoice
from hotelops.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Final settlement of a stay.

    Pricing, invoice, food settlement, room release and the ledger entry are
    committed together or not at all.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingService(db)
        self.ledger = LedgerService(db)

    async def checkout(
        self,
        booking_id: int,
        hotel_id: int,
        final_payment_mode: Optional[PaymentMode] = None,
    ) -> Tuple[Booking, RoomInvoice]:
        for attempt in range(1, settings.BOOKING_SAVE_RETRIES + 1):
            try:
                booking, invoice = await self._settle(
                    booking_id, hotel_id, final_payment_mode
                )
                await self.db.commit()
            except StaleDataError:
                await self.db.rollback()
                logger.warning(
                    f"Checkout of booking {booking_id} raced another update, retry {attempt}/{settings.BOOKING_SAVE_RETRIES}"
                )
                continue
            except Exception:
                await self.db.rollback()
                logger.error(f"Checkout of booking {booking_id} rolled back", exc_info=True)
                raise

            logger.info(
                f"Booking {booking_id} checked out (hotel {hotel_id}), invoice {invoice.invoice_number}, total {invoice.grand_total}"
            )
            return await self.bookings.get_for_hotel(booking_id, hotel_id), invoice

        raise ConcurrentUpdateError(booking_id)

    async def _settle(
        self,
        booking_id: int,
        hotel_id: int,
        final_payment_mode: Optional[PaymentMode],
    ) -> Tuple[Booking, RoomInvoice]:
        booking = await self.bookings.get_for_hotel(booking_id, hotel_id)
        ensure_transition(booking, BookingStatus.CHECKEDOUT)
        room = booking.room
        now = utcnow()

        food = await self.bookings.recompute(booking, room)

        if final_payment_mode is not None and booking.balance_due > 0:
            booking.advances.append(
                Advance(
                    amount=booking.balance_due,
                    mode=final_payment_mode,
                    date=now,
                    note="Final payment at checkout",
                )
            )
            pricing_engine.recompute(booking, room, food)
        booking.final_payment_mode = final_payment_mode

        invoice = build_invoice(booking, room, food, now)
        self.db.add(invoice)

        for order in food.orders:
            order.payment_status = FoodPaymentStatus.PAID

        booking.status = BookingStatus.CHECKEDOUT
        booking.actual_checkout_time = now
        booking.updated_at = now
        room.status = RoomStatus.AVAILABLE

        self.ledger.post_transaction(
            hotel_id=booking.hotel_id,
            type=TransactionType.CREDIT,
            source=TransactionSource.ROOM,
            amount=booking.grand_total,
            reference_id=str(booking.id),
            description=f"Room {room.number} checkout - {booking.guest_name or 'guest'}",
            payment_mode=final_payment_mode.value if final_payment_mode else None,
        )
        return booking, invoice
