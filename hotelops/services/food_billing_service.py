from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hotelops.core.config import settings
from hotelops.models.booking import Booking
from hotelops.models.food_order import FoodOrder, FoodOrderStatus, FoodPaymentStatus
from hotelops.services.pricing_engine import HUNDRED, ZERO, FoodSummary, money


def summarize_orders(
    orders: Iterable[FoodOrder],
    discount_percent: Optional[Decimal],
    gst_enabled: bool,
    gst_rate: Optional[Decimal] = None,
) -> FoodSummary:
    """Food bill: discount on the subtotal first, then GST on the discounted subtotal."""
    rate = gst_rate if gst_rate is not None else settings.GST_RATE
    orders = tuple(orders)
    percent = Decimal(str(discount_percent or 0))

    subtotal = money(sum((money(o.subtotal) for o in orders), ZERO))
    discount_amount = money(subtotal * percent / HUNDRED)
    discounted = money(subtotal - discount_amount)
    gst = money(discounted * rate) if gst_enabled and discounted > 0 else ZERO

    return FoodSummary(
        subtotal=subtotal,
        discount_percent=percent,
        discount_amount=discount_amount,
        gst=gst,
        total=money(discounted + gst),
        gst_enabled=gst_enabled,
        orders=orders,
    )


class FoodBillingService:
    """Read-only view of the restaurant orders a booking is liable for."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_orders_for_booking(self, booking: Booking) -> List[FoodOrder]:
        """Orders placed during the stay plus unpaid delivered orders transferred in."""
        in_window = and_(
            FoodOrder.created_at >= booking.check_in,
            FoodOrder.created_at < booking.check_out,
        )
        stmt = (
            select(FoodOrder)
            .where(
                FoodOrder.hotel_id == booking.hotel_id,
                FoodOrder.room_id == booking.room_id,
                FoodOrder.status != FoodOrderStatus.CANCELLED,
                or_(
                    in_window,
                    and_(
                        FoodOrder.payment_status == FoodPaymentStatus.PENDING,
                        FoodOrder.status == FoodOrderStatus.DELIVERED,
                    ),
                ),
            )
            .order_by(FoodOrder.created_at, FoodOrder.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_food_summary(self, booking: Booking) -> FoodSummary:
        orders = await self.get_orders_for_booking(booking)
        return summarize_orders(
            orders,
            booking.food_discount_percent,
            booking.food_gst_enabled is not False,
        )
