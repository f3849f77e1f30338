from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hotelops.core.service_utils import ensure_exists, ensure_same_hotel
from hotelops.models.booking import Booking
from hotelops.models.invoice import RoomInvoice
from hotelops.models.room import Room
from hotelops.services.pricing_engine import PRICING_ENGINE_VERSION, FoodSummary


def _iso(value):
    return value.isoformat() if value is not None else None


def _services_snapshot(booking: Booking) -> List[Dict[str, Any]]:
    return [
        {
            "name": s.name,
            "price": str(s.price),
            "days": list(s.days or []),
            "gst_enabled": s.gst_enabled,
        }
        for s in booking.services
    ]


def _advances_snapshot(booking: Booking) -> List[Dict[str, Any]]:
    return [
        {
            "amount": str(a.amount),
            "mode": a.mode.value if a.mode else None,
            "date": _iso(a.date),
            "note": a.note,
        }
        for a in booking.advances
    ]


def _food_snapshot(food: FoodSummary) -> List[Dict[str, Any]]:
    return [
        {
            "id": order.id,
            "source": order.source,
            "items": order.items,
            "subtotal": str(order.subtotal),
            "gst": str(order.gst),
            "total": str(order.total),
            "created_at": _iso(order.created_at),
        }
        for order in food.orders
    ]


def build_invoice(
    booking: Booking, room: Room, food: FoodSummary, issued_at: datetime
) -> RoomInvoice:
    """Freeze a priced booking into an invoice that can be printed on its own."""
    return RoomInvoice(
        hotel_id=booking.hotel_id,
        room_id=room.id,
        booking_id=booking.id,
        invoice_number=f"ROOM-{issued_at:%Y%m%d%H%M%S}-{booking.id}",
        pricing_version=PRICING_ENGINE_VERSION,
        room_number=room.number,
        room_type=room.type,
        guest_name=booking.guest_name,
        guest_phone=booking.guest_phone,
        guest_email=booking.guest_email,
        guest_city=booking.guest_city,
        guest_nationality=booking.guest_nationality,
        guest_address=booking.guest_address,
        adults=booking.adults,
        children=booking.children,
        company_name=booking.company_name,
        company_gstin=booking.company_gstin,
        company_address=booking.company_address,
        check_in=booking.check_in,
        check_out=booking.check_out,
        actual_checkout_time=issued_at,
        stay_nights=booking.nights,
        plan_code=booking.plan_code,
        pricing_type=booking.pricing_type.value,
        room_rate=booking.room_rate,
        room_base=booking.room_base,
        extras_base=booking.extras_base,
        extra_services=_services_snapshot(booking),
        discount_percent=booking.discount_percent,
        discount_scope=booking.discount_scope.value,
        discount_amount=booking.discount_amount,
        taxable=booking.taxable,
        gst_enabled=booking.gst_enabled,
        cgst=booking.cgst,
        sgst=booking.sgst,
        food_orders=_food_snapshot(food),
        food_subtotal=booking.food_subtotal,
        food_discount_percent=food.discount_percent,
        food_discount_amount=booking.food_discount_amount,
        food_gst=booking.food_gst,
        food_total=booking.food_total,
        food_gst_enabled=food.gst_enabled,
        round_off_amount=booking.round_off_amount,
        grand_total=booking.grand_total,
        advances=_advances_snapshot(booking),
        advance_paid=booking.advance_paid,
        balance_due=booking.balance_due,
        final_payment_mode=(
            booking.final_payment_mode.value if booking.final_payment_mode else None
        ),
        final_payment_received=booking.final_payment_received,
        final_payment_amount=booking.final_payment_amount,
        created_at=issued_at,
    )


class InvoiceService:
    """Stored checkout snapshots. Served as written, never recomputed."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, invoice_id: int, hotel_id: int) -> RoomInvoice:
        invoice = await self.db.get(RoomInvoice, invoice_id)
        invoice = ensure_exists(invoice, "Invoice", invoice_id)
        return ensure_same_hotel(invoice, hotel_id, "Invoice")

    async def get_for_booking(self, booking_id: int, hotel_id: int) -> RoomInvoice:
        """Invoice issued at the checkout of a booking"""
        stmt = select(RoomInvoice).where(RoomInvoice.booking_id == booking_id)
        result = await self.db.execute(stmt)
        invoice = ensure_exists(result.scalar_one_or_none(), "Invoice")
        return ensure_same_hotel(invoice, hotel_id, "Invoice")

    async def list_for_room(
        self, room_id: int, hotel_id: int, skip: int = 0, limit: int = 100
    ) -> List[RoomInvoice]:
        stmt = (
            select(RoomInvoice)
            .where(RoomInvoice.room_id == room_id, RoomInvoice.hotel_id == hotel_id)
            .order_by(RoomInvoice.created_at.desc(), RoomInvoice.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
